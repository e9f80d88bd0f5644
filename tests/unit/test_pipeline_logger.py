"""Unit tests for pipeline logging helpers."""

import structlog

from costengine.utils.log_config import configure_logging
from costengine.utils.pipeline_logger import (
    _create_banner,
    _format_json,
    log_estimate_complete,
    log_stage,
)


class TestPipelineLogger:
    """Tests for banner output."""

    def test_banner_width(self):
        banner = _create_banner("=", "TEST")

        assert len(banner) == 80
        assert " TEST " in banner

    def test_format_json_falls_back_to_str(self):
        assert _format_json({"a": 1}) == '{\n  "a": 1\n}'
        assert _format_json({1: object()}).startswith("{")

    def test_stage_quiet_by_default(self, capsys):
        log_stage("adjustments", "proj-1", regional=1.15)
        assert "ADJUSTMENTS" not in capsys.readouterr().out

    def test_complete_banner(self, capsys):
        log_estimate_complete(
            estimate_id="EST-1",
            project_id="proj-1",
            total=1234567.891,
            confidence=78,
            risks=["cost", "schedule"],
            duration_ms=12,
            verbose=True,
        )

        out = capsys.readouterr().out
        assert "$1,234,567.89" in out
        assert "cost, schedule" in out

    def test_configure_logging(self):
        configure_logging("DEBUG")
        configure_logging("not-a-level")

        assert structlog.is_configured()
        structlog.reset_defaults()
