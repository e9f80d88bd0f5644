"""Unit tests for the command-line entry point."""

import json

import pytest
import structlog
from unittest.mock import patch

from costengine.cli import main
from costengine.config.settings import Settings
from costengine.services.insight_service import FallbackInsightProvider
from tests.fixtures.mock_project_data import OAKLAND_COMMERCIAL_PAYLOAD


@pytest.fixture
def cli_env():
    """Memory store, fallback insight, default structlog afterwards."""
    config = Settings(comparable_store_backend="memory", rate_tables_path=None, log_level="WARNING")
    with patch('costengine.cli.settings', config), \
            patch('costengine.services.estimate_assembler.default_insight_provider',
                  return_value=FallbackInsightProvider()):
        yield config
    structlog.reset_defaults()


class TestCli:
    """Tests for costengine.cli.main."""

    def test_writes_estimate(self, cli_env, tmp_path):
        project_path = tmp_path / "project.json"
        project_path.write_text(json.dumps(OAKLAND_COMMERCIAL_PAYLOAD))
        out_path = tmp_path / "estimate.json"

        assert main([str(project_path), "--out", str(out_path)]) == 0

        estimate = json.loads(out_path.read_text())
        assert estimate["projectId"] == "proj-oakland-001"
        assert estimate["status"] == "draft"
        assert estimate["costBreakdown"]["total"] > 0

    def test_invalid_project(self, cli_env, tmp_path, capsys):
        project_path = tmp_path / "project.json"
        project_path.write_text(json.dumps({"title": "No category"}))

        assert main([str(project_path)]) == 1
        assert "VALIDATION_ERROR" in capsys.readouterr().err

    def test_unreadable_file(self, cli_env, tmp_path):
        assert main([str(tmp_path / "missing.json")]) == 2
