"""Utility modules for the cost engine."""

from costengine.utils.log_config import configure_logging
from costengine.utils.pipeline_logger import (
    log_estimate_start,
    log_estimate_complete,
    log_fallback_used,
    log_stage,
)

__all__ = [
    "configure_logging",
    "log_estimate_start",
    "log_estimate_complete",
    "log_fallback_used",
    "log_stage",
]
