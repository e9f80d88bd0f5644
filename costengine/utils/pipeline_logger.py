"""Estimation pipeline logger.

Structured events for every run, plus optional banner output that stands
out in a console when ``verbose`` is set (local runs and demos).
"""

import json
from datetime import datetime
from typing import Any, Dict, List

import structlog

logger = structlog.get_logger(__name__)

BANNER_WIDTH = 80
PIPELINE_BANNER_CHAR = "█"
STAGE_BANNER_CHAR = "─"


def _create_banner(char: str, text: str, width: int = BANNER_WIDTH) -> str:
    """Create a centered banner with given character."""
    text_with_spaces = f" {text} "
    padding = (width - len(text_with_spaces)) // 2
    return char * padding + text_with_spaces + char * (width - padding - len(text_with_spaces))


def _format_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format dictionary as pretty JSON string."""
    try:
        return json.dumps(data, indent=indent, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(data)


def log_estimate_start(
    project_id: str,
    category: str,
    now: datetime,
    verbose: bool = False,
) -> None:
    """Log the start of an estimation run."""
    if verbose:
        print("\n")
        print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
        print(_create_banner(PIPELINE_BANNER_CHAR, "COST ESTIMATE STARTED"))
        print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
        print(f"║ Project ID : {project_id}")
        print(f"║ Category   : {category}")
        print(f"║ Timestamp  : {now.isoformat()}")
        print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)

    logger.info(
        "estimate_started",
        project_id=project_id,
        category=category,
    )


def log_stage(stage: str, project_id: str, verbose: bool = False, **details: Any) -> None:
    """Log the result of one pipeline stage."""
    if verbose:
        print(_create_banner(STAGE_BANNER_CHAR, f"▶ {stage.upper()}"))
        for line in _format_json(details).split("\n"):
            print(f"  {line}")

    logger.debug(f"stage_{stage}", project_id=project_id, **details)


def log_fallback_used(stage: str, project_id: str, reason: str) -> None:
    """Log that a stage degraded to its documented default."""
    logger.warning(
        "estimate_fallback_used",
        stage=stage,
        project_id=project_id,
        reason=reason,
    )


def log_estimate_complete(
    estimate_id: str,
    project_id: str,
    total: float,
    confidence: int,
    risks: List[str],
    duration_ms: int,
    verbose: bool = False,
) -> None:
    """Log a completed estimate with a summary."""
    if verbose:
        print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
        print(_create_banner(PIPELINE_BANNER_CHAR, "✓ ESTIMATE ASSEMBLED"))
        print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
        print(f"║ Estimate ID : {estimate_id}")
        print(f"║ Total       : ${total:,.2f}")
        print(f"║ Confidence  : {confidence}%")
        print(f"║ Risks       : {', '.join(risks) if risks else 'None'}")
        print(f"║ Duration    : {duration_ms:,} ms")
        print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
        print("\n")

    logger.info(
        "estimate_assembled",
        estimate_id=estimate_id,
        project_id=project_id,
        total=round(total, 2),
        confidence=confidence,
        risk_count=len(risks),
        duration_ms=duration_ms,
    )
