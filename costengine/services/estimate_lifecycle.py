"""Estimate lifecycle.

Estimates are immutable, so every status change returns a new Estimate.
Allowed moves:

    draft -> sent -> accepted | rejected
    draft | sent -> expired
"""

from datetime import datetime, timezone
from typing import Dict, FrozenSet, Optional

import structlog

from costengine.config.errors import EstimateStateError
from costengine.models.estimate import Estimate, EstimateStatus

logger = structlog.get_logger(__name__)

ALLOWED_TRANSITIONS: Dict[EstimateStatus, FrozenSet[EstimateStatus]] = {
    EstimateStatus.DRAFT: frozenset({EstimateStatus.SENT, EstimateStatus.EXPIRED}),
    EstimateStatus.SENT: frozenset({
        EstimateStatus.ACCEPTED,
        EstimateStatus.REJECTED,
        EstimateStatus.EXPIRED,
    }),
    EstimateStatus.ACCEPTED: frozenset(),
    EstimateStatus.REJECTED: frozenset(),
    EstimateStatus.EXPIRED: frozenset(),
}


def can_transition(current: EstimateStatus, requested: EstimateStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS[current]


def transition(
    estimate: Estimate,
    status: EstimateStatus,
    now: Optional[datetime] = None,
) -> Estimate:
    """
    Move an estimate to a new status.

    Once ``now`` is past the validity window the only allowed move is
    to expired.

    Args:
        estimate: Current estimate (left unchanged)
        status: Requested status
        now: Current time; skips the validity check when None

    Returns:
        Copy of the estimate carrying the new status

    Raises:
        EstimateStateError: If the move is not allowed
    """
    status = EstimateStatus(status)
    stale = now is not None and is_expired(estimate, now)
    if not can_transition(estimate.status, status) or (stale and status != EstimateStatus.EXPIRED):
        logger.warning(
            "estimate_transition_rejected",
            estimate_id=estimate.id,
            current=estimate.status.value,
            requested=status.value,
        )
        raise EstimateStateError(estimate.id, estimate.status.value, status.value)

    logger.info(
        "estimate_status_changed",
        estimate_id=estimate.id,
        previous=estimate.status.value,
        status=status.value,
    )
    return estimate.model_copy(update={"status": status})


def is_expired(estimate: Estimate, now: datetime) -> bool:
    """True once ``now`` is past the validity window.

    Naive datetimes on either side are read as UTC.
    """
    return _as_utc(now) > _as_utc(estimate.valid_until)


def expire_if_stale(estimate: Estimate, now: datetime) -> Estimate:
    """Expire an open (draft or sent) estimate whose window has passed.

    Anything else is returned unchanged.
    """
    if is_expired(estimate, now) and can_transition(estimate.status, EstimateStatus.EXPIRED):
        return transition(estimate, EstimateStatus.EXPIRED, now)
    return estimate


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
