"""Comparable Project Matcher.

Scores historical projects against a target project and returns the
top matches. Scoring starts at 100 and subtracts:

- size:     min(30, |size - target| / target x 100)
- location: 20 when "City, ST" differs from the target's
- age:      min(10, years since completion x 2)

The result is clamped at 0 and rounded half-up to an integer. Scores are
computed fresh for every request; store records are never mutated.
"""

import math
from datetime import date, datetime
from typing import List, Sequence

import structlog

from costengine.models.estimate import ComparableProject

logger = structlog.get_logger(__name__)

MAX_SIZE_PENALTY = 30.0
LOCATION_PENALTY = 20.0
MAX_AGE_PENALTY = 10.0
AGE_PENALTY_PER_YEAR = 2.0
DAYS_PER_YEAR = 365.0
DEFAULT_LIMIT = 5


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def years_since(completed: date, now: datetime) -> float:
    """Age in years; completion dates in the future count as age 0."""
    days = (now.date() - completed).days
    return max(0.0, days / DAYS_PER_YEAR)


def score_comparable(
    comparable: ComparableProject,
    target_size: float,
    target_location: str,
    now: datetime,
) -> int:
    """
    Compute the similarity (0-100) of one comparable to the target.

    Args:
        comparable: Historical record
        target_size: Target square footage (must be positive)
        target_location: Target "City, ST" string
        now: Reference time for the age penalty

    Returns:
        Integer similarity score
    """
    similarity = 100.0

    size_diff = abs(comparable.size - target_size)
    similarity -= min(MAX_SIZE_PENALTY, size_diff / target_size * 100)

    if comparable.location != target_location:
        similarity -= LOCATION_PENALTY

    age_years = years_since(comparable.completed_date, now)
    similarity -= min(MAX_AGE_PENALTY, age_years * AGE_PENALTY_PER_YEAR)

    return max(0, round_half_up(similarity))


def find_comparables(
    candidates: Sequence[ComparableProject],
    target_size: float,
    target_location: str,
    now: datetime,
    limit: int = DEFAULT_LIMIT,
) -> List[ComparableProject]:
    """
    Rank same-category candidates by similarity.

    Candidates must already be filtered to the target's category. Ties keep
    the store's original order.

    Args:
        candidates: Historical records for the target's category
        target_size: Target square footage
        target_location: Target "City, ST" string
        now: Reference time
        limit: Maximum number of results

    Returns:
        Up to ``limit`` scored copies in descending similarity order
    """
    if not candidates:
        return []

    scored = [
        comparable.model_copy(update={
            "similarity": score_comparable(comparable, target_size, target_location, now)
        })
        for comparable in candidates
    ]
    ranked = sorted(scored, key=lambda c: c.similarity, reverse=True)

    logger.debug(
        "comparables_ranked",
        candidates=len(candidates),
        returned=min(limit, len(ranked)),
        best=ranked[0].similarity,
    )
    return ranked[:limit]
