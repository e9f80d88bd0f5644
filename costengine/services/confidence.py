"""Confidence Scorer.

Heuristic score combining input completeness and comparable-match
quality. Not a statistical probability; 95 is a hard ceiling.
"""

from typing import Sequence

from costengine.models.estimate import ComparableProject
from costengine.models.project import Project
from costengine.services.comparable_matcher import round_half_up

BASE_CONFIDENCE = 50
MAX_CONFIDENCE = 95
MIN_CONFIDENCE = 0

SQUARE_FOOTAGE_BONUS = 10
ADDRESS_BONUS = 5
STORIES_BONUS = 5
START_DATE_BONUS = 5
MAX_COMPARABLE_BONUS = 20


def completeness_bonus(project: Project) -> int:
    """Points for supplied project details (max 25)."""
    bonus = 0
    if project.specifications.has_square_footage:
        bonus += SQUARE_FOOTAGE_BONUS
    if project.location.address:
        bonus += ADDRESS_BONUS
    if project.specifications.has_stories:
        bonus += STORIES_BONUS
    if project.timeline.estimated_start_date is not None:
        bonus += START_DATE_BONUS
    return bonus


def comparable_bonus(comparables: Sequence[ComparableProject]) -> float:
    """min(20, average similarity / 5); 0 when there are no comparables."""
    if not comparables:
        return 0.0
    average = sum(c.similarity or 0 for c in comparables) / len(comparables)
    return min(MAX_COMPARABLE_BONUS, average / 5)


def calculate_confidence(project: Project, comparables: Sequence[ComparableProject]) -> int:
    """
    Score confidence in an estimate.

    Args:
        project: Project that was estimated
        comparables: Ranked comparables returned by the matcher

    Returns:
        Integer confidence in [0, 95]
    """
    score = BASE_CONFIDENCE + completeness_bonus(project) + comparable_bonus(comparables)
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, round_half_up(score)))
