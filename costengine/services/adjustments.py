"""Adjustment Pipeline.

Three independent resolvers feed one combiner:

- Regional: exact "ST:CITY" key, then "ST", then the default (1.00)
- Seasonal: calendar month bucketed into winter/spring/summer/fall
- Complexity: 1.0 plus bonuses for height, special requirements, green
  certifications and insight challenges, clamped to [1.0, 2.0]

The combiner scales materials and subcontractors by
regional x seasonal x complexity, labor and equipment by regional only, and
leaves indirect costs untouched. Aggregates are derived from the adjusted
line items by CostBreakdown itself; the total is never adjusted directly.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

import structlog

from costengine.models.cost_breakdown import CostBreakdown
from costengine.models.estimate import Season
from costengine.models.project import Project, ProjectLocation
from costengine.services.rate_tables import RateTables

logger = structlog.get_logger(__name__)

MIN_COMPLEXITY = 1.0
MAX_COMPLEXITY = 2.0

# Complexity bonuses. Both story thresholds can apply to the same project.
STORIES_OVER_3_BONUS = 0.1
STORIES_OVER_5_BONUS = 0.2
SPECIAL_REQUIREMENT_BONUS = 0.05
GREEN_CERTIFICATION_BONUS = 0.10
CHALLENGE_BONUS = 0.03


@dataclass(frozen=True)
class AdjustmentFactors:
    """Resolved multipliers for one estimate."""
    regional: float
    seasonal: float
    complexity: float
    season: Season

    @property
    def total(self) -> float:
        return self.regional * self.seasonal * self.complexity

    @property
    def regional_percent(self) -> float:
        return (self.regional - 1) * 100

    @property
    def seasonal_percent(self) -> float:
        return (self.seasonal - 1) * 100


# =============================================================================
# Resolvers
# =============================================================================


def resolve_regional_multiplier(location: ProjectLocation, rates: RateTables) -> float:
    """
    Look up the regional multiplier for a location.

    Args:
        location: Project location (city/state may be missing)
        rates: Rate tables in use

    Returns:
        City multiplier, else state multiplier, else the default.
    """
    if not location.state:
        return rates.default_regional_multiplier

    if location.city:
        city_key = RateTables.regional_key(location.state, location.city)
        if city_key in rates.regional_multipliers:
            return rates.regional_multipliers[city_key]

    state_key = RateTables.regional_key(location.state)
    if state_key in rates.regional_multipliers:
        return rates.regional_multipliers[state_key]

    return rates.default_regional_multiplier


def season_for_month(month: int) -> Season:
    """Map a calendar month (1-12) to its season."""
    if month in (12, 1, 2):
        return Season.WINTER
    if month in (3, 4, 5):
        return Season.SPRING
    if month in (6, 7, 8):
        return Season.SUMMER
    return Season.FALL


def resolve_seasonal_multiplier(now: datetime, rates: RateTables) -> float:
    return rates.seasonal_multipliers[season_for_month(now.month)]


def resolve_complexity_factor(
    project: Project,
    challenges: Optional[Sequence[str]] = None,
) -> float:
    """
    Derive the complexity factor for a project.

    Args:
        project: Project being estimated (stories default to 1)
        challenges: Challenges reported by the requirement insight

    Returns:
        Complexity factor in [1.0, 2.0]
    """
    specs = project.specifications
    stories = specs.stories or 1

    factor = 1.0
    if stories > 3:
        factor += STORIES_OVER_3_BONUS
    if stories > 5:
        factor += STORIES_OVER_5_BONUS

    factor += len(specs.special_requirements) * SPECIAL_REQUIREMENT_BONUS
    factor += len(specs.green_certifications) * GREEN_CERTIFICATION_BONUS
    factor += len(challenges or []) * CHALLENGE_BONUS

    return max(MIN_COMPLEXITY, min(MAX_COMPLEXITY, factor))


def resolve_adjustments(
    project: Project,
    rates: RateTables,
    now: datetime,
    challenges: Optional[Sequence[str]] = None,
) -> AdjustmentFactors:
    """Run all three resolvers for a project."""
    factors = AdjustmentFactors(
        regional=resolve_regional_multiplier(project.location, rates),
        seasonal=resolve_seasonal_multiplier(now, rates),
        complexity=resolve_complexity_factor(project, challenges),
        season=season_for_month(now.month),
    )
    logger.debug(
        "adjustments_resolved",
        project_id=project.id,
        regional=factors.regional,
        seasonal=factors.seasonal,
        complexity=factors.complexity,
        season=factors.season.value,
    )
    return factors


# =============================================================================
# Combiner
# =============================================================================


def apply_adjustments(breakdown: CostBreakdown, factors: AdjustmentFactors) -> CostBreakdown:
    """
    Return a new breakdown with direct-cost lines rescaled.

    Materials and subcontractors are scaled by the combined factor; labor
    and equipment rates by the regional factor only. Permits, insurance,
    bonding and overhead are carried over unchanged.

    Args:
        breakdown: Unadjusted breakdown
        factors: Resolved multipliers

    Returns:
        Adjusted CostBreakdown (the input is not modified)
    """
    total_factor = factors.total
    regional = factors.regional

    materials = tuple(
        category.model_copy(update={
            "items": tuple(
                item.model_copy(update={"unit_cost": item.unit_cost * total_factor})
                for item in category.items
            )
        })
        for category in breakdown.materials
    )
    labor = tuple(
        line.model_copy(update={"rate": line.rate * regional})
        for line in breakdown.labor
    )
    equipment = tuple(
        line.model_copy(update={"rate": line.rate * regional})
        for line in breakdown.equipment
    )
    subcontractors = tuple(
        line.model_copy(update={"amount": line.amount * total_factor})
        for line in breakdown.subcontractors
    )

    return breakdown.model_copy(update={
        "materials": materials,
        "labor": labor,
        "equipment": equipment,
        "subcontractors": subcontractors,
    })
