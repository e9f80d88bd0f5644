"""Cost Breakdown Calculator.

Computes the unadjusted cost breakdown for a project from its square
footage and category using the quantity and rate coefficients in the
Rate Tables:

- Materials: quantity = ceil(coefficient x sqft), cost = quantity x unit cost
- Labor: fixed crew per trade, hours = ceil(hours/sqft x sqft)
- Equipment: fixed rental durations x day rates
- Subcontractors: sqft x per-square-foot rate
- Indirect: permits, insurance, bonding (2% of materials + labor), overhead

Missing or non-positive square footage falls back to the default and is
recorded as an assumption; the calculator never raises for missing
optional fields.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from costengine.models.cost_breakdown import (
    CostBreakdown,
    EquipmentLine,
    LaborLine,
    MaterialCategory,
    MaterialItem,
    SubcontractorLine,
)
from costengine.models.insight import RequirementInsight
from costengine.models.project import Project
from costengine.services.rate_tables import RateTables

logger = structlog.get_logger(__name__)

DEFAULT_SQUARE_FOOTAGE = 2000.0


@dataclass
class BaseCostResult:
    """
    Output of the calculator.

    Attributes:
        breakdown: Unadjusted cost breakdown
        square_footage: Square footage actually used
        assumptions: Assumptions recorded while filling defaults
    """
    breakdown: CostBreakdown
    square_footage: float
    assumptions: List[str] = field(default_factory=list)


def resolve_square_footage(
    project: Project,
    default: float = DEFAULT_SQUARE_FOOTAGE,
) -> float:
    """Return the project's square footage, or the default when unusable."""
    if project.specifications.has_square_footage:
        return float(project.specifications.square_footage)
    return float(default)


def _ceil_quantity(value: float) -> int:
    # Drop float noise (e.g. 300.00000000000006) before rounding up
    return math.ceil(round(value, 9))


def estimate_materials(sqft: float, rates: RateTables) -> List[MaterialCategory]:
    categories = []
    for spec in rates.materials:
        items = [
            MaterialItem(
                name=item.name,
                quantity=_ceil_quantity(sqft * item.coefficient),
                unit=item.unit,
                unit_cost=item.unit_cost,
            )
            for item in spec.items
        ]
        categories.append(MaterialCategory(name=spec.name, items=items))
    return categories


def estimate_labor(sqft: float, rates: RateTables) -> List[LaborLine]:
    return [
        LaborLine(
            trade=spec.trade,
            workers=spec.workers,
            hours=_ceil_quantity(sqft * spec.hours_per_sq_ft),
            rate=rates.trade_rate(spec.rate_key),
        )
        for spec in rates.labor
    ]


def estimate_equipment(rates: RateTables) -> List[EquipmentLine]:
    return [
        EquipmentLine(
            name=spec.name,
            type=spec.type,
            duration=spec.duration,
            unit=spec.unit,
            rate=spec.rate,
        )
        for spec in rates.equipment
    ]


def estimate_subcontractors(sqft: float, rates: RateTables) -> List[SubcontractorLine]:
    return [
        SubcontractorLine(
            trade=spec.trade,
            scope=spec.scope,
            amount=sqft * spec.rate_per_sq_ft,
            includes_materials=spec.includes_materials,
        )
        for spec in rates.subcontractors
    ]


def calculate_base_costs(
    project: Project,
    rates: RateTables,
    insight: Optional[RequirementInsight] = None,
    default_square_footage: float = DEFAULT_SQUARE_FOOTAGE,
) -> BaseCostResult:
    """
    Calculate the unadjusted cost breakdown for a project.

    Args:
        project: Project to estimate
        rates: Rate tables in use
        insight: Optional requirement insight; its material hints are
            recorded as an assumption, quantities come from the rate tables
        default_square_footage: Square footage used when the project has none

    Returns:
        BaseCostResult with the breakdown, square footage used and assumptions
    """
    assumptions: List[str] = []
    sqft = resolve_square_footage(project, default_square_footage)

    if not project.specifications.has_square_footage:
        supplied = project.specifications.square_footage
        if supplied is None:
            assumptions.append(
                f"Square footage not provided; assumed {sqft:,.0f} sq ft"
            )
        else:
            assumptions.append(
                f"Square footage {supplied:,.0f} is not usable; assumed {sqft:,.0f} sq ft"
            )
        logger.info(
            "square_footage_defaulted",
            project_id=project.id,
            supplied=supplied,
            used=sqft,
        )

    if insight is not None and insight.materials:
        assumptions.append(
            "Material allowances priced from standard rates; noted materials: "
            + ", ".join(insight.materials)
        )

    materials = estimate_materials(sqft, rates)
    labor = estimate_labor(sqft, rates)
    equipment = estimate_equipment(rates)
    subcontractors = estimate_subcontractors(sqft, rates)

    materials_total = sum(category.subtotal for category in materials)
    labor_total = sum(line.total for line in labor)

    breakdown = CostBreakdown(
        materials=materials,
        labor=labor,
        equipment=equipment,
        subcontractors=subcontractors,
        permits=rates.permit_base_rates[project.category] * sqft,
        insurance=rates.insurance_per_sq_ft * sqft,
        bonding=rates.bonding_rate * (materials_total + labor_total),
        overhead=rates.overhead_per_sq_ft * sqft,
        contingency_rate=rates.contingency_rate,
        profit_rate=rates.profit_rate,
    )

    logger.debug(
        "base_costs_calculated",
        project_id=project.id,
        square_footage=sqft,
        subtotal=breakdown.subtotal,
        total=breakdown.total,
    )

    return BaseCostResult(breakdown=breakdown, square_footage=sqft, assumptions=assumptions)
