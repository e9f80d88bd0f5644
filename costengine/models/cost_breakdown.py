"""Cost breakdown models for the cost engine.

Line items carry their inputs (quantity, rate, ...) and expose totals as
computed fields, so every aggregate is derived from the current line items
and can never be edited by hand. Values are kept at full float precision;
two-decimal rounding happens only in ``CostBreakdown.rounded()``.
"""

from enum import Enum
from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field, computed_field


DEFAULT_CONTINGENCY_RATE = 0.10
DEFAULT_PROFIT_RATE = 0.15


class EquipmentType(str, Enum):
    """How a piece of equipment is sourced."""

    RENTAL = "rental"
    OWNED = "owned"


class DurationUnit(str, Enum):
    """Billing unit for equipment durations."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


# =============================================================================
# LINE ITEMS
# =============================================================================


class MaterialItem(BaseModel):
    """A single priced material within a category."""

    name: str
    quantity: float = Field(..., ge=0)
    unit: str
    unit_cost: float = Field(..., ge=0, alias="unitCost")

    class Config:
        populate_by_name = True
        frozen = True

    @computed_field(alias="totalCost")
    @property
    def total_cost(self) -> float:
        return self.quantity * self.unit_cost


class MaterialCategory(BaseModel):
    """A group of material items, e.g. Foundation or Framing."""

    name: str
    items: Tuple[MaterialItem, ...] = ()

    class Config:
        populate_by_name = True
        frozen = True

    @computed_field
    @property
    def subtotal(self) -> float:
        return sum(item.total_cost for item in self.items)


class LaborLine(BaseModel):
    """Crew cost for one trade."""

    trade: str
    workers: int = Field(..., ge=0)
    hours: float = Field(..., ge=0, description="Hours per worker")
    rate: float = Field(..., ge=0, description="Hourly rate ($/hr)")

    class Config:
        populate_by_name = True
        frozen = True

    @computed_field
    @property
    def total(self) -> float:
        return self.workers * self.hours * self.rate


class EquipmentLine(BaseModel):
    """Equipment rental or ownership cost."""

    name: str
    type: EquipmentType = EquipmentType.RENTAL
    duration: float = Field(..., ge=0)
    unit: DurationUnit = DurationUnit.DAY
    rate: float = Field(..., ge=0, description="Cost per duration unit")

    class Config:
        populate_by_name = True
        frozen = True

    @computed_field
    @property
    def total(self) -> float:
        return self.duration * self.rate


class SubcontractorLine(BaseModel):
    """Lump-sum subcontract for a trade."""

    trade: str
    scope: str
    amount: float = Field(..., ge=0)
    includes_materials: bool = Field(default=False, alias="includesMaterials")

    class Config:
        populate_by_name = True
        frozen = True


# =============================================================================
# BREAKDOWN
# =============================================================================


class CostBreakdown(BaseModel):
    """Full cost breakdown: direct lines, indirect costs, and derived totals.

    ``subtotal`` is the sum of all direct and indirect components;
    ``total = subtotal + contingency + profit_margin``.
    """

    materials: Tuple[MaterialCategory, ...] = ()
    labor: Tuple[LaborLine, ...] = ()
    equipment: Tuple[EquipmentLine, ...] = ()
    subcontractors: Tuple[SubcontractorLine, ...] = ()

    permits: float = Field(default=0.0, ge=0)
    insurance: float = Field(default=0.0, ge=0)
    bonding: float = Field(default=0.0, ge=0)
    overhead: float = Field(default=0.0, ge=0)

    contingency_rate: float = Field(default=DEFAULT_CONTINGENCY_RATE, ge=0, le=1, alias="contingencyRate")
    profit_rate: float = Field(default=DEFAULT_PROFIT_RATE, ge=0, le=1, alias="profitRate")

    class Config:
        populate_by_name = True
        frozen = True

    # -- direct cost sums ---------------------------------------------------

    @computed_field(alias="materialsSubtotal")
    @property
    def materials_subtotal(self) -> float:
        return sum(category.subtotal for category in self.materials)

    @computed_field(alias="laborSubtotal")
    @property
    def labor_subtotal(self) -> float:
        return sum(line.total for line in self.labor)

    @computed_field(alias="equipmentSubtotal")
    @property
    def equipment_subtotal(self) -> float:
        return sum(line.total for line in self.equipment)

    @computed_field(alias="subcontractorSubtotal")
    @property
    def subcontractor_subtotal(self) -> float:
        return sum(line.amount for line in self.subcontractors)

    @property
    def direct_costs(self) -> float:
        return (
            self.materials_subtotal
            + self.labor_subtotal
            + self.equipment_subtotal
            + self.subcontractor_subtotal
        )

    @property
    def indirect_costs(self) -> float:
        return self.permits + self.insurance + self.bonding + self.overhead

    # -- summary ------------------------------------------------------------

    @computed_field
    @property
    def subtotal(self) -> float:
        return self.direct_costs + self.indirect_costs

    @computed_field
    @property
    def contingency(self) -> float:
        return self.subtotal * self.contingency_rate

    @computed_field(alias="profitMargin")
    @property
    def profit_margin(self) -> float:
        return self.subtotal * self.profit_rate

    @computed_field
    @property
    def total(self) -> float:
        return self.subtotal + self.contingency + self.profit_margin

    def rounded(self) -> Dict[str, Any]:
        """Presentation view with every monetary value rounded to cents."""
        return _round_money(self.model_dump(by_alias=True, mode="json"))


_NON_MONEY_KEYS = {"quantity", "workers", "hours", "duration", "contingencyRate", "profitRate"}


def _round_money(value: Any, key: str = "") -> Any:
    if isinstance(value, dict):
        return {k: _round_money(v, k) for k, v in value.items()}
    if isinstance(value, list):
        return [_round_money(v, key) for v in value]
    if isinstance(value, float) and key not in _NON_MONEY_KEYS:
        return round(value, 2)
    return value
