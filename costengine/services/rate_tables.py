"""Rate Tables for the cost engine.

Static lookup data: regional cost multipliers, seasonal multipliers, trade
labor rates, and the quantity/rate coefficients used by the cost breakdown
calculator. A RateTables value is immutable; refreshing means validating a
complete replacement table and swapping it in as a whole.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

import structlog
from pydantic import BaseModel, Field, ValidationError, model_validator

from costengine.config.errors import CostEngineError, ErrorCode
from costengine.models.cost_breakdown import DurationUnit, EquipmentType
from costengine.models.estimate import Season
from costengine.models.project import ProjectCategory

logger = structlog.get_logger(__name__)


# =============================================================================
# DEFAULT DATA
# =============================================================================

# Regional multipliers keyed "ST:CITY" (city upper-cased) or "ST" for
# state-level fallback. Unknown locations resolve to DEFAULT_REGIONAL_MULTIPLIER.
REGIONAL_MULTIPLIERS: Dict[str, float] = {
    "CA:SAN FRANCISCO": 1.35,  # San Francisco Bay Area
    "CA:LOS ANGELES": 1.25,
    "CA:SAN DIEGO": 1.20,
    "CA:SACRAMENTO": 1.10,
    "CA": 1.15,                # Other California
}

DEFAULT_REGIONAL_MULTIPLIER = 1.00

# Weather-delay cost by season: winter > summer > fall > spring
SEASONAL_MULTIPLIERS: Dict[Season, float] = {
    Season.WINTER: 1.05,
    Season.SPRING: 0.98,
    Season.SUMMER: 1.00,
    Season.FALL: 0.99,
}

# Hourly trade rates (USD)
TRADE_RATES: Dict[str, float] = {
    "general_labor": 45.0,
    "carpenter": 65.0,
    "electrician": 85.0,
    "plumber": 80.0,
    "hvac_tech": 75.0,
    "mason": 70.0,
    "roofer": 60.0,
    "painter": 55.0,
    "flooring": 50.0,
    "concrete": 65.0,
}

# Permit cost per square foot by project category
PERMIT_BASE_RATES: Dict[ProjectCategory, float] = {
    ProjectCategory.RESIDENTIAL: 1.50,
    ProjectCategory.COMMERCIAL: 2.25,
    ProjectCategory.INDUSTRIAL: 2.70,
}


# =============================================================================
# SPEC MODELS
# =============================================================================


class MaterialItemSpec(BaseModel):
    """Quantity = ceil(coefficient x square footage); cost = quantity x unit_cost."""

    name: str
    unit: str
    coefficient: float = Field(..., gt=0, description="Units per square foot")
    unit_cost: float = Field(..., ge=0)

    class Config:
        frozen = True


class MaterialCategorySpec(BaseModel):
    name: str
    items: List[MaterialItemSpec]

    class Config:
        frozen = True


class LaborSpec(BaseModel):
    """Fixed crew size; hours per worker = ceil(hours_per_sq_ft x square footage)."""

    trade: str
    rate_key: str = Field(..., description="Key into trade_rates")
    workers: int = Field(..., ge=1)
    hours_per_sq_ft: float = Field(..., gt=0)

    class Config:
        frozen = True


class EquipmentSpec(BaseModel):
    name: str
    type: EquipmentType = EquipmentType.RENTAL
    duration: float = Field(..., ge=0)
    unit: DurationUnit = DurationUnit.DAY
    rate: float = Field(..., ge=0)

    class Config:
        frozen = True


class SubcontractorSpec(BaseModel):
    """Amount = square footage x rate_per_sq_ft."""

    trade: str
    scope: str
    rate_per_sq_ft: float = Field(..., ge=0)
    includes_materials: bool = False

    class Config:
        frozen = True


DEFAULT_MATERIAL_SPECS: List[MaterialCategorySpec] = [
    MaterialCategorySpec(name="Foundation", items=[
        MaterialItemSpec(name="Concrete", unit="cubic yards", coefficient=0.5, unit_cost=150.0),
        MaterialItemSpec(name="Rebar", unit="lbs", coefficient=2.0, unit_cost=0.75),
    ]),
    MaterialCategorySpec(name="Framing", items=[
        MaterialItemSpec(name="Lumber", unit="board feet", coefficient=1.5, unit_cost=1.20),
        MaterialItemSpec(name="OSB Sheathing", unit="sheets", coefficient=1 / 32, unit_cost=25.0),
    ]),
    MaterialCategorySpec(name="MEP", items=[
        MaterialItemSpec(name="Electrical Wire", unit="linear feet", coefficient=1.2, unit_cost=0.90),
        MaterialItemSpec(name="Plumbing Pipe", unit="linear feet", coefficient=0.4, unit_cost=2.50),
    ]),
]

DEFAULT_LABOR_SPECS: List[LaborSpec] = [
    LaborSpec(trade="General Labor", rate_key="general_labor", workers=4, hours_per_sq_ft=0.10),
    LaborSpec(trade="Carpentry", rate_key="carpenter", workers=3, hours_per_sq_ft=0.15),
    LaborSpec(trade="Electrical", rate_key="electrician", workers=2, hours_per_sq_ft=0.08),
    LaborSpec(trade="Plumbing", rate_key="plumber", workers=2, hours_per_sq_ft=0.06),
]

DEFAULT_EQUIPMENT_SPECS: List[EquipmentSpec] = [
    EquipmentSpec(name="Crane", duration=10, rate=1200.0),
    EquipmentSpec(name="Excavator", duration=5, rate=800.0),
    EquipmentSpec(name="Scaffolding", duration=60, rate=150.0),
]

DEFAULT_SUBCONTRACTOR_SPECS: List[SubcontractorSpec] = [
    SubcontractorSpec(trade="HVAC", scope="Complete HVAC system installation",
                      rate_per_sq_ft=6.0, includes_materials=True),
    SubcontractorSpec(trade="Roofing", scope="Complete roofing system",
                      rate_per_sq_ft=4.0, includes_materials=True),
    SubcontractorSpec(trade="Flooring", scope="All flooring installation",
                      rate_per_sq_ft=5.0, includes_materials=False),
]


# =============================================================================
# RATE TABLES
# =============================================================================


class RateTables(BaseModel):
    """Complete, immutable set of rates used by one estimation pipeline."""

    regional_multipliers: Dict[str, float] = Field(default_factory=lambda: dict(REGIONAL_MULTIPLIERS))
    default_regional_multiplier: float = Field(default=DEFAULT_REGIONAL_MULTIPLIER, gt=0)
    seasonal_multipliers: Dict[Season, float] = Field(default_factory=lambda: dict(SEASONAL_MULTIPLIERS))
    trade_rates: Dict[str, float] = Field(default_factory=lambda: dict(TRADE_RATES))
    permit_base_rates: Dict[ProjectCategory, float] = Field(default_factory=lambda: dict(PERMIT_BASE_RATES))

    materials: List[MaterialCategorySpec] = Field(default_factory=lambda: list(DEFAULT_MATERIAL_SPECS))
    labor: List[LaborSpec] = Field(default_factory=lambda: list(DEFAULT_LABOR_SPECS))
    equipment: List[EquipmentSpec] = Field(default_factory=lambda: list(DEFAULT_EQUIPMENT_SPECS))
    subcontractors: List[SubcontractorSpec] = Field(default_factory=lambda: list(DEFAULT_SUBCONTRACTOR_SPECS))

    insurance_per_sq_ft: float = Field(default=0.50, ge=0)
    overhead_per_sq_ft: float = Field(default=5.0, ge=0)
    bonding_rate: float = Field(default=0.02, ge=0, le=1)
    contingency_rate: float = Field(default=0.10, ge=0, le=1)
    profit_rate: float = Field(default=0.15, ge=0, le=1)

    class Config:
        frozen = True

    @model_validator(mode="after")
    def validate_completeness(self) -> "RateTables":
        """A table is only usable when every lookup it serves can resolve."""
        missing_seasons = [s.value for s in Season if s not in self.seasonal_multipliers]
        if missing_seasons:
            raise ValueError(f"Seasonal multipliers missing for: {missing_seasons}")

        missing_categories = [c.value for c in ProjectCategory if c not in self.permit_base_rates]
        if missing_categories:
            raise ValueError(f"Permit base rates missing for: {missing_categories}")

        unknown_trades = [spec.rate_key for spec in self.labor if spec.rate_key not in self.trade_rates]
        if unknown_trades:
            raise ValueError(f"Labor specs reference unknown trade rates: {unknown_trades}")

        for key, value in self.regional_multipliers.items():
            if value <= 0:
                raise ValueError(f"Regional multiplier for {key} must be positive")
        return self

    @staticmethod
    def regional_key(state: str, city: Optional[str] = None) -> str:
        """Build a regional multiplier key from a state and optional city."""
        state_key = state.strip().upper()
        if city:
            return f"{state_key}:{city.strip().upper()}"
        return state_key

    def trade_rate(self, rate_key: str) -> float:
        return self.trade_rates[rate_key]


DEFAULT_RATE_TABLES = RateTables()


def load_rate_tables(path: Union[str, Path]) -> RateTables:
    """
    Load and validate a complete rate table from a JSON file.

    The file must describe a whole table; it is validated before it can
    replace the one in use, so a bad file never yields a partial table.

    Args:
        path: Path to the JSON document

    Returns:
        Validated RateTables

    Raises:
        CostEngineError: If the file is missing, not JSON, or invalid
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        tables = RateTables.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error("rate_tables_load_failed", path=str(path), error=str(e))
        raise CostEngineError(
            code=ErrorCode.INVALID_RATE_TABLES,
            message=f"Failed to load rate tables from {path}: {e}",
            details={"path": str(path)}
        ) from e

    logger.info(
        "rate_tables_loaded",
        path=str(path),
        regional_keys=len(tables.regional_multipliers),
        trades=len(tables.trade_rates),
    )
    return tables
