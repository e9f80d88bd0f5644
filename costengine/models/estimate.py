"""Estimate models for the cost engine.

An Estimate is assembled once by the EstimateAssembler and is immutable
afterwards; revisions are new Estimate values with an incremented version.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field

from costengine.models.cost_breakdown import CostBreakdown
from costengine.models.insight import InsightSource


class EstimateStatus(str, Enum):
    """Status of an estimate."""

    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class Season(str, Enum):
    """Construction season derived from the calendar month."""

    WINTER = "winter"
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"


class RiskCategory(str, Enum):
    """Risk categories."""

    COST = "cost"
    SCHEDULE = "schedule"
    REGULATORY = "regulatory"
    QUALITY = "quality"


class RiskLevel(str, Enum):
    """Probability / impact level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Risk(BaseModel):
    """A flagged project risk."""

    category: RiskCategory
    description: str
    probability: RiskLevel
    impact: RiskLevel
    mitigation: Optional[str] = None

    class Config:
        frozen = True


class ComparableProject(BaseModel):
    """A historical project used to sanity-check an estimate.

    ``similarity`` is only meaningful relative to one target project and is
    None on records read from the historical store.
    """

    title: str
    location: str = Field(..., description="'City, ST' string")
    completed_date: date = Field(..., alias="completedDate")
    size: float = Field(..., ge=0, description="Square footage")
    cost: float = Field(..., ge=0, description="Actual cost")
    cost_per_sq_ft: float = Field(..., ge=0, alias="costPerSqFt")
    similarity: Optional[int] = Field(default=None, ge=0, le=100)

    class Config:
        populate_by_name = True
        frozen = True


class Estimate(BaseModel):
    """Assembled construction cost estimate."""

    id: str = Field(..., description="Estimate ID")
    project_id: str = Field(..., alias="projectId")
    version: int = Field(default=1, ge=1)
    created_at: datetime = Field(..., alias="createdAt")
    created_by: str = Field(default="system", alias="createdBy")

    cost_breakdown: CostBreakdown = Field(..., alias="costBreakdown")

    confidence: int = Field(..., ge=0, le=95)
    assumptions: Tuple[str, ...] = ()
    risks: Tuple[Risk, ...] = ()
    recommendations: Tuple[str, ...] = ()
    comparable_projects: Tuple[ComparableProject, ...] = Field(default=(), alias="comparableProjects")
    insight_source: InsightSource = Field(default=InsightSource.FALLBACK, alias="insightSource")

    regional_adjustment: float = Field(..., alias="regionalAdjustment", description="Percent, e.g. 15.0")
    seasonal_adjustment: float = Field(..., alias="seasonalAdjustment", description="Percent, e.g. 5.0")
    complexity_factor: float = Field(..., ge=1.0, le=2.0, alias="complexityFactor")
    season: Season

    valid_until: datetime = Field(..., alias="validUntil")
    status: EstimateStatus = Field(default=EstimateStatus.DRAFT)

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def total(self) -> float:
        return self.cost_breakdown.total

    def to_dict(self) -> Dict[str, Any]:
        """Plain camelCase view for rendering and CRM consumers.

        Monetary values in the cost breakdown are rounded to cents.
        """
        data = self.model_dump(by_alias=True, mode="json", exclude={"cost_breakdown"})
        data["costBreakdown"] = self.cost_breakdown.rounded()
        return data
