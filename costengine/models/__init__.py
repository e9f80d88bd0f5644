"""Pydantic models for the cost engine."""

from costengine.models.project import (
    Project,
    ProjectCategory,
    ProjectLocation,
    ProjectSpecifications,
    ProjectTimeline,
)
from costengine.models.insight import InsightRequest, InsightSource, RequirementInsight
from costengine.models.cost_breakdown import (
    CostBreakdown,
    DurationUnit,
    EquipmentLine,
    EquipmentType,
    LaborLine,
    MaterialCategory,
    MaterialItem,
    SubcontractorLine,
)
from costengine.models.estimate import (
    ComparableProject,
    Estimate,
    EstimateStatus,
    Risk,
    RiskCategory,
    RiskLevel,
    Season,
)

__all__ = [
    "Project",
    "ProjectCategory",
    "ProjectLocation",
    "ProjectSpecifications",
    "ProjectTimeline",
    "InsightRequest",
    "InsightSource",
    "RequirementInsight",
    "CostBreakdown",
    "DurationUnit",
    "EquipmentLine",
    "EquipmentType",
    "LaborLine",
    "MaterialCategory",
    "MaterialItem",
    "SubcontractorLine",
    "ComparableProject",
    "Estimate",
    "EstimateStatus",
    "Risk",
    "RiskCategory",
    "RiskLevel",
    "Season",
]
