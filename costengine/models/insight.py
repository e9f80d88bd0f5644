"""Requirement insight models.

The insight is qualitative analysis of a project (phases, material hints,
challenges, assumptions) produced by an external natural-language service.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from costengine.models.project import Project


DEFAULT_PHASES = ["Foundation", "Framing", "Roofing", "MEP", "Interior", "Finishing"]
DEFAULT_ASSUMPTIONS = ["Standard construction practices", "No major site issues"]


class InsightSource(str, Enum):
    """Where an insight came from."""

    PROVIDER = "provider"
    FALLBACK = "fallback"


class InsightRequest(BaseModel):
    """Payload sent to a requirement insight provider."""

    category: str
    subcategory: Optional[str] = None
    location: str
    square_footage: Optional[float] = Field(default=None, alias="squareFootage")
    stories: Optional[int] = None
    special_requirements: List[str] = Field(default_factory=list, alias="specialRequirements")

    class Config:
        populate_by_name = True

    @classmethod
    def from_project(cls, project: Project) -> "InsightRequest":
        """Build the provider payload from a project."""
        return cls(
            category=project.category.value,
            subcategory=project.subcategory,
            location=project.location.label(),
            square_footage=project.specifications.square_footage,
            stories=project.specifications.stories,
            special_requirements=list(project.specifications.special_requirements),
        )


class RequirementInsight(BaseModel):
    """Qualitative analysis of a project's requirements."""

    phases: List[str] = Field(default_factory=list, description="Key construction phases")
    materials: List[str] = Field(default_factory=list, description="Major material hints")
    labor: List[str] = Field(default_factory=list, description="Required trades / labor hints")
    challenges: List[str] = Field(default_factory=list, description="Potential challenges")
    assumptions: List[str] = Field(default_factory=list, description="Assumptions made")
    source: InsightSource = Field(default=InsightSource.PROVIDER)

    class Config:
        frozen = True

    @field_validator("phases", "materials", "labor", "challenges", "assumptions", mode="before")
    @classmethod
    def coerce_string_list(cls, v):
        """Accept loosely shaped provider output (None, scalars, dict items)."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if not isinstance(v, (list, tuple)):
            raise ValueError("expected a list of strings")
        items = []
        for item in v:
            if isinstance(item, dict):
                # LLMs sometimes return {"name": ..., ...} objects
                text = item.get("name") or item.get("description") or item.get("trade")
                if text:
                    items.append(str(text))
            elif item is not None and str(item).strip():
                items.append(str(item).strip())
        return items

    @classmethod
    def fallback(cls) -> "RequirementInsight":
        """Documented default used when no provider result is available."""
        return cls(
            phases=list(DEFAULT_PHASES),
            materials=[],
            labor=[],
            challenges=[],
            assumptions=list(DEFAULT_ASSUMPTIONS),
            source=InsightSource.FALLBACK,
        )
