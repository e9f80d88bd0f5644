"""Project input models for the cost engine.

A Project is created by the caller before estimation and is read-only to
the engine. Field aliases accept the camelCase payloads produced by the
web layer (``squareFootage``, ``greenCertifications`` ...).
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ProjectCategory(str, Enum):
    """Top-level project category."""

    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"


class ProjectSpecifications(BaseModel):
    """Physical specifications of the project."""

    square_footage: Optional[float] = Field(
        default=None,
        alias="squareFootage",
        description="Gross floor area in square feet"
    )
    stories: Optional[int] = Field(
        default=None,
        description="Number of stories above grade"
    )
    special_requirements: List[str] = Field(
        default_factory=list,
        alias="specialRequirements",
        description="Special requirements, e.g. 'seismic retrofit'"
    )
    green_certifications: List[str] = Field(
        default_factory=list,
        alias="greenCertifications",
        description="Targeted green certifications, e.g. 'LEED Gold'"
    )

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def has_square_footage(self) -> bool:
        """True when a usable (positive) square footage was supplied."""
        return self.square_footage is not None and self.square_footage > 0

    @property
    def has_stories(self) -> bool:
        return self.stories is not None and self.stories > 0


class ProjectLocation(BaseModel):
    """Where the project will be built."""

    city: Optional[str] = None
    state: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = Field(default=None, alias="zipCode")

    class Config:
        populate_by_name = True
        frozen = True

    def label(self) -> str:
        """Return the ``"City, ST"`` string used to match comparables."""
        return f"{self.city or ''}, {self.state or ''}"


class ProjectTimeline(BaseModel):
    """Planned schedule for the project."""

    estimated_start_date: Optional[date] = Field(default=None, alias="estimatedStartDate")
    estimated_end_date: Optional[date] = Field(default=None, alias="estimatedEndDate")
    weather_days: int = Field(
        default=0,
        ge=0,
        alias="weatherDays",
        description="Weather contingency days built into the schedule"
    )

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def duration_days(self) -> Optional[int]:
        """Planned duration in days, or None when either date is missing."""
        if self.estimated_start_date is None or self.estimated_end_date is None:
            return None
        return (self.estimated_end_date - self.estimated_start_date).days


class Project(BaseModel):
    """A construction project to be estimated.

    Only ``category`` is required; every other field degrades to a
    documented default inside the engine.
    """

    id: Optional[str] = Field(default=None, description="Caller-side project ID")
    title: Optional[str] = None
    category: ProjectCategory = Field(..., description="Project category")
    subcategory: Optional[str] = Field(
        default=None,
        description="e.g. 'single-family', 'retail', 'warehouse'"
    )
    specifications: ProjectSpecifications = Field(default_factory=ProjectSpecifications)
    location: ProjectLocation = Field(default_factory=ProjectLocation)
    timeline: ProjectTimeline = Field(default_factory=ProjectTimeline)

    class Config:
        populate_by_name = True
        frozen = True
