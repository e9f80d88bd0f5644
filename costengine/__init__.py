"""Construction cost estimation engine."""

from costengine.models import Estimate, Project
from costengine.services.estimate_assembler import (
    EstimateAssembler,
    PipelineContext,
    generate_estimate,
    parse_project,
)

__version__ = "1.0.0"

__all__ = [
    "Estimate",
    "EstimateAssembler",
    "PipelineContext",
    "Project",
    "generate_estimate",
    "parse_project",
]
