"""Services for the cost engine."""

from costengine.services.adjustments import (
    AdjustmentFactors,
    apply_adjustments,
    resolve_adjustments,
)
from costengine.services.comparable_matcher import find_comparables, score_comparable
from costengine.services.comparable_store import (
    ComparableStore,
    FirestoreComparableStore,
    InMemoryComparableStore,
)
from costengine.services.confidence import calculate_confidence
from costengine.services.cost_calculator import BaseCostResult, calculate_base_costs
from costengine.services.estimate_assembler import (
    EstimateAssembler,
    PipelineContext,
    generate_estimate,
    parse_project,
)
from costengine.services.estimate_lifecycle import expire_if_stale, is_expired, transition
from costengine.services.insight_service import (
    FallbackInsightProvider,
    InsightProvider,
    LLMInsightProvider,
    analyze_with_fallback,
)
from costengine.services.rate_tables import DEFAULT_RATE_TABLES, RateTables, load_rate_tables
from costengine.services.risk_rules import RuleContext, evaluate

__all__ = [
    "AdjustmentFactors",
    "apply_adjustments",
    "resolve_adjustments",
    "find_comparables",
    "score_comparable",
    "ComparableStore",
    "FirestoreComparableStore",
    "InMemoryComparableStore",
    "calculate_confidence",
    "BaseCostResult",
    "calculate_base_costs",
    "EstimateAssembler",
    "PipelineContext",
    "generate_estimate",
    "parse_project",
    "expire_if_stale",
    "is_expired",
    "transition",
    "FallbackInsightProvider",
    "InsightProvider",
    "LLMInsightProvider",
    "analyze_with_fallback",
    "DEFAULT_RATE_TABLES",
    "RateTables",
    "load_rate_tables",
    "RuleContext",
    "evaluate",
]
