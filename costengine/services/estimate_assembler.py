"""Estimate Assembler.

Orchestrates the estimation pipeline for one project and combines every
sub-result into a single immutable Estimate:

    insight -> base costs -> adjustments -> comparables
            -> risks & recommendations -> confidence -> Estimate

Collaborators (rate tables, comparable store, insight provider, clock) are
carried by an explicit PipelineContext rather than module-level state, so
concurrent requests share nothing mutable. Optional inputs degrade to
documented defaults; a structurally valid project always yields an estimate.
"""

import time
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

import structlog
from pydantic import ValidationError

from costengine.config.errors import ProjectValidationError
from costengine.config.settings import Settings, settings as default_settings
from costengine.models.estimate import Estimate, EstimateStatus
from costengine.models.insight import InsightRequest, InsightSource, RequirementInsight
from costengine.models.project import Project
from costengine.services.adjustments import apply_adjustments, resolve_adjustments
from costengine.services.comparable_matcher import find_comparables
from costengine.services.comparable_store import (
    ComparableStore,
    FirestoreComparableStore,
    InMemoryComparableStore,
)
from costengine.services.confidence import calculate_confidence
from costengine.services.cost_calculator import calculate_base_costs
from costengine.services.insight_service import (
    DEFAULT_RETRY_WAIT_SECONDS,
    FallbackInsightProvider,
    InsightProvider,
    analyze_with_fallback,
    default_insight_provider,
)
from costengine.services.rate_tables import DEFAULT_RATE_TABLES, RateTables, load_rate_tables
from costengine.services.risk_rules import RuleContext, evaluate
from costengine.utils.pipeline_logger import (
    log_estimate_complete,
    log_estimate_start,
    log_fallback_used,
    log_stage,
)

logger = structlog.get_logger(__name__)

DRAFT_PROJECT_ID = "draft"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_estimate_id(now: datetime) -> str:
    """Estimate IDs look like EST-<epoch ms>-<9 hex chars>."""
    return f"EST-{int(now.timestamp() * 1000)}-{uuid4().hex[:9]}"


@dataclass(frozen=True)
class PipelineContext:
    """Everything one estimation run reads from outside the project.

    Attributes:
        rate_tables: Immutable rate tables
        comparable_store: Historical comparable store (read on this path)
        insight_provider: Requirement insight capability
        clock: Source of "now" (season, comparable age, validity window)
        id_factory: Builds estimate IDs from "now"
    """
    rate_tables: RateTables = DEFAULT_RATE_TABLES
    comparable_store: ComparableStore = None
    insight_provider: InsightProvider = None
    clock: Callable[[], datetime] = utc_now
    id_factory: Callable[[datetime], str] = new_estimate_id
    insight_timeout_seconds: float = 10.0
    insight_max_attempts: int = 2
    insight_retry_wait_seconds: float = DEFAULT_RETRY_WAIT_SECONDS
    validity_days: int = 30
    default_square_footage: float = 2000.0
    comparable_limit: int = 5
    created_by: str = "system"
    verbose: bool = False

    def __post_init__(self):
        # Frozen dataclass: fill collaborator defaults via object.__setattr__
        if self.comparable_store is None:
            object.__setattr__(self, "comparable_store", InMemoryComparableStore())
        if self.insight_provider is None:
            object.__setattr__(self, "insight_provider", FallbackInsightProvider())

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None, **overrides) -> "PipelineContext":
        """
        Build a context from application settings.

        Args:
            config: Settings to read (defaults to the module-level settings)
            **overrides: Field values taking precedence over settings

        Returns:
            PipelineContext
        """
        config = config or default_settings
        config.validate()

        if "rate_tables" not in overrides:
            overrides["rate_tables"] = (
                load_rate_tables(config.rate_tables_path)
                if config.rate_tables_path else DEFAULT_RATE_TABLES
            )
        if "comparable_store" not in overrides:
            overrides["comparable_store"] = (
                FirestoreComparableStore()
                if config.comparable_store_backend == "firestore"
                else InMemoryComparableStore()
            )
        if "insight_provider" not in overrides:
            overrides["insight_provider"] = default_insight_provider()

        values = dict(
            insight_timeout_seconds=config.insight_timeout_seconds,
            insight_max_attempts=config.insight_max_attempts,
            validity_days=config.estimate_validity_days,
            default_square_footage=config.default_square_footage,
            comparable_limit=config.comparable_limit,
        )
        values.update(overrides)
        return cls(**values)

    def with_rate_tables(self, rate_tables: RateTables) -> "PipelineContext":
        """Return a context using a whole replacement rate table."""
        return replace(self, rate_tables=rate_tables)


class EstimateAssembler:
    """Builds estimates for projects.

    The assembler is the only component that constructs Estimate values.
    It holds no per-request state; one instance may serve concurrent calls.
    """

    def __init__(self, context: Optional[PipelineContext] = None):
        """Initialize EstimateAssembler.

        Args:
            context: Pipeline context (defaults to built-in tables, seeded
                in-memory store and the fallback insight provider)
        """
        self.context = context or PipelineContext()

    async def _get_insight(self, project: Project) -> RequirementInsight:
        ctx = self.context
        insight = await analyze_with_fallback(
            ctx.insight_provider,
            InsightRequest.from_project(project),
            timeout_seconds=ctx.insight_timeout_seconds,
            max_attempts=ctx.insight_max_attempts,
            retry_wait_seconds=ctx.insight_retry_wait_seconds,
        )
        if insight.source == InsightSource.FALLBACK and not isinstance(
            ctx.insight_provider, FallbackInsightProvider
        ):
            log_fallback_used("insight", project.id or DRAFT_PROJECT_ID, "insight provider unavailable")
        return insight

    async def _get_candidates(self, project: Project) -> list:
        try:
            return await self.context.comparable_store.get_by_category(project.category)
        except Exception as e:
            logger.warning(
                "comparable_store_unavailable",
                project_id=project.id,
                category=project.category.value,
                error=str(e),
            )
            log_fallback_used("comparables", project.id or DRAFT_PROJECT_ID, "comparable store unavailable")
            return []

    async def generate_estimate(
        self,
        project: Project,
        version: int = 1,
        project_id: Optional[str] = None,
    ) -> Estimate:
        """
        Run the full pipeline for a project.

        Args:
            project: Project to estimate
            version: Estimate version (1 for new estimates)
            project_id: Project reference override (used by revisions)

        Returns:
            A draft Estimate valid for ``validity_days`` from creation
        """
        ctx = self.context
        start = time.perf_counter()
        now = ctx.clock()
        project_ref = project_id or project.id or DRAFT_PROJECT_ID

        log_estimate_start(project_ref, project.category.value, now, verbose=ctx.verbose)

        insight = await self._get_insight(project)

        base = calculate_base_costs(
            project,
            ctx.rate_tables,
            insight=insight,
            default_square_footage=ctx.default_square_footage,
        )
        log_stage("base_costs", project_ref, verbose=ctx.verbose,
                  square_footage=base.square_footage, subtotal=round(base.breakdown.subtotal, 2))

        factors = resolve_adjustments(project, ctx.rate_tables, now, insight.challenges)
        breakdown = apply_adjustments(base.breakdown, factors)
        log_stage("adjustments", project_ref, verbose=ctx.verbose,
                  regional=factors.regional, seasonal=factors.seasonal,
                  complexity=factors.complexity, total=round(breakdown.total, 2))

        candidates = await self._get_candidates(project)
        comparables = find_comparables(
            candidates,
            target_size=base.square_footage,
            target_location=project.location.label(),
            now=now,
            limit=ctx.comparable_limit,
        )
        log_stage("comparables", project_ref, verbose=ctx.verbose,
                  candidates=len(candidates), matched=len(comparables))

        risks, recommendations = evaluate(RuleContext(
            project=project,
            breakdown=breakdown,
            season=factors.season,
            square_footage=base.square_footage,
            insight=insight,
        ))

        confidence = calculate_confidence(project, comparables)

        estimate = Estimate(
            id=ctx.id_factory(now),
            project_id=project_ref,
            version=version,
            created_at=now,
            created_by=ctx.created_by,
            cost_breakdown=breakdown,
            confidence=confidence,
            assumptions=_merge_assumptions(insight.assumptions, base.assumptions),
            risks=risks,
            recommendations=recommendations,
            comparable_projects=comparables,
            insight_source=insight.source,
            regional_adjustment=factors.regional_percent,
            seasonal_adjustment=factors.seasonal_percent,
            complexity_factor=factors.complexity,
            season=factors.season,
            valid_until=now + timedelta(days=ctx.validity_days),
            status=EstimateStatus.DRAFT,
        )

        log_estimate_complete(
            estimate_id=estimate.id,
            project_id=project_ref,
            total=breakdown.total,
            confidence=confidence,
            risks=[risk.category.value for risk in risks],
            duration_ms=int((time.perf_counter() - start) * 1000),
            verbose=ctx.verbose,
        )
        return estimate

    async def revise(self, previous: Estimate, project: Project) -> Estimate:
        """
        Produce the next version of an estimate.

        The previous estimate is not modified.

        Args:
            previous: Estimate being revised
            project: Current project description

        Returns:
            New draft Estimate with version = previous.version + 1
        """
        revised = await self.generate_estimate(
            project,
            version=previous.version + 1,
            project_id=previous.project_id,
        )
        logger.info(
            "estimate_revised",
            previous_id=previous.id,
            estimate_id=revised.id,
            version=revised.version,
        )
        return revised


def parse_project(payload: Dict[str, Any]) -> Project:
    """
    Validate a raw project payload (camelCase or snake_case keys).

    Args:
        payload: Project data from a caller

    Returns:
        Project

    Raises:
        ProjectValidationError: If the payload is not a structurally valid project
    """
    try:
        return Project.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        logger.warning("project_rejected", field=field, errors=e.error_count())
        raise ProjectValidationError(
            message=f"Invalid project: {first.get('msg', str(e))}",
            field=field,
            details={"errors": e.error_count()}
        ) from e


def _merge_assumptions(*groups: List[str]) -> List[str]:
    merged: List[str] = []
    for group in groups:
        for assumption in group:
            if assumption not in merged:
                merged.append(assumption)
    return merged


async def generate_estimate(
    project: Project,
    context: Optional[PipelineContext] = None,
) -> Estimate:
    """Estimate a project with a one-off assembler."""
    return await EstimateAssembler(context).generate_estimate(project)
