"""Risk & Recommendation Engine.

Rule-based and stateless. Each rule is a pure function of a RuleContext
and returns nothing, one item, or (for per-challenge risks) a list. Rules
are evaluated in the order of RISK_RULES / RECOMMENDATION_RULES and their
results concatenated, so output order is deterministic.

Risk rules:
    1. large_project_risk      square footage > 10,000
    2. winter_schedule_risk    season is winter
    3. green_certification_risk  any green certification
    4. challenge_risks         one quality risk per insight challenge

Recommendation rules (read the risks produced above):
    1. value_engineering       total > 1,000,000
    2. bulk_purchasing         materials / subtotal > 0.4
    3. long_lead_preorder      planned timeline < 90 days
    4. risk_management_plan    any high-impact risk
"""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple, Union

from costengine.models.cost_breakdown import CostBreakdown
from costengine.models.estimate import Risk, RiskCategory, RiskLevel, Season
from costengine.models.insight import RequirementInsight
from costengine.models.project import Project

LARGE_PROJECT_SQ_FT = 10_000
VALUE_ENGINEERING_TOTAL = 1_000_000
MATERIAL_RATIO_THRESHOLD = 0.4
AGGRESSIVE_TIMELINE_DAYS = 90


@dataclass(frozen=True)
class RuleContext:
    """Read-only inputs shared by all rules."""
    project: Project
    breakdown: CostBreakdown
    season: Season
    square_footage: float
    insight: RequirementInsight
    risks: Tuple[Risk, ...] = ()


RiskRuleResult = Union[None, Risk, Sequence[Risk]]
RiskRule = Callable[[RuleContext], RiskRuleResult]
RecommendationRule = Callable[[RuleContext], Optional[str]]


# =============================================================================
# Risk rules
# =============================================================================


def large_project_risk(ctx: RuleContext) -> Optional[Risk]:
    if ctx.square_footage <= LARGE_PROJECT_SQ_FT:
        return None
    return Risk(
        category=RiskCategory.COST,
        description="Large project size may lead to material price fluctuations",
        probability=RiskLevel.MEDIUM,
        impact=RiskLevel.HIGH,
        mitigation="Lock in material prices early with suppliers",
    )


def winter_schedule_risk(ctx: RuleContext) -> Optional[Risk]:
    if ctx.season != Season.WINTER:
        return None
    return Risk(
        category=RiskCategory.SCHEDULE,
        description="Winter weather conditions may cause delays",
        probability=RiskLevel.HIGH,
        impact=RiskLevel.MEDIUM,
        mitigation="Build weather contingency days into schedule",
    )


def green_certification_risk(ctx: RuleContext) -> Optional[Risk]:
    if not ctx.project.specifications.green_certifications:
        return None
    return Risk(
        category=RiskCategory.REGULATORY,
        description="Green certification requirements may add complexity",
        probability=RiskLevel.MEDIUM,
        impact=RiskLevel.MEDIUM,
        mitigation="Engage certification consultant early in process",
    )


def challenge_risks(ctx: RuleContext) -> List[Risk]:
    return [
        Risk(
            category=RiskCategory.QUALITY,
            description=challenge,
            probability=RiskLevel.MEDIUM,
            impact=RiskLevel.MEDIUM,
        )
        for challenge in ctx.insight.challenges
    ]


RISK_RULES: Tuple[RiskRule, ...] = (
    large_project_risk,
    winter_schedule_risk,
    green_certification_risk,
    challenge_risks,
)


# =============================================================================
# Recommendation rules
# =============================================================================


def value_engineering(ctx: RuleContext) -> Optional[str]:
    if ctx.breakdown.total > VALUE_ENGINEERING_TOTAL:
        return "Consider value engineering sessions to identify cost reduction opportunities"
    return None


def bulk_purchasing(ctx: RuleContext) -> Optional[str]:
    subtotal = ctx.breakdown.subtotal
    if subtotal > 0 and ctx.breakdown.materials_subtotal / subtotal > MATERIAL_RATIO_THRESHOLD:
        return "Material costs are high - consider bulk purchasing agreements or alternative materials"
    return None


def long_lead_preorder(ctx: RuleContext) -> Optional[str]:
    days = ctx.project.timeline.duration_days
    if days is not None and days < AGGRESSIVE_TIMELINE_DAYS:
        return "Aggressive timeline - consider pre-ordering long-lead materials"
    return None


def risk_management_plan(ctx: RuleContext) -> Optional[str]:
    if any(risk.impact == RiskLevel.HIGH for risk in ctx.risks):
        return "High-impact risks identified - recommend a formal risk management plan"
    return None


RECOMMENDATION_RULES: Tuple[RecommendationRule, ...] = (
    value_engineering,
    bulk_purchasing,
    long_lead_preorder,
    risk_management_plan,
)


# =============================================================================
# Evaluation
# =============================================================================


def evaluate_risks(
    ctx: RuleContext,
    rules: Sequence[RiskRule] = RISK_RULES,
) -> List[Risk]:
    risks: List[Risk] = []
    for rule in rules:
        result = rule(ctx)
        if result is None:
            continue
        if isinstance(result, Risk):
            risks.append(result)
        else:
            risks.extend(result)
    return risks


def evaluate_recommendations(
    ctx: RuleContext,
    rules: Sequence[RecommendationRule] = RECOMMENDATION_RULES,
) -> List[str]:
    return [text for text in (rule(ctx) for rule in rules) if text]


def evaluate(ctx: RuleContext) -> Tuple[List[Risk], List[str]]:
    """Run risk rules, then recommendation rules against the found risks."""
    risks = evaluate_risks(ctx)
    recommendations = evaluate_recommendations(replace(ctx, risks=tuple(risks)))
    return risks, recommendations
