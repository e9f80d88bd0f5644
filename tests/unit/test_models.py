"""Unit tests for cost engine models."""

import pytest
from datetime import date
from pydantic import ValidationError

from costengine.models.cost_breakdown import (
    CostBreakdown,
    EquipmentLine,
    LaborLine,
    MaterialCategory,
    MaterialItem,
    SubcontractorLine,
)
from costengine.models.estimate import Risk, RiskCategory, RiskLevel
from costengine.models.insight import (
    DEFAULT_ASSUMPTIONS,
    DEFAULT_PHASES,
    InsightRequest,
    InsightSource,
    RequirementInsight,
)
from costengine.models.project import Project, ProjectCategory, ProjectLocation, ProjectTimeline
from tests.fixtures.mock_project_data import (
    OAKLAND_COMMERCIAL_PAYLOAD,
    OAKLAND_COMMERCIAL_PROJECT,
    make_estimate,
    make_project,
)


class TestProjectModels:
    """Tests for project input models."""

    def test_parses_camel_case_payload(self):
        """Test camelCase payloads from the web layer are accepted."""
        project = Project.model_validate(OAKLAND_COMMERCIAL_PAYLOAD)

        assert project.category == ProjectCategory.COMMERCIAL
        assert project.specifications.square_footage == 15000
        assert project.specifications.stories == 6
        assert project.specifications.special_requirements == ["seismic retrofit"]

    def test_category_is_required(self):
        """Test a project without a category is rejected."""
        with pytest.raises(ValidationError):
            Project.model_validate({"title": "No category"})

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            Project.model_validate({"category": "agricultural"})

    def test_project_is_frozen(self):
        with pytest.raises(ValidationError):
            OAKLAND_COMMERCIAL_PROJECT.title = "Renamed"

    @pytest.mark.parametrize("square_footage,expected", [
        (None, False),
        (0, False),
        (-100, False),
        (1, True),
        (2500.5, True),
    ])
    def test_has_square_footage(self, square_footage, expected):
        project = make_project(specifications={"square_footage": square_footage})
        assert project.specifications.has_square_footage is expected

    def test_location_label(self):
        assert ProjectLocation(city="Oakland", state="CA").label() == "Oakland, CA"
        assert ProjectLocation().label() == ", "

    def test_timeline_duration(self):
        timeline = ProjectTimeline(
            estimated_start_date=date(2025, 3, 1),
            estimated_end_date=date(2025, 4, 1),
        )
        assert timeline.duration_days == 31
        assert ProjectTimeline(estimated_start_date=date(2025, 3, 1)).duration_days is None


class TestInsightModels:
    """Tests for requirement insight models."""

    def test_request_from_project(self):
        request = InsightRequest.from_project(OAKLAND_COMMERCIAL_PROJECT)

        assert request.category == "commercial"
        assert request.location == "Oakland, CA"
        assert request.square_footage == 15000
        assert request.special_requirements == ["seismic retrofit"]

    def test_fallback_insight(self):
        """Test the documented fallback: fixed phases, no challenges."""
        insight = RequirementInsight.fallback()

        assert insight.phases == DEFAULT_PHASES
        assert insight.challenges == []
        assert insight.materials == []
        assert insight.assumptions == DEFAULT_ASSUMPTIONS
        assert insight.source == InsightSource.FALLBACK

    def test_coerces_loose_provider_output(self):
        """Test None, scalar and object items are normalized to strings."""
        insight = RequirementInsight.model_validate({
            "phases": "Foundation",
            "materials": None,
            "labor": [{"trade": "Electricians"}, "Plumbers", "", None],
            "challenges": [{"description": "Tight site"}],
        })

        assert insight.phases == ["Foundation"]
        assert insight.materials == []
        assert insight.labor == ["Electricians", "Plumbers"]
        assert insight.challenges == ["Tight site"]
        assert insight.source == InsightSource.PROVIDER


class TestCostBreakdown:
    """Tests for derived cost breakdown totals."""

    @pytest.fixture
    def breakdown(self):
        return CostBreakdown(
            materials=[
                MaterialCategory(name="Foundation", items=[
                    MaterialItem(name="Concrete", quantity=10, unit="cubic yards", unit_cost=150.0),
                    MaterialItem(name="Rebar", quantity=40, unit="lbs", unit_cost=0.75),
                ]),
            ],
            labor=[LaborLine(trade="Carpentry", workers=2, hours=10, rate=65.0)],
            equipment=[EquipmentLine(name="Excavator", duration=2, rate=800.0)],
            subcontractors=[SubcontractorLine(trade="HVAC", scope="HVAC", amount=5000.0)],
            permits=300.0,
            insurance=100.0,
            bonding=37.0,
            overhead=1000.0,
        )

    def test_line_totals(self, breakdown):
        assert breakdown.materials[0].items[0].total_cost == 1500.0
        assert breakdown.materials[0].subtotal == 1530.0
        assert breakdown.labor[0].total == 1300.0
        assert breakdown.equipment[0].total == 1600.0

    def test_subtotals(self, breakdown):
        assert breakdown.materials_subtotal == 1530.0
        assert breakdown.labor_subtotal == 1300.0
        assert breakdown.equipment_subtotal == 1600.0
        assert breakdown.subcontractor_subtotal == 5000.0
        assert breakdown.indirect_costs == 1437.0
        assert breakdown.subtotal == pytest.approx(10867.0)

    def test_total_identity(self, breakdown):
        """Test total = subtotal + contingency + profit."""
        assert breakdown.contingency == pytest.approx(1086.7)
        assert breakdown.profit_margin == pytest.approx(1630.05)
        assert breakdown.total == pytest.approx(
            breakdown.subtotal + breakdown.contingency + breakdown.profit_margin
        )

    def test_totals_follow_line_items(self, breakdown):
        """Test aggregates are recomputed from replaced line items."""
        updated = breakdown.model_copy(update={
            "labor": (LaborLine(trade="Carpentry", workers=2, hours=10, rate=100.0),)
        })

        assert updated.labor_subtotal == 2000.0
        assert updated.subtotal == pytest.approx(breakdown.subtotal + 700.0)
        assert breakdown.labor_subtotal == 1300.0

    def test_line_items_are_read_only(self, breakdown):
        """Test an assembled breakdown cannot gain line items in place."""
        extra = MaterialCategory(name="Steel", items=[
            MaterialItem(name="Beams", quantity=1, unit="ea", unit_cost=1_000_000.0)
        ])

        assert isinstance(breakdown.materials, tuple)
        assert isinstance(breakdown.materials[0].items, tuple)
        with pytest.raises(AttributeError):
            breakdown.materials.append(extra)
        with pytest.raises(AttributeError):
            breakdown.labor.clear()
        assert breakdown.materials_subtotal == 1530.0

    def test_empty_breakdown(self):
        breakdown = CostBreakdown()
        assert breakdown.subtotal == 0
        assert breakdown.total == 0

    def test_rounded_view(self):
        breakdown = CostBreakdown(
            labor=[LaborLine(trade="General Labor", workers=3, hours=7.5, rate=45.333)],
            bonding=12.3456,
        )
        data = breakdown.rounded()

        assert data["bonding"] == 12.35
        assert data["labor"][0]["hours"] == 7.5
        assert data["labor"][0]["rate"] == 45.33
        assert data["labor"][0]["total"] == 1019.99
        assert data["contingencyRate"] == 0.10
        assert "laborSubtotal" in data
        assert "profitMargin" in data


class TestEstimateModel:
    """Tests for the Estimate model."""

    def test_collections_are_read_only(self):
        estimate = make_estimate(
            risks=[Risk(
                category=RiskCategory.COST,
                description="Large project scale",
                probability=RiskLevel.MEDIUM,
                impact=RiskLevel.HIGH,
            )],
            recommendations=["Consider value engineering sessions"],
            assumptions=["No major site issues"],
        )

        assert isinstance(estimate.risks, tuple)
        with pytest.raises(AttributeError):
            estimate.risks.clear()
        with pytest.raises(AttributeError):
            estimate.recommendations.append("Skip permits")
        with pytest.raises(AttributeError):
            estimate.cost_breakdown.materials.append(MaterialCategory(name="Steel"))
        assert len(estimate.risks) == 1

    def test_to_dict_lists(self):
        data = make_estimate(assumptions=["No major site issues"]).to_dict()

        assert data["assumptions"] == ["No major site issues"]
        assert data["risks"] == []
        assert data["comparableProjects"] == []

    def test_total_delegates_to_breakdown(self):
        estimate = make_estimate()
        assert estimate.total == pytest.approx(estimate.cost_breakdown.total)

    def test_confidence_ceiling(self):
        with pytest.raises(ValidationError):
            make_estimate(confidence=96)

    def test_complexity_bounds(self):
        with pytest.raises(ValidationError):
            make_estimate(complexity_factor=2.5)

    def test_to_dict_camel_case(self):
        data = make_estimate().to_dict()

        assert data["projectId"] == "proj-denver-002"
        assert data["status"] == "draft"
        assert data["season"] == "winter"
        assert "validUntil" in data
        assert data["costBreakdown"]["subtotal"] == 13000.0
        assert data["costBreakdown"]["total"] == 16250.0
