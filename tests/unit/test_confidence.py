"""Unit tests for the confidence scorer."""

import pytest
from datetime import date

from costengine.services.confidence import (
    BASE_CONFIDENCE,
    MAX_CONFIDENCE,
    calculate_confidence,
    comparable_bonus,
    completeness_bonus,
)
from tests.fixtures.mock_project_data import (
    DENVER_RESIDENTIAL_PROJECT,
    MINIMAL_RESIDENTIAL_PROJECT,
    OAKLAND_COMMERCIAL_PROJECT,
    make_comparable,
    make_project,
)


class TestCompletenessBonus:
    """Tests for input completeness points."""

    def test_minimal_project(self):
        assert completeness_bonus(MINIMAL_RESIDENTIAL_PROJECT) == 0

    def test_fully_specified_project(self):
        assert completeness_bonus(DENVER_RESIDENTIAL_PROJECT) == 25

    def test_oakland_project(self):
        """Test square footage and stories, no address or start date."""
        assert completeness_bonus(OAKLAND_COMMERCIAL_PROJECT) == 15

    @pytest.mark.parametrize("overrides,expected", [
        ({"specifications": {"square_footage": 1200}}, 10),
        ({"specifications": {"square_footage": 0}}, 0),
        ({"specifications": {"stories": 0}}, 0),
        ({"location": {"address": "1 Main St"}}, 5),
        ({"timeline": {"estimated_start_date": date(2025, 6, 1)}}, 5),
    ])
    def test_individual_fields(self, overrides, expected):
        assert completeness_bonus(make_project(**overrides)) == expected


class TestComparableBonus:
    """Tests for comparable-match points."""

    def test_no_comparables(self):
        assert comparable_bonus([]) == 0

    def test_perfect_matches(self):
        assert comparable_bonus([make_comparable(similarity=100)] * 3) == 20

    def test_average_similarity(self):
        comparables = [make_comparable(similarity=60), make_comparable(similarity=40)]
        assert comparable_bonus(comparables) == pytest.approx(10.0)


class TestCalculateConfidence:
    """Tests for the combined score."""

    def test_minimal_project_is_base(self):
        assert calculate_confidence(MINIMAL_RESIDENTIAL_PROJECT, []) == BASE_CONFIDENCE

    def test_zero_comparables_is_base_plus_completeness(self):
        assert calculate_confidence(OAKLAND_COMMERCIAL_PROJECT, []) == 65

    def test_rounds_half_up(self):
        # 65 + 97.5 / 5 = 84.5
        comparables = [make_comparable(similarity=97), make_comparable(similarity=98)]
        assert calculate_confidence(OAKLAND_COMMERCIAL_PROJECT, comparables) == 85

    def test_ceiling(self):
        comparables = [make_comparable(similarity=100)]
        score = calculate_confidence(DENVER_RESIDENTIAL_PROJECT, comparables)

        assert score == MAX_CONFIDENCE
        assert isinstance(score, int)
