"""Unit tests for the comparable project matcher."""

import pytest
from datetime import date, timedelta

from costengine.services.comparable_matcher import (
    find_comparables,
    round_half_up,
    score_comparable,
    years_since,
)
from tests.fixtures.mock_project_data import WINTER_NOW, make_comparable

TARGET_SIZE = 15000
TARGET_LOCATION = "Oakland, CA"


def _score(comparable):
    return score_comparable(comparable, TARGET_SIZE, TARGET_LOCATION, WINTER_NOW)


class TestScoreComparable:
    """Tests for similarity scoring."""

    def test_exact_match_scores_100(self):
        assert _score(make_comparable()) == 100

    def test_location_penalty(self):
        assert _score(make_comparable(location="Berkeley, CA")) == 80

    def test_size_penalty(self):
        # 3,000 sq ft off a 15,000 target = 20%
        assert _score(make_comparable(size=12000)) == 80

    def test_size_penalty_capped(self):
        assert _score(make_comparable(size=90000)) == 70

    def test_age_penalty(self):
        one_year_ago = WINTER_NOW.date() - timedelta(days=365)
        assert _score(make_comparable(completed_date=one_year_ago)) == 98

    def test_age_penalty_capped(self):
        long_ago = WINTER_NOW.date() - timedelta(days=365 * 20)
        assert _score(make_comparable(completed_date=long_ago)) == 90

    def test_future_completion_has_no_age_penalty(self):
        next_month = WINTER_NOW.date() + timedelta(days=30)
        assert _score(make_comparable(completed_date=next_month)) == 100

    def test_all_penalties_combined(self):
        """Test worst case is 100 - 30 - 20 - 10."""
        comparable = make_comparable(
            size=1000,
            location="Fresno, CA",
            completed_date=WINTER_NOW.date() - timedelta(days=365 * 10),
        )
        assert _score(comparable) == 40

    def test_monotonic_in_size_difference(self):
        """Test similarity never increases as the size gap widens."""
        scores = [_score(make_comparable(size=TARGET_SIZE + gap)) for gap in range(0, 9000, 250)]
        assert scores == sorted(scores, reverse=True)

    def test_seed_oakland_record(self):
        """Test the shipped Oakland record (completed 2023-06-15) scored in January 2025."""
        comparable = make_comparable(completed_date=date(2023, 6, 15))
        # 580 days old -> 3.18 point age penalty
        assert _score(comparable) == 97


class TestHelpers:
    """Tests for rounding and age helpers."""

    @pytest.mark.parametrize("value,expected", [
        (96.5, 97),
        (2.5, 3),
        (0.49, 0),
        (99.0, 99),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_years_since(self):
        assert years_since(WINTER_NOW.date() - timedelta(days=730), WINTER_NOW) == pytest.approx(2.0)
        assert years_since(WINTER_NOW.date() + timedelta(days=10), WINTER_NOW) == 0.0


class TestFindComparables:
    """Tests for ranking."""

    def test_empty_candidates(self):
        assert find_comparables([], TARGET_SIZE, TARGET_LOCATION, WINTER_NOW) == []

    def test_sorted_descending(self):
        candidates = [
            make_comparable(title="Far", location="Fresno, CA"),
            make_comparable(title="Exact"),
            make_comparable(title="Bigger", size=18000),
        ]
        ranked = find_comparables(candidates, TARGET_SIZE, TARGET_LOCATION, WINTER_NOW)

        assert [c.title for c in ranked] == ["Exact", "Far", "Bigger"]
        assert [c.similarity for c in ranked] == [100, 80, 80]

    def test_ties_keep_store_order(self):
        candidates = [
            make_comparable(title="First", location="Fresno, CA"),
            make_comparable(title="Second", location="Berkeley, CA"),
        ]
        ranked = find_comparables(candidates, TARGET_SIZE, TARGET_LOCATION, WINTER_NOW)

        assert [c.title for c in ranked] == ["First", "Second"]

    def test_limit(self):
        candidates = [make_comparable(title=f"Project {i}", size=15000 + i * 100) for i in range(8)]
        ranked = find_comparables(candidates, TARGET_SIZE, TARGET_LOCATION, WINTER_NOW, limit=5)

        assert len(ranked) == 5
        assert ranked[0].title == "Project 0"

    def test_candidates_not_mutated(self):
        """Test scores live on copies, not on the store's records."""
        candidates = [make_comparable()]
        ranked = find_comparables(candidates, TARGET_SIZE, TARGET_LOCATION, WINTER_NOW)

        assert ranked[0].similarity == 100
        assert candidates[0].similarity is None
