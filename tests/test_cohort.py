"""Tests for cohort and positivity percentiles."""

import pytest
from review_insights.analyzers.aggregation import UserStats
from review_insights.analyzers.cohort import (
    compute_cohort_percentile,
    compute_cohort_percentiles,
    compute_positivity_percentile,
)
from review_insights.errors import NotFoundError
from review_insights.models import Participant


def _make_population():
    people = {
        "t": (7.0, {"city": "Helsinki", "gender": "F"}),
        "m1": (6.0, {"city": "Helsinki", "gender": "M"}),
        "m2": (7.0, {"city": " helsinki ", "gender": "M"}),
        "m3": (8.0, {"city": "HELSINKI"}),
        "o1": (5.0, {"city": "Turku", "gender": "F"}),
    }
    user_stats = {pid: UserStats(mean, 1.0, 10) for pid, (mean, _) in people.items()}
    participants = {pid: Participant(pid, cohort_fields=fields) for pid, (_, fields) in people.items()}
    return user_stats, participants


class TestCohortPercentile:
    def test_percentile_at_or_below(self):
        user_stats, participants = _make_population()
        result = compute_cohort_percentile("t", "city", user_stats, participants, min_cohort_size=3)
        assert result["suppressed"] is False
        assert result["cohort_size"] == 3
        assert result["percentile"] == pytest.approx(200 / 3)
        assert result["value"] == "Helsinki"

    def test_small_cohort_suppressed(self):
        user_stats, participants = _make_population()
        result = compute_cohort_percentile("t", "gender", user_stats, participants, min_cohort_size=3)
        assert result["suppressed"] is True
        assert result["percentile"] is None
        assert result["reason"] == "cohort_too_small"
        assert result["cohort_size"] == 1

    def test_threshold_change_only_affects_small_cohorts(self):
        user_stats, participants = _make_population()
        strict = compute_cohort_percentile("t", "city", user_stats, participants, min_cohort_size=3)
        loose = compute_cohort_percentile("t", "city", user_stats, participants, min_cohort_size=1)
        assert strict == loose

        gender = compute_cohort_percentile("t", "gender", user_stats, participants, min_cohort_size=1)
        assert gender["suppressed"] is False
        assert gender["percentile"] == 100.0

    def test_missing_value_suppressed(self):
        user_stats, participants = _make_population()
        result = compute_cohort_percentile("m3", "gender", user_stats, participants)
        assert result["suppressed"] is True
        assert result["reason"] == "no_value"

    def test_target_not_in_own_cohort(self):
        user_stats, participants = _make_population()
        result = compute_cohort_percentile("m3", "city", user_stats, participants)
        assert result["cohort_size"] == 3
        assert result["percentile"] == 100.0

    def test_no_ratings(self):
        user_stats, participants = _make_population()
        with pytest.raises(NotFoundError):
            compute_cohort_percentile("nobody", "city", user_stats, participants)

    def test_dimensions_are_independent(self):
        user_stats, participants = _make_population()
        results = compute_cohort_percentiles("t", ["city", "gender"], user_stats, participants, 3)
        assert results["city"]["suppressed"] is False
        assert results["gender"]["suppressed"] is True


class TestPositivityPercentile:
    def test_against_everyone_else(self):
        user_stats, _ = _make_population()
        result = compute_positivity_percentile("t", user_stats, overall_avg=6.6)
        # m1, m2 and o1 are at or below 7 out of four others
        assert result["all_percentile"] == 75.0
        assert result["compared_with"] == 4
        assert result["user_avg"] == 7.0
        assert result["total_reviews"] == 10
        assert result["all_avg"] == 6.6

    def test_no_ratings(self):
        user_stats, _ = _make_population()
        with pytest.raises(NotFoundError):
            compute_positivity_percentile("nobody", user_stats, 6.0)
