"""Tests for era bias."""

import pytest
from review_insights.analyzers.era_bias import classify_trend, compute_era_bias, decade_of
from review_insights.errors import NotFoundError
from review_insights.models import Song


def _make_songs(years):
    return {song_id: Song(song_id, release_year=year) for song_id, year in years.items()}


class TestDecade:
    def test_decade_of(self):
        assert decade_of(1999) == 1990
        assert decade_of(2000) == 2000

    def test_classify_trend(self):
        assert classify_trend(0.1) == "increasing"
        assert classify_trend(-0.1) == "decreasing"
        assert classify_trend(0.005) == "stable"


class TestEraBias:
    def test_increasing_trend(self):
        songs = _make_songs({1: 1975, 2: 1985, 3: 1995})
        result = compute_era_bias("a", {1: 6, 2: 7, 3: 8}, songs)
        assert result["trend_slope"] == pytest.approx(0.1)
        assert result["trend_direction"] == "increasing"
        assert result["best_decade"] == 1990
        assert result["worst_decade"] == 1970
        assert [d["decade"] for d in result["decade_ratings"]] == [1970, 1980, 1990]

    def test_decade_average(self):
        songs = _make_songs({1: 1981, 2: 1989, 3: 1995})
        result = compute_era_bias("a", {1: 6, 2: 9, 3: 8}, songs)
        eighties = result["decade_ratings"][0]
        assert eighties["avg_rating"] == 7.5
        assert eighties["review_count"] == 2

    def test_single_decade_is_stable(self):
        songs = _make_songs({1: 1991, 2: 1995})
        result = compute_era_bias("a", {1: 4, 2: 10}, songs)
        assert result["trend_slope"] == 0.0
        assert result["trend_direction"] == "stable"

    def test_ties_go_to_earliest_decade(self):
        songs = _make_songs({1: 1975, 2: 1985})
        result = compute_era_bias("a", {1: 8, 2: 8}, songs)
        assert result["best_decade"] == 1970
        assert result["worst_decade"] == 1970

    def test_songs_without_year(self):
        songs = _make_songs({1: None})
        result = compute_era_bias("a", {1: 8}, songs)
        assert result["decade_ratings"] == []
        assert result["best_decade"] is None

    def test_no_ratings(self):
        with pytest.raises(NotFoundError):
            compute_era_bias("a", {}, {})
