"""Tests for the hot take index."""

import pytest
from review_insights.analyzers.aggregation import CrowdAverage
from review_insights.analyzers.hot_take import compute_hot_take_index, hot_take_index, song_deltas
from review_insights.config import EngineConfig
from review_insights.errors import NotFoundError
from review_insights.models import Song


def _make_crowd(mean=5.0, songs=(1, 2, 3)):
    return {song_id: CrowdAverage(mean, 4) for song_id in songs}


def _make_vectors():
    # Each user sits a constant distance from a crowd average of 5
    return {
        "a": {1: 5, 2: 5, 3: 5},
        "b": {1: 6, 2: 6, 3: 6},
        "c": {1: 7, 2: 3, 3: 7},
        "d": {1: 8, 2: 8, 3: 2},
    }


class TestHotTakeIndex:
    def test_mean_absolute_delta(self):
        assert hot_take_index({1: 7, 2: 3, 3: 7}, _make_crowd()) == 2.0

    def test_songs_without_crowd_data_are_skipped(self):
        deltas = song_deltas({1: 6, 99: 10}, _make_crowd())
        assert [d["song_id"] for d in deltas] == [1]

    def test_no_crowd_data_is_none(self):
        assert hot_take_index({99: 10}, _make_crowd()) is None


class TestComputeHotTakeIndex:
    def test_percentile_strictly_below(self):
        vectors = _make_vectors()
        result = compute_hot_take_index("c", vectors, _make_crowd())
        assert result["index"] == 2.0
        # a (0) and b (1) are below; d (3) is not
        assert result["percentile"] == pytest.approx(200 / 3)
        assert result["compared_with"] == 3

    def test_extremes(self):
        vectors = _make_vectors()
        assert compute_hot_take_index("a", vectors, _make_crowd())["percentile"] == 0.0
        assert compute_hot_take_index("d", vectors, _make_crowd())["percentile"] == 100.0

    def test_percentile_is_monotonic_in_index(self):
        vectors = _make_vectors()
        crowd = _make_crowd()
        results = [compute_hot_take_index(pid, vectors, crowd) for pid in vectors]
        results.sort(key=lambda r: r["index"])
        percentiles = [r["percentile"] for r in results]
        assert percentiles == sorted(percentiles)

    def test_equal_index_does_not_count(self):
        vectors = _make_vectors()
        vectors["e"] = {1: 4, 2: 4, 3: 4}
        result = compute_hot_take_index("b", vectors, _make_crowd())
        # Only a is strictly below b; e ties
        assert result["percentile"] == 25.0

    def test_top_hot_takes(self):
        vectors = _make_vectors()
        songs = {3: Song(3, title="Kolmas")}
        result = compute_hot_take_index("d", vectors, _make_crowd(), songs=songs)
        top = result["top_hot_takes"]
        assert [t["song_id"] for t in top] == [1, 2, 3]
        assert top[2]["title"] == "Kolmas"
        assert top[2]["delta"] == -3.0

    def test_top_hot_takes_limit(self):
        vectors = _make_vectors()
        config = EngineConfig(top_hot_takes_limit=2)
        result = compute_hot_take_index("c", vectors, _make_crowd(), config)
        assert len(result["top_hot_takes"]) == 2

    def test_no_ratings(self):
        with pytest.raises(NotFoundError):
            compute_hot_take_index("zed", _make_vectors(), _make_crowd())

    def test_no_crowd_data(self):
        vectors = {"a": {99: 10}, "b": {1: 5}}
        with pytest.raises(NotFoundError):
            compute_hot_take_index("a", vectors, _make_crowd())

    def test_parallel_matches_sequential(self):
        vectors = _make_vectors()
        crowd = _make_crowd()
        sequential = compute_hot_take_index("c", vectors, crowd)
        parallel = compute_hot_take_index("c", vectors, crowd, EngineConfig(max_workers=3))
        assert sequential == parallel
