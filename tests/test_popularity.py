"""Tests for popularity reversal."""

import pytest
from review_insights.analyzers.popularity import classify_popularity, compute_popularity_reversal
from review_insights.errors import NotFoundError
from review_insights.models import Song


def _make_songs(count=4):
    return {
        song_id: Song(song_id, popularity_rank=song_id, title=f"Song {song_id}")
        for song_id in range(1, count + 1)
    }


class TestClassifyPopularity:
    @pytest.mark.parametrize(
        "affinity, label",
        [
            (0.5, "mainstream_lover"),
            (0.3, "popularity_appreciator"),
            (0.1, "balanced"),
            (0.0, "balanced"),
            (-0.2, "indie_enthusiast"),
            (-0.5, "underground_explorer"),
        ],
    )
    def test_labels(self, affinity, label):
        assert classify_popularity(affinity) == label


class TestPopularityReversal:
    def test_prefers_hits(self):
        result = compute_popularity_reversal("a", {1: 10, 2: 8, 3: 6, 4: 4}, _make_songs())
        assert result["rank_correlation"] == pytest.approx(-1.0)
        assert result["popularity_affinity"] == pytest.approx(1.0)
        assert result["personality"] == "mainstream_lover"
        assert result["is_mainstream"] is True
        assert result["is_underground"] is False

    def test_prefers_deep_cuts(self):
        result = compute_popularity_reversal("a", {1: 4, 2: 6, 3: 8, 4: 10}, _make_songs())
        assert result["personality"] == "underground_explorer"
        assert result["is_underground"] is True

    def test_examples(self):
        result = compute_popularity_reversal("a", {1: 10, 2: 8, 3: 6, 4: 4}, _make_songs())
        assert [e["song_id"] for e in result["popular_examples"]] == [1, 2, 3]
        assert [e["song_id"] for e in result["unpopular_examples"]] == [4, 3, 2]
        assert result["popular_examples"][0]["title"] == "Song 1"

    def test_songs_without_rank_skipped(self):
        songs = _make_songs()
        songs[5] = Song(5)
        result = compute_popularity_reversal("a", {1: 10, 2: 8, 5: 4}, songs)
        assert result["songs_with_rank"] == 2

    def test_no_ranked_songs(self):
        with pytest.raises(NotFoundError):
            compute_popularity_reversal("a", {7: 8}, {7: Song(7)})
