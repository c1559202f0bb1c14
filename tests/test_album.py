"""Tests for album preferences."""

import pytest
from review_insights.analyzers.album import album_averages, compute_album_preferences
from review_insights.errors import NotFoundError
from review_insights.models import Song


def _make_songs():
    return {
        1: Song(1, album="Aamu"),
        2: Song(2, album="Aamu"),
        3: Song(3, album="Brandy"),
        4: Song(4, album="Brandy"),
        5: Song(5),
    }


class TestAlbumPreferences:
    def test_album_averages(self):
        averages = album_averages({1: 9, 2: 7, 3: 5, 5: 10}, _make_songs())
        assert averages == {"Aamu": 8.0, "Brandy": 5.0}

    def test_fav_and_worst(self):
        vectors = {
            "t": {1: 9, 2: 7, 3: 5, 4: 5},
            "o1": {1: 10, 3: 4},
            "o2": {1: 6, 3: 6},
            "o3": {5: 4},
        }
        result = compute_album_preferences("t", vectors, _make_songs())
        assert result["fav_album"] == "Aamu"
        assert result["fav_album_user_avg"] == 8.0
        assert result["worst_album"] == "Brandy"
        assert result["users_who_liked_fav_more"] == 1
        assert result["users_who_liked_worst_less"] == 1
        assert result["albums_rated"] == 2

    def test_ties_alphabetical(self):
        result = compute_album_preferences("t", {"t": {1: 6, 3: 6}}, _make_songs())
        assert result["fav_album"] == "Aamu"
        assert result["worst_album"] == "Aamu"

    def test_no_album_data(self):
        with pytest.raises(NotFoundError):
            compute_album_preferences("t", {"t": {5: 6}}, _make_songs())
