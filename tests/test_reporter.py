"""Tests for the text reporter and JSON export."""

import json

import pytest
from review_insights.config import EngineConfig
from review_insights.engine import InsightsEngine
from review_insights.models import Participant, RatingSnapshot, Review, Song
from review_insights.reporter import (
    export_insights_json,
    format_finnish_number,
    format_rating,
    format_summary,
    to_finnish_grade,
)


def _make_results():
    ratings = {
        "a": {1: 9, 2: 8, 3: 6},
        "b": {1: 8, 2: 8, 3: 5},
        "c": {1: 4, 2: 5, 3: 9},
    }
    reviews = [Review(pid, s, r) for pid, v in ratings.items() for s, r in v.items()]
    songs = [Song(s, release_year=1980 + s) for s in (1, 2, 3)]
    participants = [Participant(pid, name=pid.upper()) for pid in ratings]
    engine = InsightsEngine(RatingSnapshot.build(reviews, songs, participants), EngineConfig(min_overlap=3))
    return engine.run_all("a")


class TestFinnishFormatting:
    @pytest.mark.parametrize(
        "rating, grade",
        [(8.0, "8"), (8.25, "8+"), (8.5, "8,5"), (8.75, "9-"), (8.9, "9")],
    )
    def test_grades(self, rating, grade):
        assert to_finnish_grade(rating) == grade

    def test_number(self):
        assert format_finnish_number(7.456) == "7,46"
        assert format_rating(7.0) == "7,00"
        assert format_rating(7.0, individual=True) == "7"


class TestSummary:
    def test_summary_lines(self):
        summary = format_summary(_make_results())
        assert summary.startswith("Insights for a")
        assert "Taste twin:      B" in summary
        assert "Unavailable: cadence_archetype (no timestamped reviews)" in summary


class TestExportJson:
    def test_export(self, tmp_path):
        out = tmp_path / "out" / "insights.json"
        export_insights_json(_make_results(), str(out))
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["insights"]["participant_id"] == "a"
        assert "generated_at" in data
