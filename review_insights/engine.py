"""
Insights Engine - the query surface over one rating snapshot.

An engine instance is built per request from a complete snapshot. Aggregates
(rating vectors, crowd averages, user stats) are computed once in the
constructor and shared by every query so all cards see the same numbers.
"""

import logging
from typing import Optional

from .analyzers.aggregation import (
    compute_all_user_stats,
    compute_crowd_averages,
    crowd_average,
    overall_average,
)
from .analyzers.album import compute_album_preferences
from .analyzers.cadence import analyze_cadence
from .analyzers.cohort import (
    compute_cohort_percentile,
    compute_cohort_percentiles,
    compute_positivity_percentile,
)
from .analyzers.era_bias import compute_era_bias
from .analyzers.hot_take import compute_hot_take_index
from .analyzers.popularity import compute_popularity_reversal
from .analyzers.prediction import compute_prediction_report
from .analyzers.taste_twin import find_taste_twin
from .analyzers.theme_affinity import compute_theme_affinities
from .config import EngineConfig
from .errors import NotFoundError
from .models import RatingSnapshot

logger = logging.getLogger(__name__)


class InsightsEngine:
    """Derive per-participant insight cards from a read-only snapshot."""

    def __init__(self, snapshot: RatingSnapshot, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.snapshot = snapshot.eligible()
        self.vectors = self.snapshot.rating_vectors()
        self.crowd_averages = compute_crowd_averages(self.snapshot)
        self.user_stats = compute_all_user_stats(self.snapshot)
        logger.debug(
            "Engine ready: %d reviews, %d participants with ratings, %d songs",
            len(self.snapshot.reviews), len(self.vectors), len(self.snapshot.songs),
        )

    def _vector(self, participant_id: str) -> dict[int, float]:
        vector = self.vectors.get(participant_id)
        if not vector:
            raise NotFoundError(participant_id, "no ratings")
        return vector

    # -- aggregation ----------------------------------------------------------

    def crowd_average(self, song_id: int):
        return crowd_average(self.crowd_averages, song_id)

    def user_stats_for(self, participant_id: str):
        self._vector(participant_id)
        return self.user_stats[participant_id]

    # -- cards ----------------------------------------------------------------

    def get_taste_twin(self, participant_id: str) -> dict:
        return find_taste_twin(
            participant_id,
            self.vectors,
            self.crowd_averages,
            config=self.config,
            songs=self.snapshot.songs,
            participants=self.snapshot.participants,
        )

    def get_hot_take_index(self, participant_id: str) -> dict:
        return compute_hot_take_index(
            participant_id,
            self.vectors,
            self.crowd_averages,
            config=self.config,
            songs=self.snapshot.songs,
        )

    def get_cohort_percentile(self, participant_id: str, dimension: str) -> dict:
        return compute_cohort_percentile(
            participant_id,
            dimension,
            self.user_stats,
            self.snapshot.participants,
            min_cohort_size=self.config.min_cohort_size,
        )

    def get_cohort_percentiles(self, participant_id: str, dimensions=None) -> dict:
        return compute_cohort_percentiles(
            participant_id,
            dimensions or self.config.cohort_dimensions,
            self.user_stats,
            self.snapshot.participants,
            min_cohort_size=self.config.min_cohort_size,
        )

    def get_positivity_percentile(self, participant_id: str) -> dict:
        result = compute_positivity_percentile(
            participant_id, self.user_stats, overall_average(self.snapshot)
        )
        result["cohort_percentiles"] = self.get_cohort_percentiles(participant_id)
        return result

    def get_theme_affinities(self, participant_id: str) -> dict:
        return compute_theme_affinities(
            participant_id, self._vector(participant_id), self.snapshot.songs
        )

    def get_popularity_reversal(self, participant_id: str) -> dict:
        return compute_popularity_reversal(
            participant_id, self._vector(participant_id), self.snapshot.songs
        )

    def get_era_bias(self, participant_id: str) -> dict:
        return compute_era_bias(
            participant_id,
            self._vector(participant_id),
            self.snapshot.songs,
            trend_threshold=self.config.trend_threshold,
        )

    def get_cadence_archetype(self, participant_id: str) -> dict:
        self._vector(participant_id)
        return analyze_cadence(
            participant_id,
            self.snapshot.reviews_for(participant_id),
            self.snapshot.songs,
            config=self.config,
        )

    def get_album_preferences(self, participant_id: str) -> dict:
        self._vector(participant_id)
        return compute_album_preferences(participant_id, self.vectors, self.snapshot.songs)

    def get_prediction_report(self, participant_id: str) -> dict:
        stats = self.user_stats_for(participant_id)

        themes = self.get_theme_affinities(participant_id)
        theme_correlations = [
            a["correlation"] for a in themes["attributes"] if a["kind"] == "theme"
        ]

        try:
            popularity = self.get_popularity_reversal(participant_id)["popularity_affinity"]
        except NotFoundError:
            popularity = None

        era = self.get_era_bias(participant_id)
        decade_averages = [d["avg_rating"] for d in era["decade_ratings"]]

        return compute_prediction_report(
            stats,
            theme_correlations,
            popularity,
            decade_averages,
            rating_scale=(self.config.rating_min, self.config.rating_max),
        )

    def run_all(self, participant_id: str) -> dict:
        """
        Compute every card for one participant.

        Cards that raise NotFoundError are listed under "unavailable" with
        the reason instead of failing the whole run. A participant with no
        ratings at all still raises.
        """
        self._vector(participant_id)

        cards = {
            "taste_twin": self.get_taste_twin,
            "hot_take_index": self.get_hot_take_index,
            "positivity_percentile": self.get_positivity_percentile,
            "theme_affinities": self.get_theme_affinities,
            "popularity_reversal": self.get_popularity_reversal,
            "era_bias": self.get_era_bias,
            "cadence_archetype": self.get_cadence_archetype,
            "album_preferences": self.get_album_preferences,
            "prediction_report": self.get_prediction_report,
        }

        results = {"participant_id": participant_id, "unavailable": {}}
        for name, method in cards.items():
            try:
                results[name] = method(participant_id)
            except NotFoundError as e:
                logger.info("Card %s unavailable for %s: %s", name, participant_id, e.reason)
                results["unavailable"][name] = e.reason

        return results
