"""
Aggregation Layer - crowd averages and per-user rating statistics.

Everything downstream (twin search, hot takes, cohorts) works off the
structures built here, computed once per request from one snapshot.
"""

import logging
from typing import NamedTuple, Optional

from ..models import RatingSnapshot
from .stats import mean_or, population_std

logger = logging.getLogger(__name__)


class CrowdAverage(NamedTuple):
    mean: Optional[float]  # None when count == 0; never coerced to 0.0
    count: int

    @property
    def defined(self) -> bool:
        return self.count > 0


class UserStats(NamedTuple):
    mean: Optional[float]
    std: float
    count: int


NO_CROWD_DATA = CrowdAverage(mean=None, count=0)


def compute_crowd_averages(snapshot: RatingSnapshot) -> dict[int, CrowdAverage]:
    """
    Mean rating per song across all eligible reviews.

    Songs nobody rated are absent from the map; look them up with
    crowd_average() to get the explicit no-data result.
    """
    ratings_by_song: dict[int, list[float]] = {}
    for review in snapshot.reviews:
        ratings_by_song.setdefault(review.song_id, []).append(review.rating)

    averages = {
        song_id: CrowdAverage(mean=mean_or(ratings), count=len(ratings))
        for song_id, ratings in ratings_by_song.items()
    }
    logger.debug("Crowd averages computed for %d songs", len(averages))
    return averages


def crowd_average(averages: dict[int, CrowdAverage], song_id: int) -> CrowdAverage:
    return averages.get(song_id, NO_CROWD_DATA)


def compute_user_stats(ratings: list[float]) -> UserStats:
    """Mean, population std-dev and count over one participant's ratings."""
    return UserStats(
        mean=mean_or(ratings),
        std=population_std(ratings),
        count=len(ratings),
    )


def compute_all_user_stats(snapshot: RatingSnapshot) -> dict[str, UserStats]:
    """participant_id -> UserStats for every participant with at least one rating."""
    return {
        participant_id: compute_user_stats(list(vector.values()))
        for participant_id, vector in snapshot.rating_vectors().items()
    }


def overall_average(snapshot: RatingSnapshot) -> Optional[float]:
    return mean_or([r.rating for r in snapshot.reviews])
