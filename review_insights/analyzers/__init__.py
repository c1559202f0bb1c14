"""Analyzers for the review project's insight cards."""

from .aggregation import (
    CrowdAverage,
    UserStats,
    compute_all_user_stats,
    compute_crowd_averages,
    crowd_average,
)
from .album import compute_album_preferences
from .cadence import analyze_cadence, count_streaks, format_hour_timeline
from .cohort import compute_cohort_percentile, compute_cohort_percentiles, compute_positivity_percentile
from .era_bias import compute_era_bias
from .hot_take import compute_hot_take_index
from .popularity import compute_popularity_reversal
from .prediction import compute_prediction_report
from .taste_twin import find_taste_twin
from .theme_affinity import compute_theme_affinities

__all__ = [
    "CrowdAverage",
    "UserStats",
    "compute_all_user_stats",
    "compute_crowd_averages",
    "crowd_average",
    "compute_album_preferences",
    "analyze_cadence",
    "count_streaks",
    "format_hour_timeline",
    "compute_cohort_percentile",
    "compute_cohort_percentiles",
    "compute_positivity_percentile",
    "compute_era_bias",
    "compute_hot_take_index",
    "compute_popularity_reversal",
    "compute_prediction_report",
    "find_taste_twin",
    "compute_theme_affinities",
]
