"""
Cohort Percentile Engine - where a participant's average rating sits within
groups of people who share a trait (gender, birth decade, city...).

Cohorts smaller than the configured minimum are suppressed rather than
reported: tiny groups give meaningless numbers and can identify people.
"""

import logging
from typing import Optional

from ..errors import NotFoundError
from .aggregation import UserStats
from .stats import percentile_at_or_below

logger = logging.getLogger(__name__)


def _normalize(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().lower()
    return text or None


def _target_mean(target_id: str, user_stats: dict[str, UserStats]) -> float:
    stats = user_stats.get(target_id)
    if stats is None or stats.count == 0:
        raise NotFoundError(target_id, "no ratings")
    return stats.mean


def _suppressed(dimension: str, value, cohort_size: int, reason: str) -> dict:
    return {
        "dimension": dimension,
        "value": value,
        "cohort_size": cohort_size,
        "percentile": None,
        "suppressed": True,
        "reason": reason,
    }


def compute_cohort_percentile(
    target_id: str,
    dimension: str,
    user_stats: dict[str, UserStats],
    participants: dict,
    min_cohort_size: int = 3,
) -> dict:
    """
    Percentile of the target's mean rating within one cohort.

    The cohort is every other eligible participant with ratings whose
    `dimension` field matches the target's value. Percentile counts members
    whose mean is at or below the target's.

    Raises:
        NotFoundError: the target has no ratings
    """
    target_mean = _target_mean(target_id, user_stats)

    participant = participants.get(target_id)
    raw_value = participant.cohort_fields.get(dimension) if participant else None
    value = _normalize(raw_value)
    if value is None:
        return _suppressed(dimension, raw_value, 0, "no_value")

    cohort_means = [
        stats.mean
        for pid, stats in user_stats.items()
        if pid != target_id
        and stats.count > 0
        and pid in participants
        and _normalize(participants[pid].cohort_fields.get(dimension)) == value
    ]

    if len(cohort_means) < min_cohort_size:
        logger.debug(
            "Cohort %s=%s suppressed for %s (%d < %d)",
            dimension, value, target_id, len(cohort_means), min_cohort_size,
        )
        return _suppressed(dimension, raw_value, len(cohort_means), "cohort_too_small")

    return {
        "dimension": dimension,
        "value": raw_value,
        "cohort_size": len(cohort_means),
        "percentile": percentile_at_or_below(target_mean, cohort_means),
        "suppressed": False,
        "reason": None,
    }


def compute_cohort_percentiles(
    target_id: str,
    dimensions,
    user_stats: dict[str, UserStats],
    participants: dict,
    min_cohort_size: int = 3,
) -> dict[str, dict]:
    """Evaluate each dimension on its own; one suppression never hides another."""
    _target_mean(target_id, user_stats)
    return {
        dimension: compute_cohort_percentile(
            target_id, dimension, user_stats, participants, min_cohort_size
        )
        for dimension in dimensions
    }


def compute_positivity_percentile(
    target_id: str,
    user_stats: dict[str, UserStats],
    overall_avg: Optional[float],
) -> dict:
    """
    The target's mean rating against every other participant.

    Returns:
        user_avg, rating_std, total_reviews, all_avg and all_percentile
        (share of others at or below the target's mean)
    """
    target_mean = _target_mean(target_id, user_stats)
    target = user_stats[target_id]

    others = [
        stats.mean for pid, stats in user_stats.items()
        if pid != target_id and stats.count > 0
    ]

    return {
        "user_avg": target_mean,
        "rating_std": target.std,
        "total_reviews": target.count,
        "all_avg": overall_avg,
        "all_percentile": percentile_at_or_below(target_mean, others),
        "compared_with": len(others),
    }
