"""
Cadence Analyzer - when and how a participant submits reviews.

Builds hour-of-day and day-of-week histograms, measures the lag between a
song's release and its review, detects binge streaks and assigns a
reviewing archetype.

Day-of-week indices run 0 = Sunday .. 6 = Saturday.
"""

import logging
from datetime import datetime, time, timedelta
from typing import Optional

from ..config import EngineConfig
from ..errors import NotFoundError
from ..models import Review, Song
from .stats import lower_median, mean_or

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

ARCHETYPE_LABELS = {
    "early": "Early Bird",
    "late": "Late Bloomer",
    "binge": "Binge Reviewer",
    "deliberate": "Thoughtful Reviewer",
    "balanced": "Balanced Reviewer",
}


def _localize(dt: datetime, tz) -> datetime:
    """Aware timestamps are converted; naive ones are taken as local to tz."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def day_index(dt: datetime) -> int:
    """0 = Sunday (datetime.weekday() has 0 = Monday)."""
    return (dt.weekday() + 1) % 7


def most_active(histogram: list[int]) -> Optional[int]:
    """Index of the largest bucket, lowest index on ties; None if empty."""
    if not any(histogram):
        return None
    return histogram.index(max(histogram))


def build_histograms(timestamps: list[datetime]) -> tuple[list[int], list[int]]:
    hours = [0] * 24
    days = [0] * 7
    for ts in timestamps:
        hours[ts.hour] += 1
        days[day_index(ts)] += 1
    return hours, days


def count_streaks(timestamps: list[datetime], length: int = 20, window: timedelta = timedelta(hours=3)) -> int:
    """
    Count non-overlapping binge streaks.

    Scanning chronologically from review i, the run extends while each
    review falls within `window` of review i. A run of at least `length`
    reviews is a streak and the scan resumes after its last member;
    otherwise the scan moves on to review i + 1.
    """
    ordered = sorted(timestamps)
    n = len(ordered)
    streaks = 0
    i = 0

    while i < n:
        j = i
        while j + 1 < n and ordered[j + 1] - ordered[i] <= window:
            j += 1

        if j - i + 1 >= length:
            streaks += 1
            i = j + 1
        else:
            i += 1

    return streaks


def review_lag_days(review: Review, song: Optional[Song], tz) -> Optional[float]:
    """Days from the song's release date (local midnight) to the review."""
    if song is None or song.release_date is None or review.reviewed_at is None:
        return None
    released = datetime.combine(song.release_date, time.min, tzinfo=tz)
    reviewed = _localize(review.reviewed_at, tz)
    return (reviewed - released).total_seconds() / 86400


def classify_archetype(avg_lag: Optional[float], reviews_per_day: float, config: EngineConfig) -> str:
    """
    Fixed rule order: early, late, binge, deliberate, else balanced.

    Lag rules only apply when lag could be measured.
    """
    if avg_lag is not None and avg_lag < config.early_lag_days:
        return "early"
    elif avg_lag is not None and avg_lag > config.late_lag_days:
        return "late"
    elif reviews_per_day > config.binge_reviews_per_day:
        return "binge"
    elif reviews_per_day < config.deliberate_reviews_per_day:
        return "deliberate"
    return "balanced"


def time_preference(hour: Optional[int]) -> Optional[str]:
    if hour is None:
        return None
    if 6 <= hour < 12:
        return "Morning Person"
    elif 12 <= hour < 18:
        return "Afternoon Enthusiast"
    elif 18 <= hour < 22:
        return "Evening Listener"
    return "Night Owl"


def analyze_cadence(
    target_id: str,
    reviews: list[Review],
    songs: dict[int, Song],
    config: Optional[EngineConfig] = None,
) -> dict:
    """
    Analyze one participant's reviewing rhythm.

    Args:
        target_id: Participant being analyzed
        reviews: That participant's reviews
        songs: song_id -> Song (release dates for lag)
        config: Thresholds, streak parameters and timezone

    Returns:
        Dictionary with hour/day histograms, most active buckets, lag stats,
        streak count, reviews per active day and the archetype

    Raises:
        NotFoundError: no review carries a timestamp
    """
    config = config or EngineConfig()
    tz = config.zone()

    timed = [r for r in reviews if r.reviewed_at is not None]
    if not timed:
        raise NotFoundError(target_id, "no timestamped reviews")

    local_times = [_localize(r.reviewed_at, tz) for r in timed]
    hours, days = build_histograms(local_times)
    peak_hour = most_active(hours)
    peak_day = most_active(days)

    lags = [
        lag for lag in (review_lag_days(r, songs.get(r.song_id), tz) for r in timed)
        if lag is not None
    ]
    avg_lag = mean_or(lags)

    active_days = len({ts.date() for ts in local_times})
    reviews_per_day = len(timed) / max(active_days, 1)

    streaks = count_streaks(
        local_times,
        length=config.streak_length,
        window=timedelta(hours=config.streak_window_hours),
    )

    archetype = classify_archetype(avg_lag, reviews_per_day, config)
    logger.debug(
        "Cadence for %s: %d reviews, %d active days, %d streaks -> %s",
        target_id, len(timed), active_days, streaks, archetype,
    )

    return {
        "hour_histogram": hours,
        "day_histogram": days,
        "most_active_hour": peak_hour,
        "most_active_day": peak_day,
        "time_preference": time_preference(peak_hour),
        "day_preference": DAY_NAMES[peak_day] if peak_day is not None else None,
        "lag_stats": {
            "mean_days": avg_lag,
            "median_days": lower_median(lags),
            "reviews_with_lag": len(lags),
        },
        "reviews_per_day": reviews_per_day,
        "active_days": active_days,
        "streak_count": streaks,
        "archetype": archetype,
        "archetype_label": ARCHETYPE_LABELS[archetype],
    }


def format_hour_timeline(hour_histogram: list[int], width: int = 30) -> str:
    """
    Generate ASCII 24-hour timeline visualization.

    Args:
        hour_histogram: List of 24 integers (reviews per hour)
        width: Maximum bar width in characters

    Returns:
        Multi-line string with timeline visualization
    """
    if not hour_histogram or len(hour_histogram) != 24:
        return ""

    max_count = max(hour_histogram) or 1
    peak_hour = most_active(hour_histogram)

    lines = []
    for hour in range(24):
        count = hour_histogram[hour]
        bar = "=" * int((count / max_count) * width)
        peak_marker = "  << most active" if hour == peak_hour else ""
        lines.append(f"{hour:02d}:00 |{bar}{peak_marker}")

    return "\n".join(lines)
