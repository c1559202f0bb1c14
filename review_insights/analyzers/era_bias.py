"""
Era Bias - per-decade rating averages and the trend across decades.
"""

from ..errors import NotFoundError
from ..models import Song
from .stats import mean_or, ols_slope


def decade_of(year: int) -> int:
    return (year // 10) * 10


def decade_stats(vector: dict[int, float], songs: dict[int, Song]) -> list[dict]:
    """
    Group ratings by release decade.

    Returns:
        [{"decade", "avg_rating", "review_count"}] sorted by decade; songs
        without a release year are left out
    """
    by_decade: dict[int, list[float]] = {}
    for song_id, rating in vector.items():
        song = songs.get(song_id)
        if song is None or not song.release_year:
            continue
        by_decade.setdefault(decade_of(song.release_year), []).append(rating)

    return [
        {
            "decade": decade,
            "avg_rating": mean_or(ratings),
            "review_count": len(ratings),
        }
        for decade, ratings in sorted(by_decade.items())
    ]


def classify_trend(slope: float, threshold: float = 0.01) -> str:
    if slope > threshold:
        return "increasing"
    elif slope < -threshold:
        return "decreasing"
    return "stable"


def compute_era_bias(
    target_id: str,
    vector: dict[int, float],
    songs: dict[int, Song],
    trend_threshold: float = 0.01,
) -> dict:
    """
    Per-decade stats plus the least-squares slope of decade mean on decade.

    With fewer than two decades the slope is 0 and the trend is stable.
    Best and worst decades break ties towards the earliest decade.

    Raises:
        NotFoundError: the target has no ratings
    """
    if not vector:
        raise NotFoundError(target_id, "no ratings")

    stats = decade_stats(vector, songs)

    slope = 0.0
    if len(stats) >= 2:
        slope = ols_slope(
            [float(s["decade"]) for s in stats],
            [s["avg_rating"] for s in stats],
        )

    best = worst = None
    if stats:
        best = max(stats, key=lambda s: (s["avg_rating"], -s["decade"]))["decade"]
        worst = min(stats, key=lambda s: (s["avg_rating"], s["decade"]))["decade"]

    return {
        "decade_ratings": stats,
        "best_decade": best,
        "worst_decade": worst,
        "trend_slope": slope,
        "trend_direction": classify_trend(slope, trend_threshold),
    }
