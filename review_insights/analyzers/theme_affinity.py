"""
Theme Affinities - how song attributes relate to one participant's ratings.

Ordinal thematic tags (1 = absent, 2-3 = present) are scored by the gap
between the participant's mean rating on songs carrying the theme and on
songs without it. Continuous attributes (length, release year, popularity
rank) are scored by Pearson correlation with the rating.
"""

import logging
from typing import Optional

from ..errors import NotFoundError
from ..models import Song
from .stats import correlation_strength, mean_or, pearson

logger = logging.getLogger(__name__)

NUMERIC_ATTRIBUTES = {
    "song_length": lambda song: song.length,
    "release_year": lambda song: song.release_year,
    "popularity_rank": lambda song: song.popularity_rank,
}

HIGH_THRESHOLD = 2  # score >= 2 means the theme is present
TOP_N = 3
PERSONALITY_THRESHOLD = 0.5


def rated_songs(vector: dict[int, float], songs: dict[int, Song]) -> list[tuple[Song, float]]:
    """Pair each rated song with its rating, skipping songs missing from the catalogue."""
    missing = [song_id for song_id in vector if song_id not in songs]
    if missing:
        logger.warning("%d rated songs missing from the song table", len(missing))
    return [(songs[song_id], vector[song_id]) for song_id in sorted(vector) if song_id in songs]


def theme_rating_difference(rated: list[tuple[Song, float]], attribute: str, user_avg: float) -> dict:
    """
    highGroupMean - lowGroupMean for one ordinal attribute.

    An empty group falls back to the participant's overall mean, so a theme
    the participant never met scores 0 instead of failing.
    """
    high = [r for song, r in rated if (song.thematic_attributes.get(attribute) or 0) >= HIGH_THRESHOLD]
    low = [r for song, r in rated if song.thematic_attributes.get(attribute) == 1]

    high_avg = mean_or(high, user_avg)
    low_avg = mean_or(low, user_avg)

    return {
        "rating_difference": high_avg - low_avg,
        "high_theme_avg": high_avg,
        "low_theme_avg": low_avg,
        "high_theme_count": len(high),
        "low_theme_count": len(low),
    }


def attribute_correlation(rated: list[tuple[Song, float]], getter) -> tuple[Optional[float], int]:
    """Pearson r between an attribute and the rating over songs where it is known."""
    pairs = [(getter(song), r) for song, r in rated if getter(song) is not None]
    if not pairs:
        return None, 0
    xs = [float(x) for x, _ in pairs]
    ys = [y for _, y in pairs]
    return pearson(xs, ys), len(pairs)


def _classify(avg_positive: float, avg_negative: float, affinities: list, aversions: list) -> str:
    if avg_positive > PERSONALITY_THRESHOLD:
        return "theme_enthusiast"
    elif avg_negative < -PERSONALITY_THRESHOLD:
        return "theme_avoider"
    elif not affinities and not aversions:
        return "open_minded"
    return "balanced"


def compute_theme_affinities(
    target_id: str,
    vector: dict[int, float],
    songs: dict[int, Song],
) -> dict:
    """
    Score every thematic and numeric attribute against the target's ratings.

    Returns:
        Dictionary with per-attribute scores (sorted by |correlation|),
        top affinities/aversions and an overall classification

    Raises:
        NotFoundError: the target has no ratings on known songs
    """
    rated = rated_songs(vector or {}, songs)
    if not rated:
        raise NotFoundError(target_id, "no ratings")

    user_avg = mean_or([r for _, r in rated])

    theme_names = sorted({name for song, _ in rated for name in song.thematic_attributes})

    attributes = []
    for name in theme_names:
        correlation, samples = attribute_correlation(
            rated, lambda song, name=name: song.thematic_attributes.get(name)
        )
        entry = {"name": name, "kind": "theme", "correlation": correlation, "samples": samples}
        entry.update(theme_rating_difference(rated, name, user_avg))
        attributes.append(entry)

    for name, getter in NUMERIC_ATTRIBUTES.items():
        correlation, samples = attribute_correlation(rated, getter)
        attributes.append({
            "name": name,
            "kind": "numeric",
            "correlation": correlation,
            "samples": samples,
            "rating_difference": None,
        })

    for entry in attributes:
        if entry["correlation"] is not None:
            entry["abs_correlation"] = abs(entry["correlation"])
            entry["strength"] = correlation_strength(entry["correlation"])

    scored = [a for a in attributes if a["correlation"] is not None]
    scored.sort(key=lambda a: (-a["abs_correlation"], a["name"]))

    # Loves and aversions come from the rating gap, strongest first
    themes = [a for a in attributes if a["kind"] == "theme" and a["rating_difference"] != 0]
    themes.sort(key=lambda a: (-abs(a["rating_difference"]), a["name"]))

    top_affinities = [a for a in themes if a["rating_difference"] > 0][:TOP_N]
    top_aversions = [a for a in themes if a["rating_difference"] < 0][:TOP_N]

    relative_aversions = False
    if not top_aversions:
        # Nothing actively disliked: the weakest positives stand in
        weakest = sorted(
            (a for a in themes if a["rating_difference"] > 0),
            key=lambda a: (a["rating_difference"], a["name"]),
        )
        top_aversions = weakest[:TOP_N]
        relative_aversions = bool(top_aversions)

    avg_positive = mean_or([a["rating_difference"] for a in top_affinities], 0.0)
    avg_negative = mean_or([a["rating_difference"] for a in top_aversions], 0.0)

    return {
        "user_avg_rating": user_avg,
        "attributes": scored,
        "top_affinities": [a["name"] for a in top_affinities],
        "top_aversions": [a["name"] for a in top_aversions],
        "relative_aversions": relative_aversions,
        "avg_positive_difference": avg_positive,
        "avg_negative_difference": avg_negative,
        "classification": _classify(avg_positive, avg_negative, top_affinities, top_aversions),
    }
