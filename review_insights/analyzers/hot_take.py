"""
Hot Take Index - how far a participant's ratings drift from the crowd.

The index is the mean absolute distance between a participant's rating and
the crowd average for each song they rated. It is ranked against every other
participant using the same crowd-average snapshot.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..config import EngineConfig
from ..errors import NotFoundError
from .aggregation import CrowdAverage, crowd_average
from .stats import mean_or, percentile_below

logger = logging.getLogger(__name__)


def song_deltas(vector: dict[int, float], crowd_averages: dict[int, CrowdAverage]) -> list[dict]:
    """Signed delta from the crowd for every rated song with a defined average."""
    deltas = []
    for song_id in sorted(vector):
        crowd = crowd_average(crowd_averages, song_id)
        if not crowd.defined:
            continue
        delta = vector[song_id] - crowd.mean
        deltas.append({
            "song_id": song_id,
            "user_rating": vector[song_id],
            "crowd_avg": crowd.mean,
            "delta": delta,
            "abs_delta": abs(delta),
        })
    return deltas


def hot_take_index(vector: dict[int, float], crowd_averages: dict[int, CrowdAverage]) -> Optional[float]:
    """Mean |rating - crowd average|, or None when no rated song has crowd data."""
    return mean_or([d["abs_delta"] for d in song_deltas(vector, crowd_averages)])


def _indices_for(
    vectors: list[tuple[str, dict]],
    crowd_averages: dict[int, CrowdAverage],
    max_workers: int,
) -> list[Optional[float]]:
    if max_workers > 1 and len(vectors) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(lambda item: hot_take_index(item[1], crowd_averages), vectors))
    return [hot_take_index(vector, crowd_averages) for _, vector in vectors]


def compute_hot_take_index(
    target_id: str,
    vectors: dict[str, dict[int, float]],
    crowd_averages: dict[int, CrowdAverage],
    config: Optional[EngineConfig] = None,
    songs: Optional[dict] = None,
) -> dict:
    """
    Hot take index, its percentile among the other participants, and the
    target's biggest individual hot takes.

    Percentile = share of other participants with a strictly lower index.

    Raises:
        NotFoundError: target has no ratings with crowd data
    """
    config = config or EngineConfig()
    target_vector = vectors.get(target_id)
    if not target_vector:
        raise NotFoundError(target_id, "no ratings")

    deltas = song_deltas(target_vector, crowd_averages)
    if not deltas:
        raise NotFoundError(target_id, "no rated song has a crowd average")

    index = mean_or([d["abs_delta"] for d in deltas])

    others = sorted((pid, v) for pid, v in vectors.items() if pid != target_id and v)
    other_indices = [
        i for i in _indices_for(others, crowd_averages, config.max_workers) if i is not None
    ]
    percentile = percentile_below(index, other_indices)

    songs = songs or {}
    top = sorted(deltas, key=lambda d: (-d["abs_delta"], d["song_id"]))[:config.top_hot_takes_limit]
    top_hot_takes = []
    for d in top:
        song = songs.get(d["song_id"])
        top_hot_takes.append({
            "song_id": d["song_id"],
            "title": song.title if song else "",
            "user_rating": d["user_rating"],
            "crowd_avg": round(d["crowd_avg"], 4),
            "delta": round(d["delta"], 4),
            "abs_delta": round(d["abs_delta"], 4),
        })

    logger.debug(
        "Hot take index for %s: %.3f (percentile %.1f over %d others)",
        target_id, index, percentile, len(other_indices),
    )

    return {
        "index": index,
        "percentile": percentile,
        "compared_with": len(other_indices),
        "songs_scored": len(deltas),
        "top_hot_takes": top_hot_takes,
    }
