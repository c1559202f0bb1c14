"""
Taste Twin Finder - Pearson correlation against every other participant.

The twin is the participant whose ratings over the shared songs correlate
most strongly with the target's. Candidates sharing fewer than the minimum
number of songs are never scored.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..config import EngineConfig
from ..errors import NotFoundError
from .aggregation import CrowdAverage, crowd_average
from .stats import pearson

logger = logging.getLogger(__name__)


def score_candidate(
    target_vector: dict[int, float],
    candidate_id: str,
    candidate_vector: dict[int, float],
    min_overlap: int,
) -> Optional[dict]:
    """
    Correlate one candidate against the target over their shared songs.

    Returns:
        {"participant_id", "correlation", "overlap"} or None when the overlap
        is below min_overlap (the candidate is skipped, not scored as zero)
    """
    overlap = sorted(set(target_vector) & set(candidate_vector))
    if len(overlap) < min_overlap:
        return None

    user_ratings = [target_vector[song_id] for song_id in overlap]
    candidate_ratings = [candidate_vector[song_id] for song_id in overlap]

    return {
        "participant_id": candidate_id,
        "correlation": pearson(user_ratings, candidate_ratings),
        "overlap": overlap,
    }


def pick_twin(scored: list[dict], tie_tolerance: float = 0.01) -> dict:
    """
    Choose the best-correlated candidate.

    Candidates within tie_tolerance of the best correlation are tied; ties go
    to the larger overlap, then to the smallest participant id. The result
    does not depend on the order of `scored`.
    """
    best_r = max(c["correlation"] for c in scored)
    tied = [c for c in scored if best_r - c["correlation"] < tie_tolerance]
    return min(tied, key=lambda c: (-len(c["overlap"]), c["participant_id"]))


def aligned_hot_takes(
    overlap: list[int],
    user_vector: dict[int, float],
    twin_vector: dict[int, float],
    crowd_averages: dict[int, CrowdAverage],
    limit: int = 10,
    songs: Optional[dict] = None,
) -> list[dict]:
    """
    Songs where both parties disagree with the crowd in the same direction.

    Ranked by |user delta| + |twin delta|, largest first.
    """
    songs = songs or {}
    takes = []

    for song_id in overlap:
        crowd = crowd_average(crowd_averages, song_id)
        if not crowd.defined:
            continue

        user_delta = user_vector[song_id] - crowd.mean
        twin_delta = twin_vector[song_id] - crowd.mean
        if user_delta * twin_delta <= 0:
            continue

        song = songs.get(song_id)
        takes.append({
            "song_id": song_id,
            "title": song.title if song else "",
            "user_rating": user_vector[song_id],
            "twin_rating": twin_vector[song_id],
            "crowd_avg": round(crowd.mean, 4),
            "user_delta": round(user_delta, 4),
            "twin_delta": round(twin_delta, 4),
            "combined_delta": round(abs(user_delta) + abs(twin_delta), 4),
        })

    takes.sort(key=lambda t: (-t["combined_delta"], t["song_id"]))
    return takes[:limit]


def _score_all(
    target_vector: dict[int, float],
    candidates: list[tuple[str, dict]],
    min_overlap: int,
    max_workers: int,
) -> list[dict]:
    if max_workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = executor.map(
                lambda item: score_candidate(target_vector, item[0], item[1], min_overlap),
                candidates,
            )
            return [r for r in results if r is not None]

    results = []
    for candidate_id, vector in candidates:
        scored = score_candidate(target_vector, candidate_id, vector, min_overlap)
        if scored is not None:
            results.append(scored)
    return results


def find_taste_twin(
    target_id: str,
    vectors: dict[str, dict[int, float]],
    crowd_averages: dict[int, CrowdAverage],
    config: Optional[EngineConfig] = None,
    songs: Optional[dict] = None,
    participants: Optional[dict] = None,
) -> dict:
    """
    Find the target's taste twin.

    Args:
        target_id: Participant to find a twin for
        vectors: participant_id -> {song_id: rating} for all eligible participants
        crowd_averages: Shared crowd-average snapshot for the request
        config: Engine configuration (overlap thresholds, tie tolerance, K)
        songs: Optional song_id -> Song for titles in the hot-take list
        participants: Optional participant_id -> Participant for the twin's name

    Returns:
        Dictionary with twin id/name, correlation, overlap count, threshold
        used and the aligned hot takes

    Raises:
        NotFoundError: target has no ratings or no candidate shares enough songs
    """
    config = config or EngineConfig()
    target_vector = vectors.get(target_id)
    if not target_vector:
        raise NotFoundError(target_id, "no ratings")

    candidates = sorted(
        (pid, vector) for pid, vector in vectors.items() if pid != target_id and vector
    )

    threshold = config.min_overlap
    scored = _score_all(target_vector, candidates, threshold, config.max_workers)

    fallback = config.fallback_min_overlap
    if not scored and fallback is not None and fallback < threshold:
        logger.warning(
            "No candidate shares %d songs with %s; retrying with overlap >= %d",
            threshold, target_id, fallback,
        )
        threshold = fallback
        scored = _score_all(target_vector, candidates, threshold, config.max_workers)

    logger.debug(
        "Twin search for %s: %d of %d candidates qualified (min overlap %d)",
        target_id, len(scored), len(candidates), threshold,
    )

    if not scored:
        raise NotFoundError(target_id, "no taste twin with enough shared songs")

    best = pick_twin(scored, config.tie_tolerance)
    twin_id = best["participant_id"]

    twin_name = ""
    if participants and twin_id in participants:
        twin_name = participants[twin_id].name
    if not twin_name:
        twin_name = twin_id.split("@")[0]

    return {
        "twin_id": twin_id,
        "twin_name": twin_name,
        "correlation": best["correlation"],
        "overlap_count": len(best["overlap"]),
        "min_overlap_used": threshold,
        "candidates_considered": len(scored),
        "aligned_hot_takes": aligned_hot_takes(
            best["overlap"],
            target_vector,
            vectors[twin_id],
            crowd_averages,
            limit=config.aligned_hot_takes_limit,
            songs=songs,
        ),
    }
