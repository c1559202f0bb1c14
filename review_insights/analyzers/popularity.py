"""Popularity Reversal - does a participant rate hits or deep cuts higher?"""

from ..errors import NotFoundError
from ..models import Song
from .stats import correlation_strength, pearson

EXAMPLE_COUNT = 3


def classify_popularity(affinity: float) -> str:
    """
    Label a popularity affinity (positive = prefers popular songs).

    >0.3 mainstream, >0.1 leaning mainstream, <-0.3 underground,
    <-0.1 leaning indie, otherwise balanced.
    """
    if affinity > 0.3:
        return "mainstream_lover"
    elif affinity > 0.1:
        return "popularity_appreciator"
    elif affinity < -0.3:
        return "underground_explorer"
    elif affinity < -0.1:
        return "indie_enthusiast"
    return "balanced"


def compute_popularity_reversal(
    target_id: str,
    vector: dict[int, float],
    songs: dict[int, Song],
) -> dict:
    """
    Correlate popularity rank with the target's ratings.

    The raw correlation is against rank, where 1 is the most popular song,
    so a negative correlation means popular songs get higher ratings. The
    reported affinity flips the sign so that positive reads as "likes hits".

    Raises:
        NotFoundError: none of the target's rated songs has a popularity rank
    """
    ranked = sorted(
        (
            (songs[song_id].popularity_rank, song_id, rating)
            for song_id, rating in (vector or {}).items()
            if song_id in songs and songs[song_id].popularity_rank is not None
        ),
        key=lambda item: (item[0], item[1]),
    )
    if not ranked:
        raise NotFoundError(target_id, "no rated songs with a popularity rank")

    ranks = [float(rank) for rank, _, _ in ranked]
    ratings = [rating for _, _, rating in ranked]
    rank_correlation = pearson(ranks, ratings)
    affinity = -rank_correlation

    def _example(item):
        rank, song_id, rating = item
        song = songs[song_id]
        return {
            "song_id": song_id,
            "title": song.title,
            "album": song.album,
            "release_year": song.release_year,
            "popularity_rank": rank,
            "user_rating": rating,
        }

    return {
        "rank_correlation": rank_correlation,
        "popularity_affinity": affinity,
        "correlation_strength": correlation_strength(affinity),
        "personality": classify_popularity(affinity),
        "songs_with_rank": len(ranked),
        "is_mainstream": affinity > 0.1,
        "is_underground": affinity < -0.1,
        "popular_examples": [_example(item) for item in ranked[:EXAMPLE_COUNT]],
        "unpopular_examples": [_example(item) for item in reversed(ranked[-EXAMPLE_COUNT:])],
    }
