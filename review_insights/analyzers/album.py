"""Album Preferences - favourite and least favourite album, compared with everyone else."""

from ..errors import NotFoundError
from ..models import Song
from .stats import mean_or


def album_averages(vector: dict[int, float], songs: dict[int, Song]) -> dict[str, float]:
    """album -> mean rating over the songs of that album the participant rated."""
    by_album: dict[str, list[float]] = {}
    for song_id, rating in vector.items():
        song = songs.get(song_id)
        if song is None or not song.album:
            continue
        by_album.setdefault(song.album, []).append(rating)
    return {album: mean_or(ratings) for album, ratings in by_album.items()}


def compute_album_preferences(
    target_id: str,
    vectors: dict[str, dict[int, float]],
    songs: dict[int, Song],
) -> dict:
    """
    Best and worst album by the target's mean rating.

    For each, counts the other participants who rated that album higher
    (favourite) or lower (worst) than the target did. Ties between albums go
    to the alphabetically first.

    Raises:
        NotFoundError: the target rated no song with a known album
    """
    mine = album_averages(vectors.get(target_id) or {}, songs)
    if not mine:
        raise NotFoundError(target_id, "no rated songs with album data")

    fav = min(mine, key=lambda album: (-mine[album], album))
    worst = min(mine, key=lambda album: (mine[album], album))

    liked_fav_more = 0
    liked_worst_less = 0
    for pid, vector in vectors.items():
        if pid == target_id:
            continue
        theirs = album_averages(vector, songs)
        if fav in theirs and theirs[fav] > mine[fav]:
            liked_fav_more += 1
        if worst in theirs and theirs[worst] < mine[worst]:
            liked_worst_less += 1

    return {
        "fav_album": fav,
        "fav_album_user_avg": mine[fav],
        "users_who_liked_fav_more": liked_fav_more,
        "worst_album": worst,
        "worst_album_user_avg": mine[worst],
        "users_who_liked_worst_less": liked_worst_less,
        "albums_rated": len(mine),
    }
