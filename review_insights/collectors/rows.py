"""Row <-> model mapping for the review project's tables."""

from datetime import date, datetime
from typing import Optional

from ..models import Participant, Review, Song

THEME_COLUMNS = [
    "sexual_themes",
    "pg13",
    "tragic_story",
    "escapism",
    "antihero",
    "lgbt",
    "substance_abuse",
]

COHORT_COLUMNS = [
    "gender",
    "decade",
    "city",
    "urban_rural",
    "works_in_music",
    "plays_music",
]

SONG_COLUMNS = ["song_order", "track_name", "album", "year", "date", "song_length", "lastfm_pos"] + THEME_COLUMNS
PARTICIPANT_COLUMNS = ["email", "name", "done"] + COHORT_COLUMNS
REVIEW_COLUMNS = ["participant_email", "song_order", "rating", "time"]


def parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def parse_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _int_or_none(value) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(float(value))


def _float_or_none(value) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def song_from_row(row: dict) -> Song:
    themes = {}
    for column in THEME_COLUMNS:
        score = _int_or_none(row.get(column))
        if score is not None:
            themes[column] = score

    return Song(
        song_id=int(row["song_order"]),
        release_year=_int_or_none(row.get("year")),
        popularity_rank=_int_or_none(row.get("lastfm_pos")),
        thematic_attributes=themes,
        length=_float_or_none(row.get("song_length")),
        title=row.get("track_name") or "",
        album=row.get("album") or "",
        release_date=parse_date(row.get("date")),
    )


def participant_from_row(row: dict) -> Participant:
    return Participant(
        participant_id=row["email"],
        cohort_fields={c: row.get(c) for c in COHORT_COLUMNS if row.get(c) is not None},
        completed=bool(row.get("done")),
        name=row.get("name") or "",
    )


def review_from_row(row: dict) -> Review:
    return Review(
        participant_id=row["participant_email"],
        song_id=int(row["song_order"]),
        rating=float(row["rating"]),
        reviewed_at=parse_timestamp(row.get("time")),
    )


def song_to_row(song: Song) -> dict:
    row = {
        "song_order": song.song_id,
        "track_name": song.title,
        "album": song.album,
        "year": song.release_year,
        "date": song.release_date.isoformat() if song.release_date else None,
        "song_length": song.length,
        "lastfm_pos": song.popularity_rank,
    }
    row.update(song.thematic_attributes)
    return row


def participant_to_row(participant: Participant) -> dict:
    row = {
        "email": participant.participant_id,
        "name": participant.name,
        "done": participant.completed,
    }
    row.update(participant.cohort_fields)
    return row


def review_to_row(review: Review) -> dict:
    return {
        "participant_email": review.participant_id,
        "song_order": review.song_id,
        "rating": review.rating,
        "time": review.reviewed_at.isoformat() if review.reviewed_at else None,
    }
