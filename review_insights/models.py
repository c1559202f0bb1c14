"""
Read models consumed by the analytics engine.

Reviews, songs and participants arrive from the storage layer already
validated; the engine only reads them. RatingSnapshot bundles one complete,
immutable fetch of all three.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Review:
    participant_id: str
    song_id: int
    rating: float
    reviewed_at: Optional[datetime] = None


@dataclass(frozen=True)
class Song:
    song_id: int
    release_year: Optional[int] = None
    popularity_rank: Optional[int] = None  # lower is more popular
    thematic_attributes: dict = field(default_factory=dict)  # name -> ordinal score (1-3)
    length: Optional[float] = None
    title: str = ""
    album: str = ""
    release_date: Optional[date] = None


@dataclass(frozen=True)
class Participant:
    participant_id: str
    cohort_fields: dict = field(default_factory=dict)
    completed: bool = True
    name: str = ""


@dataclass(frozen=True)
class RatingSnapshot:
    """One complete read of the review project's data."""

    reviews: tuple = ()
    songs: dict = field(default_factory=dict)         # song_id -> Song
    participants: dict = field(default_factory=dict)  # participant_id -> Participant

    @classmethod
    def build(cls, reviews, songs, participants) -> "RatingSnapshot":
        """Build a snapshot from plain iterables of model objects."""
        return cls(
            reviews=tuple(reviews),
            songs={s.song_id: s for s in songs},
            participants={p.participant_id: p for p in participants},
        )

    def eligible(self) -> "RatingSnapshot":
        """
        Restrict the snapshot to completed participants and their reviews.

        Reviews by participants missing from the participant table are dropped
        along with reviews by participants who did not finish the project.
        """
        participants = {
            pid: p for pid, p in self.participants.items() if p.completed
        }
        reviews = tuple(r for r in self.reviews if r.participant_id in participants)
        return RatingSnapshot(reviews=reviews, songs=self.songs, participants=participants)

    def rating_vectors(self) -> dict[str, dict[int, float]]:
        """participant_id -> {song_id: rating}."""
        vectors: dict[str, dict[int, float]] = {}
        for review in self.reviews:
            vectors.setdefault(review.participant_id, {})[review.song_id] = review.rating
        return vectors

    def reviews_for(self, participant_id: str) -> list[Review]:
        return [r for r in self.reviews if r.participant_id == participant_id]
