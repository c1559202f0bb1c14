"""Fetch complete review-project snapshots from Supabase (PostgREST)."""

import json
import logging
import time
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Optional

import requests

from ..config import SupabaseSettings
from ..errors import UpstreamFetchError
from ..models import RatingSnapshot
from .rows import (
    PARTICIPANT_COLUMNS,
    REVIEW_COLUMNS,
    SONG_COLUMNS,
    participant_from_row,
    participant_to_row,
    review_from_row,
    review_to_row,
    song_from_row,
    song_to_row,
)

logger = logging.getLogger(__name__)


def retry_after_seconds(value, default: float = 1.0) -> float:
    """
    Seconds to wait from a Retry-After header.

    Accepts delta-seconds (fractions included) or an HTTP-date; anything
    unparseable gives `default`.
    """
    if value is None:
        return default
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(str(value))
    except (TypeError, ValueError):
        return default
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def total_from_content_range(value) -> Optional[int]:
    """Row total from a Content-Range header ("0-999/5000"); None when unknown."""
    if not value or "/" not in value:
        return None
    try:
        return int(value.rsplit("/", 1)[1])
    except ValueError:
        return None


class SupabaseCollector:
    """Read participants, songs and reviews, paging until every row is in."""

    def __init__(self, settings: SupabaseSettings, cache_dir: str | Path = "data/cache"):
        """
        Initialize Supabase collector.

        Args:
            settings: Project URL, API key and page size
            cache_dir: Where snapshots are cached as JSON
        """
        self.settings = settings
        self.base_url = f"{settings.url}/rest/v1"
        self.cache_dir = Path(cache_dir)
        self.max_retries = 3

    def _request(self, table: str, params: dict) -> tuple[list[dict], Optional[int]]:
        """
        GET one page of a table, backing off on 429.

        Returns:
            (rows, total) where total is the exact row count reported by the
            server, or None if it sent none

        Raises:
            UpstreamFetchError: request failed, retries exhausted, or the
                body was not a JSON list of rows
        """
        url = f"{self.base_url}/{table}"
        headers = {
            "apikey": self.settings.key,
            "Authorization": f"Bearer {self.settings.key}",
            "Accept": "application/json",
            "Prefer": "count=exact",
        }
        retry_count = 0

        while True:
            try:
                response = requests.get(url, headers=headers, params=params, timeout=30)
            except requests.RequestException as e:
                raise UpstreamFetchError(table, str(e)) from e

            if response.status_code == 429 and retry_count < self.max_retries:
                retry_count += 1
                # Exponential backoff with Retry-After header
                retry_after = retry_after_seconds(response.headers.get("Retry-After"))
                wait_time = retry_after * (2 ** (retry_count - 1))
                logger.warning(
                    "Rate limited on %s. Waiting %.1fs before retry %d/%d",
                    table, wait_time, retry_count, self.max_retries,
                )
                time.sleep(wait_time)
                continue

            try:
                response.raise_for_status()
                rows = response.json()
            except (requests.HTTPError, ValueError) as e:
                raise UpstreamFetchError(table, str(e)) from e

            if not isinstance(rows, list):
                raise UpstreamFetchError(table, f"expected a list of rows, got {type(rows).__name__}")
            return rows, total_from_content_range(response.headers.get("Content-Range"))

    def fetch_all(self, table: str, columns: list[str], order: str, filters: Optional[dict] = None) -> list[dict]:
        """
        Fetch every row of a table.

        Pages are requested with offset/limit in a stable order. The server
        may return fewer rows than asked for (its own max-rows cap), so the
        offset advances by the rows actually received and paging only stops
        once the reported total is reached or an empty page comes back. A
        failure on any page, or a row count that disagrees with the total,
        aborts the whole fetch.
        """
        page_size = self.settings.page_size
        rows = []
        total = None

        while True:
            params = {
                "select": ",".join(columns),
                "order": order,
                "offset": len(rows),
                "limit": page_size,
            }
            if filters:
                params.update(filters)

            page, page_total = self._request(table, params)
            if page_total is not None:
                total = page_total
            rows.extend(page)

            if not page or (total is not None and len(rows) >= total):
                break

        if total is not None and len(rows) != total:
            raise UpstreamFetchError(table, f"fetched {len(rows)} rows, server reported {total}")

        logger.info("Fetched %d rows from %s", len(rows), table)
        return rows

    def collect_snapshot(self) -> RatingSnapshot:
        """Fetch all three tables and return the eligible snapshot."""
        participants = [
            participant_from_row(row)
            for row in self.fetch_all(
                "participants", PARTICIPANT_COLUMNS, "email.asc", filters={"done": "eq.true"}
            )
        ]
        songs = [song_from_row(row) for row in self.fetch_all("songs", SONG_COLUMNS, "song_order.asc")]
        reviews = [
            review_from_row(row)
            for row in self.fetch_all("reviews", REVIEW_COLUMNS, "participant_email.asc,song_order.asc")
        ]

        snapshot = RatingSnapshot.build(reviews, songs, participants).eligible()
        logger.info(
            "Snapshot: %d participants, %d songs, %d eligible reviews (of %d)",
            len(snapshot.participants), len(snapshot.songs), len(snapshot.reviews), len(reviews),
        )
        return snapshot

    def collect_and_cache(self, filename: str = "snapshot.json") -> RatingSnapshot:
        snapshot = self.collect_snapshot()
        save_snapshot(snapshot, self.cache_dir / filename)
        return snapshot


def save_snapshot(snapshot: RatingSnapshot, path: str | Path):
    """
    Save a snapshot as JSON.

    Args:
        snapshot: Snapshot to save
        path: Output file (parent directories are created)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "collected_at": datetime.now().isoformat(),
        "participants": [participant_to_row(p) for p in snapshot.participants.values()],
        "songs": [song_to_row(s) for s in snapshot.songs.values()],
        "reviews": [review_to_row(r) for r in snapshot.reviews],
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_snapshot(path: str | Path, max_age_days: Optional[int] = None) -> Optional[RatingSnapshot]:
    """
    Load a cached snapshot.

    Args:
        path: Cache file
        max_age_days: Treat older files as missing; None disables the check

    Returns:
        RatingSnapshot or None if the file is missing or expired
    """
    path = Path(path)
    if not path.exists():
        return None

    if max_age_days is not None:
        age = datetime.now() - datetime.fromtimestamp(path.stat().st_mtime)
        if age > timedelta(days=max_age_days):
            logger.info("Snapshot cache expired (age: %d days)", age.days)
            return None

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return RatingSnapshot.build(
        reviews=[review_from_row(row) for row in data.get("reviews", [])],
        songs=[song_from_row(row) for row in data.get("songs", [])],
        participants=[participant_from_row(row) for row in data.get("participants", [])],
    )
