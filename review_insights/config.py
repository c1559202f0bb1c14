"""
Engine configuration.

Defaults are the reference values of the review project. Every value can be
overridden from the environment (or a .env file) with a REVIEW_INSIGHTS_
prefixed variable, e.g. REVIEW_INSIGHTS_MIN_OVERLAP=3.
"""

import os
from dataclasses import dataclass, fields
from datetime import timezone, tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from .errors import ConfigError

ENV_PREFIX = "REVIEW_INSIGHTS_"

_OPTIONAL_INT_FIELDS = {"fallback_min_overlap"}


@dataclass(frozen=True)
class EngineConfig:
    # Taste twin
    min_overlap: int = 5
    fallback_min_overlap: Optional[int] = 3
    tie_tolerance: float = 0.01
    aligned_hot_takes_limit: int = 10

    # Hot take index
    top_hot_takes_limit: int = 5

    # Cohorts
    min_cohort_size: int = 3
    cohort_dimensions: tuple = ("gender", "decade", "city", "works_in_music")

    # Era trend
    trend_threshold: float = 0.01

    # Cadence
    streak_length: int = 20
    streak_window_hours: float = 3.0
    early_lag_days: float = 1.0
    late_lag_days: float = 30.0
    binge_reviews_per_day: float = 5.0
    deliberate_reviews_per_day: float = 1.0
    timezone: str = "UTC"

    # Rating scale, used to normalise averages in the prediction report
    rating_min: float = 4.0
    rating_max: float = 10.0

    # Fan-out for the per-candidate loops; 1 runs inline
    max_workers: int = 1

    def __post_init__(self):
        if self.min_overlap < 1:
            raise ConfigError("min_overlap must be >= 1")
        if self.fallback_min_overlap is not None and self.fallback_min_overlap < 1:
            raise ConfigError("fallback_min_overlap must be >= 1")
        if self.min_cohort_size < 1:
            raise ConfigError("min_cohort_size must be >= 1")
        if self.streak_length < 1:
            raise ConfigError("streak_length must be >= 1")
        if self.max_workers < 1:
            raise ConfigError("max_workers must be >= 1")
        if self.rating_max <= self.rating_min:
            raise ConfigError("rating_max must be greater than rating_min")
        try:
            self.zone()
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"unknown timezone {self.timezone!r}") from e

    def zone(self) -> tzinfo:
        """The configured zone; "UTC" needs no tz database."""
        if self.timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class SupabaseSettings:
    url: str
    key: str
    page_size: int = 1000


def _parse(name: str, raw: str, default):
    """Coerce an environment string to the type of the field's default."""
    raw = raw.strip()
    try:
        if name in _OPTIONAL_INT_FIELDS:
            # empty or "none" disables
            if raw.lower() in ("", "none", "off"):
                return None
            return int(raw)
        if isinstance(default, bool):
            return raw.lower() in ("1", "true", "yes", "on")
        if isinstance(default, tuple):
            return tuple(part.strip() for part in raw.split(",") if part.strip())
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name.upper()}={raw!r}: {e}") from e
    return raw


def load_config(env_path: str | Path | None = None) -> EngineConfig:
    """
    Build an EngineConfig from defaults overlaid with environment variables.

    Args:
        env_path: Optional .env file to load first (existing variables win)

    Returns:
        Frozen EngineConfig
    """
    if env_path:
        load_dotenv(env_path)
    else:
        load_dotenv()

    overrides = {}
    defaults = EngineConfig()
    for f in fields(EngineConfig):
        raw = os.environ.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is None:
            continue
        overrides[f.name] = _parse(f.name, raw, getattr(defaults, f.name))

    return EngineConfig(**overrides)


def load_supabase_settings(env_path: str | Path | None = None) -> SupabaseSettings:
    """Read SUPABASE_URL / SUPABASE_KEY (and optional SUPABASE_PAGE_SIZE)."""
    if env_path:
        load_dotenv(env_path)
    else:
        load_dotenv()

    url = os.environ.get("SUPABASE_URL", "").strip()
    key = os.environ.get("SUPABASE_KEY", "").strip()
    if not url or not key:
        raise ConfigError("SUPABASE_URL and SUPABASE_KEY must be set")

    page_size = _parse("page_size", os.environ.get("SUPABASE_PAGE_SIZE", "1000"), 1000)
    if page_size < 1:
        raise ConfigError("SUPABASE_PAGE_SIZE must be >= 1")

    return SupabaseSettings(url=url.rstrip("/"), key=key, page_size=page_size)
