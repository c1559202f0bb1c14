"""Review Insights - analytics engine for a music review project."""

from .config import EngineConfig, load_config
from .engine import InsightsEngine
from .errors import ConfigError, NotFoundError, ReviewInsightsError, UpstreamFetchError
from .models import Participant, RatingSnapshot, Review, Song

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "load_config",
    "InsightsEngine",
    "ConfigError",
    "NotFoundError",
    "ReviewInsightsError",
    "UpstreamFetchError",
    "Participant",
    "RatingSnapshot",
    "Review",
    "Song",
]
