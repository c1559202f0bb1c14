"""Exception types surfaced by the analytics engine and its storage adapter."""


class ReviewInsightsError(Exception):
    """Base class for all review-insights errors."""


class NotFoundError(ReviewInsightsError):
    """The target has no ratings, or no comparison candidate qualifies."""

    def __init__(self, participant_id: str, reason: str):
        super().__init__(f"{participant_id}: {reason}")
        self.participant_id = participant_id
        self.reason = reason


class UpstreamFetchError(ReviewInsightsError):
    """A storage read failed or came back incomplete. Never retried by the engine."""

    def __init__(self, table: str, message: str):
        super().__init__(f"Failed to fetch '{table}': {message}")
        self.table = table


class ConfigError(ReviewInsightsError):
    """An environment setting could not be parsed."""
