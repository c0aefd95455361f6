"""Domain enumerations."""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Lifecycle state of an analysis task."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


# Legal status changes. Anything else is an InvalidTransition.
TASK_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.RUNNING}),
    TaskStatus.RUNNING: frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED}),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.FAILED: frozenset(),
}


class TaskKind(StrEnum):
    """Scrape-and-analyze task variants."""

    YOUTUBE_SCRAPE = "youtube_scrape"
    REDDIT_SCRAPE = "reddit_scrape"
    GENERAL_ANALYSIS = "general_analysis"


class TimeWindow(StrEnum):
    """Upload date window for a search."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class Sentiment(StrEnum):
    """Sentiment classification for analysed content."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ContentType(StrEnum):
    """Content-type classification. Unrecognised labels map to UNKNOWN."""

    EDUCATIONAL = "educational"
    ENTERTAINMENT = "entertainment"
    DOCUMENTARY = "documentary"
    HORROR = "horror"
    COMEDY = "comedy"
    MUSIC = "music"
    GAMING = "gaming"
    NEWS = "news"
    TUTORIAL = "tutorial"
    REVIEW = "review"
    UNKNOWN = "unknown"

    @classmethod
    def from_label(cls, label: str | None) -> "ContentType":
        """Map a free-text label from a model to a content type."""
        if not label:
            return cls.UNKNOWN
        normalized = label.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            pass
        # Models often answer "educational/documentary" or "horror stories"
        for member in cls:
            if member is not cls.UNKNOWN and member.value in normalized:
                return member
        return cls.UNKNOWN


class ProviderName(StrEnum):
    """Supported AI inference backends."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    STUB = "stub"


class ProviderErrorKind(StrEnum):
    """Classification of inference provider failures."""

    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    INVALID_RESPONSE = "invalid_response"
    AUTH = "auth"
    NETWORK = "network"
