"""Domain models and business logic."""

from insight_engine.domain.enums import (
    ContentType,
    ProviderErrorKind,
    ProviderName,
    Sentiment,
    TaskKind,
    TaskStatus,
    TimeWindow,
)
from insight_engine.domain.models import (
    AnalysisResult,
    ItemRecord,
    Recommendation,
    ResultEntry,
    ResultMetadata,
    ResultSet,
    Scene,
    Storyboard,
    Task,
    TaskParameters,
    ThemeCount,
)

__all__ = [
    "AnalysisResult",
    "ContentType",
    "ItemRecord",
    "ProviderErrorKind",
    "ProviderName",
    "Recommendation",
    "ResultEntry",
    "ResultMetadata",
    "ResultSet",
    "Scene",
    "Sentiment",
    "Storyboard",
    "Task",
    "TaskKind",
    "TaskParameters",
    "TaskStatus",
    "ThemeCount",
    "TimeWindow",
]
