"""Domain models - pure Python classes independent of database."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from insight_engine.domain.enums import (
    ContentType,
    ProviderName,
    Sentiment,
    TaskKind,
    TaskStatus,
    TimeWindow,
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class ItemRecord:
    """One scraped content record (a video) before analysis."""

    external_id: str
    title: str
    channel_name: str
    view_count: str  # human-readable, e.g. "2.3M views"
    duration: str
    upload_date: str
    url: str
    description: str
    scraped_at: datetime
    channel_id: str = ""
    thumbnail_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "external_id": self.external_id,
            "title": self.title,
            "channel_name": self.channel_name,
            "channel_id": self.channel_id,
            "view_count": self.view_count,
            "duration": self.duration,
            "upload_date": self.upload_date,
            "url": self.url,
            "thumbnail_url": self.thumbnail_url,
            "description": self.description,
            "scraped_at": _iso(self.scraped_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ItemRecord":
        return cls(
            external_id=data["external_id"],
            title=data["title"],
            channel_name=data.get("channel_name", ""),
            channel_id=data.get("channel_id", ""),
            view_count=data.get("view_count", ""),
            duration=data.get("duration", ""),
            upload_date=data.get("upload_date", ""),
            url=data["url"],
            thumbnail_url=data.get("thumbnail_url", ""),
            description=data.get("description", ""),
            scraped_at=_parse_dt(data.get("scraped_at")) or datetime.min,
        )


@dataclass(frozen=True)
class AnalysisResult:
    """AI-derived semantic judgement about one item."""

    summary: str
    themes: tuple[str, ...]
    sentiment: Sentiment
    sentiment_score: float  # [-1, 1]
    content_type: ContentType
    credibility_score: float  # [0, 1]
    recommendations: str
    key_topics: tuple[str, ...] = ()
    target_audience: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "themes": list(self.themes),
            "sentiment": self.sentiment.value,
            "sentiment_score": self.sentiment_score,
            "content_type": self.content_type.value,
            "credibility_score": self.credibility_score,
            "recommendations": self.recommendations,
            "key_topics": list(self.key_topics),
            "target_audience": self.target_audience,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisResult":
        return cls(
            summary=data["summary"],
            themes=tuple(data.get("themes", ())),
            sentiment=Sentiment(data["sentiment"]),
            sentiment_score=float(data["sentiment_score"]),
            content_type=ContentType(data["content_type"]),
            credibility_score=float(data["credibility_score"]),
            recommendations=data.get("recommendations", ""),
            key_topics=tuple(data.get("key_topics", ())),
            target_audience=data.get("target_audience", ""),
        )


@dataclass(frozen=True)
class Scene:
    """One scene in a narration storyboard."""

    sequence_number: int
    duration: str
    narration_text: str
    visual_elements: tuple[str, ...] = ()
    audio_cues: tuple[str, ...] = ()
    title: str = ""
    transition_notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence_number": self.sequence_number,
            "title": self.title,
            "duration": self.duration,
            "narration_text": self.narration_text,
            "visual_elements": list(self.visual_elements),
            "audio_cues": list(self.audio_cues),
            "transition_notes": self.transition_notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        return cls(
            sequence_number=int(data["sequence_number"]),
            title=data.get("title", ""),
            duration=data.get("duration", ""),
            narration_text=data["narration_text"],
            visual_elements=tuple(data.get("visual_elements", ())),
            audio_cues=tuple(data.get("audio_cues", ())),
            transition_notes=data.get("transition_notes", ""),
        )


@dataclass(frozen=True)
class Storyboard:
    """AI-derived scene breakdown for one analysed item."""

    title: str
    scenes: tuple[Scene, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "scenes": [s.to_dict() for s in self.scenes]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Storyboard":
        return cls(
            title=data["title"],
            scenes=tuple(Scene.from_dict(s) for s in data.get("scenes", ())),
        )


@dataclass(frozen=True)
class ResultEntry:
    """An item with its optional analysis and storyboard."""

    item: ItemRecord
    analysis: AnalysisResult | None = None
    storyboard: Storyboard | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "item": self.item.to_dict(),
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "storyboard": self.storyboard.to_dict() if self.storyboard else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResultEntry":
        analysis = data.get("analysis")
        storyboard = data.get("storyboard")
        return cls(
            item=ItemRecord.from_dict(data["item"]),
            analysis=AnalysisResult.from_dict(analysis) if analysis else None,
            storyboard=Storyboard.from_dict(storyboard) if storyboard else None,
        )


@dataclass(frozen=True)
class ThemeCount:
    """Frequency of one theme tag across analyses."""

    theme: str
    count: int


@dataclass(frozen=True)
class ChannelCount:
    """Number of items from one channel."""

    channel: str
    count: int


@dataclass(frozen=True)
class Recommendation:
    """Report-level recommendation derived from aggregate statistics."""

    type: str  # "content", "format", "engagement"
    title: str
    description: str


@dataclass(frozen=True)
class ResultMetadata:
    """Derived statistics over a result set."""

    total_items: int
    analyzed_items: int
    storyboard_items: int
    average_views: int | None
    theme_frequency: tuple[ThemeCount, ...]
    sentiment_distribution: dict[str, int]
    generated_at: datetime
    total_views: int = 0
    average_duration: str | None = None  # "m:ss" or "h:mm:ss"
    top_channel: ChannelCount | None = None
    content_types: tuple[ContentType, ...] = ()

    @property
    def failed_items(self) -> int:
        return self.total_items - self.analyzed_items

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_items": self.total_items,
            "analyzed_items": self.analyzed_items,
            "storyboard_items": self.storyboard_items,
            "average_views": self.average_views,
            "total_views": self.total_views,
            "average_duration": self.average_duration,
            "top_channel": (
                {"channel": self.top_channel.channel, "count": self.top_channel.count}
                if self.top_channel
                else None
            ),
            "content_types": [c.value for c in self.content_types],
            "theme_frequency": [
                {"theme": t.theme, "count": t.count} for t in self.theme_frequency
            ],
            "sentiment_distribution": dict(self.sentiment_distribution),
            "generated_at": _iso(self.generated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResultMetadata":
        top_channel = data.get("top_channel")
        return cls(
            total_items=data["total_items"],
            analyzed_items=data["analyzed_items"],
            storyboard_items=data["storyboard_items"],
            average_views=data.get("average_views"),
            total_views=data.get("total_views", 0),
            average_duration=data.get("average_duration"),
            top_channel=(
                ChannelCount(channel=top_channel["channel"], count=top_channel["count"])
                if top_channel
                else None
            ),
            content_types=tuple(ContentType(c) for c in data.get("content_types", ())),
            theme_frequency=tuple(
                ThemeCount(theme=t["theme"], count=t["count"])
                for t in data.get("theme_frequency", ())
            ),
            sentiment_distribution=dict(data.get("sentiment_distribution", {})),
            generated_at=_parse_dt(data.get("generated_at")) or datetime.min,
        )


@dataclass(frozen=True)
class ResultSet:
    """Merged, report-ready output of a completed task.

    ``summary`` is the provider's overall report text, absent when it was
    skipped or failed.
    """

    entries: tuple[ResultEntry, ...]
    metadata: ResultMetadata
    recommendations: tuple[Recommendation, ...] = ()
    summary: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "metadata": self.metadata.to_dict(),
            "recommendations": [
                {"type": r.type, "title": r.title, "description": r.description}
                for r in self.recommendations
            ],
            "summary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResultSet":
        return cls(
            entries=tuple(ResultEntry.from_dict(e) for e in data.get("entries", ())),
            metadata=ResultMetadata.from_dict(data["metadata"]),
            recommendations=tuple(
                Recommendation(type=r["type"], title=r["title"], description=r["description"])
                for r in data.get("recommendations", ())
            ),
            summary=data.get("summary"),
        )


@dataclass(frozen=True)
class TaskParameters:
    """Structured parameters of a task.

    ``query`` is parsed from the prompt when not given. Fields left as None
    fall back to application settings when the task runs.
    """

    query: str | None = None
    max_results: int | None = None
    time_window: TimeWindow | None = None
    provider: ProviderName | None = None
    want_storyboard: bool | None = None
    concurrency: int | None = None
    max_retries: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "query": self.query,
            "max_results": self.max_results,
            "time_window": self.time_window.value if self.time_window else None,
            "provider": self.provider.value if self.provider else None,
            "want_storyboard": self.want_storyboard,
            "concurrency": self.concurrency,
            "max_retries": self.max_retries,
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TaskParameters":
        data = data or {}
        time_window = data.get("time_window")
        provider = data.get("provider")
        return cls(
            query=data.get("query"),
            max_results=data.get("max_results"),
            time_window=TimeWindow(time_window) if time_window else None,
            provider=ProviderName(provider) if provider else None,
            want_storyboard=data.get("want_storyboard"),
            concurrency=data.get("concurrency"),
            max_retries=data.get("max_retries"),
        )


@dataclass
class Task:
    """One user-submitted unit of work from prompt to final report."""

    id: UUID
    prompt: str
    kind: TaskKind
    user_id: int = 1
    status: TaskStatus = TaskStatus.PENDING
    parameters: TaskParameters = field(default_factory=TaskParameters)
    result_set: ResultSet | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def create(
        cls,
        prompt: str,
        kind: TaskKind = TaskKind.YOUTUBE_SCRAPE,
        parameters: TaskParameters | None = None,
        user_id: int = 1,
    ) -> "Task":
        """Create a new pending task."""
        return cls(
            id=uuid4(),
            prompt=prompt,
            kind=kind,
            user_id=user_id,
            parameters=parameters or TaskParameters(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "prompt": self.prompt,
            "task_type": self.kind.value,
            "status": self.status.value,
            "parameters": self.parameters.to_dict(),
            "error_message": self.error_message,
            "has_results": self.result_set is not None,
            "created_at": _iso(self.created_at),
            "started_at": _iso(self.started_at),
            "completed_at": _iso(self.completed_at),
        }
