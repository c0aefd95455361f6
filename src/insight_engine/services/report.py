"""Merge scraped items, analyses and storyboards into a report-ready ResultSet."""

import re
from collections import Counter
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime

from insight_engine.domain.enums import ContentType, Sentiment
from insight_engine.domain.models import (
    AnalysisResult,
    ChannelCount,
    ItemRecord,
    Recommendation,
    ResultEntry,
    ResultMetadata,
    ResultSet,
    Storyboard,
    ThemeCount,
)

TOP_THEMES = 5
HIGH_ENGAGEMENT_VIEWS = 100_000

_VIEWS_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*([KMB])?", re.IGNORECASE)
_MULTIPLIERS = {"K": 1_000, "M": 1_000_000, "B": 1_000_000_000}
_DURATION_PATTERN = re.compile(r"^\d+(?::[0-5]\d){1,2}$")


def parse_view_count(value: str | None) -> int | None:
    """Parse a display view count like "2.3M views" or "1,234 views".

    Returns None when the string carries no number (e.g. "No views").
    """
    if not value:
        return None
    match = _VIEWS_PATTERN.search(value.replace(",", ""))
    if not match:
        return None
    number = float(match.group(1))
    suffix = (match.group(2) or "").upper()
    return round(number * _MULTIPLIERS.get(suffix, 1))


def parse_duration(value: str | None) -> int | None:
    """Seconds in an "m:ss" or "h:mm:ss" duration; None for anything else ("LIVE", "")."""
    if not value or not _DURATION_PATTERN.match(value.strip()):
        return None
    seconds = 0
    for part in value.strip().split(":"):
        seconds = seconds * 60 + int(part)
    return seconds


def format_duration(seconds: int) -> str:
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def theme_frequency(analyses: Sequence[AnalysisResult]) -> list[ThemeCount]:
    """Count themes, most frequent first; ties keep first-seen order."""
    counts: Counter[str] = Counter()
    for analysis in analyses:
        counts.update(analysis.themes)
    # Counter preserves insertion order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [ThemeCount(theme=theme, count=count) for theme, count in ranked]


def top_channel(items: Sequence[ItemRecord]) -> ChannelCount | None:
    """Channel with the most items; the first seen wins a tie."""
    counts = Counter(i.channel_name for i in items if i.channel_name)
    if not counts:
        return None
    channel, count = counts.most_common(1)[0]
    return ChannelCount(channel=channel, count=count)


def content_types(analyses: Sequence[AnalysisResult]) -> list[ContentType]:
    """Distinct content types in first-seen order, without UNKNOWN."""
    seen: list[ContentType] = []
    for analysis in analyses:
        if analysis.content_type is not ContentType.UNKNOWN and analysis.content_type not in seen:
            seen.append(analysis.content_type)
    return seen


def build_recommendations(
    themes: Sequence[ThemeCount],
    average_views: int | None,
    types: Sequence[ContentType] = (),
) -> list[Recommendation]:
    recommendations = []
    if themes:
        top = ", ".join(t.theme for t in themes[:TOP_THEMES])
        recommendations.append(
            Recommendation(
                type="content",
                title="Popular Content Themes",
                description=f"Focus on these trending themes: {top}",
            )
        )
    if types:
        recommendations.append(
            Recommendation(
                type="format",
                title="Content Format Insights",
                description=(
                    f"Dominant content types: {', '.join(t.value for t in types)}. "
                    "Consider diversifying or doubling down based on performance."
                ),
            )
        )
    if average_views is not None and average_views > HIGH_ENGAGEMENT_VIEWS:
        recommendations.append(
            Recommendation(
                type="engagement",
                title="High Engagement Content",
                description=(
                    f"Videos in this set average {average_views:,} views. "
                    "Similar topics attract strong audience interest."
                ),
            )
        )
    return recommendations


def assemble(
    items: Sequence[ItemRecord],
    analyses: Mapping[str, AnalysisResult],
    storyboards: Mapping[str, Storyboard],
    summary: str | None = None,
) -> ResultSet:
    """Build a ResultSet from items and the analyses/storyboards keyed by external id.

    Entries follow item order. A storyboard for an item without an analysis
    is dropped.
    """
    entries = []
    for item in items:
        analysis = analyses.get(item.external_id)
        storyboard = storyboards.get(item.external_id) if analysis else None
        entries.append(ResultEntry(item=item, analysis=analysis, storyboard=storyboard))

    present = [e.analysis for e in entries if e.analysis]
    themes = theme_frequency(present)
    types = content_types(present)

    sentiment_distribution = {s.value: 0 for s in Sentiment}
    for analysis in present:
        sentiment_distribution[analysis.sentiment.value] += 1

    views = [v for v in (parse_view_count(i.view_count) for i in items) if v is not None]
    average_views = round(sum(views) / len(views)) if views else None

    durations = [d for d in (parse_duration(i.duration) for i in items) if d is not None]
    average_duration = (
        format_duration(round(sum(durations) / len(durations))) if durations else None
    )

    metadata = ResultMetadata(
        total_items=len(entries),
        analyzed_items=len(present),
        storyboard_items=sum(1 for e in entries if e.storyboard),
        average_views=average_views,
        total_views=sum(views),
        average_duration=average_duration,
        top_channel=top_channel(items),
        content_types=tuple(types),
        theme_frequency=tuple(themes),
        sentiment_distribution=sentiment_distribution,
        generated_at=datetime.now(UTC),
    )
    return ResultSet(
        entries=tuple(entries),
        metadata=metadata,
        recommendations=tuple(build_recommendations(themes, average_views, types)),
        summary=summary,
    )


def assemble_entries(
    items: Sequence[ItemRecord],
    entries: Sequence[ResultEntry],
    summary: str | None = None,
) -> ResultSet:
    """Assemble from batcher output."""
    analyses = {e.item.external_id: e.analysis for e in entries if e.analysis}
    storyboards = {e.item.external_id: e.storyboard for e in entries if e.storyboard}
    return assemble(items, analyses, storyboards, summary=summary)
