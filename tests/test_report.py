"""Tests for report assembly."""

from datetime import UTC, datetime

from insight_engine.domain.enums import ContentType, Sentiment
from insight_engine.domain.models import AnalysisResult, ItemRecord, Scene, Storyboard
from insight_engine.services.report import (
    assemble,
    format_duration,
    parse_duration,
    parse_view_count,
    theme_frequency,
)


def _item(
    external_id: str,
    views: str = "1K views",
    channel: str = "Channel",
    duration: str = "5:00",
) -> ItemRecord:
    return ItemRecord(
        external_id=external_id,
        title=f"Video {external_id}",
        channel_name=channel,
        view_count=views,
        duration=duration,
        upload_date="1 day ago",
        url=f"https://www.youtube.com/watch?v={external_id}",
        description="",
        scraped_at=datetime(2026, 1, 1, tzinfo=UTC),
    )


def _analysis(
    themes: list[str],
    sentiment: Sentiment = Sentiment.NEUTRAL,
    content_type: ContentType = ContentType.DOCUMENTARY,
) -> AnalysisResult:
    return AnalysisResult(
        summary="summary",
        themes=tuple(themes),
        sentiment=sentiment,
        sentiment_score=0.0,
        content_type=content_type,
        credibility_score=0.5,
        recommendations="",
    )


def _storyboard() -> Storyboard:
    return Storyboard(
        title="Storyboard",
        scenes=(Scene(sequence_number=1, duration="30 seconds", narration_text="Hello"),),
    )


class TestParseViewCount:
    """Tests for display view-count parsing."""

    def test_suffixes(self) -> None:
        """K, M and B suffixes scale the number."""
        assert parse_view_count("2.3M views") == 2_300_000
        assert parse_view_count("850K views") == 850_000
        assert parse_view_count("1.2B views") == 1_200_000_000

    def test_plain_and_comma_numbers(self) -> None:
        """Plain and comma-grouped numbers parse as-is."""
        assert parse_view_count("1,234 views") == 1234
        assert parse_view_count("87 views") == 87

    def test_unparseable(self) -> None:
        """Strings without a number are unparseable rather than zero."""
        assert parse_view_count("No views") is None
        assert parse_view_count("not a number") is None
        assert parse_view_count("") is None


def test_theme_frequency_ranking() -> None:
    """Counts descend; ties keep first-seen order."""
    table = theme_frequency(
        [_analysis(["paranormal", "evidence"]), _analysis(["paranormal", "scientific"])]
    )

    assert [(t.theme, t.count) for t in table] == [
        ("paranormal", 2),
        ("evidence", 1),
        ("scientific", 1),
    ]


def test_average_views_skips_unparseable() -> None:
    """Only parseable view strings contribute to the average."""
    items = [_item("a", "2.3M views"), _item("b", "850K views"), _item("c", "not a number")]

    result = assemble(items, {}, {})

    assert result.metadata.average_views == 1_575_000


def test_assemble_joins_by_identity() -> None:
    """Analyses may cover a subset; entries follow item order."""
    items = [_item("a"), _item("b"), _item("c")]
    analyses = {
        "c": _analysis(["ghosts"], Sentiment.NEGATIVE),
        "a": _analysis(["ghosts", "history"], Sentiment.POSITIVE),
    }
    storyboards = {"a": _storyboard(), "b": _storyboard()}

    result = assemble(items, analyses, storyboards)
    meta = result.metadata

    assert [e.item.external_id for e in result.entries] == ["a", "b", "c"]
    assert result.entries[1].analysis is None
    # Storyboard without an analysis is dropped
    assert result.entries[1].storyboard is None
    assert meta.total_items == 3
    assert meta.analyzed_items == 2
    assert meta.storyboard_items == 1
    assert meta.failed_items == 1
    assert meta.sentiment_distribution == {"positive": 1, "negative": 1, "neutral": 0}
    assert [(t.theme, t.count) for t in meta.theme_frequency] == [("ghosts", 2), ("history", 1)]


def test_recommendations() -> None:
    """Theme, format and engagement recommendations depend on the aggregates."""
    items = [_item("a", "2.3M views"), _item("b", "850K views")]
    analyses = {"a": _analysis(["ghosts"]), "b": _analysis(["ghosts", "castles"])}

    result = assemble(items, analyses, {})
    types = [r.type for r in result.recommendations]

    assert types == ["content", "format", "engagement"]
    assert "ghosts, castles" in result.recommendations[0].description


def test_no_recommendations_for_empty_low_view_set() -> None:
    """No themes and low views yield no recommendations."""
    result = assemble([_item("a", "12 views")], {}, {})

    assert result.recommendations == ()
    assert result.metadata.average_views == 12
    assert result.metadata.theme_frequency == ()


class TestDurations:
    """Tests for display duration parsing."""

    def test_parse(self) -> None:
        """Minute and hour forms parse to seconds."""
        assert parse_duration("5:07") == 307
        assert parse_duration("1:02:03") == 3723
        assert parse_duration("LIVE") is None
        assert parse_duration("") is None

    def test_format(self) -> None:
        """Hours appear only past sixty minutes."""
        assert format_duration(307) == "5:07"
        assert format_duration(3723) == "1:02:03"


def test_detailed_statistics() -> None:
    """Totals, average duration, top channel and content types are derived."""
    items = [
        _item("a", "2.3M views", channel="Night Files", duration="10:00"),
        _item("b", "850K views", channel="Spooky", duration="5:00"),
        _item("c", "No views", channel="Night Files", duration="LIVE"),
    ]
    analyses = {
        "a": _analysis(["ghosts"], content_type=ContentType.DOCUMENTARY),
        "b": _analysis(["ghosts"], content_type=ContentType.UNKNOWN),
        "c": _analysis(["ghosts"], content_type=ContentType.HORROR),
    }

    meta = assemble(items, analyses, {}).metadata

    assert meta.total_views == 3_150_000
    assert meta.average_duration == "7:30"
    assert meta.top_channel is not None
    assert (meta.top_channel.channel, meta.top_channel.count) == ("Night Files", 2)
    assert meta.content_types == (ContentType.DOCUMENTARY, ContentType.HORROR)


def test_format_recommendation_lists_content_types() -> None:
    """The format recommendation names each content type present."""
    items = [_item("a", "10 views"), _item("b", "10 views")]
    analyses = {
        "a": _analysis(["ghosts"], content_type=ContentType.HORROR),
        "b": _analysis(["ghosts"], content_type=ContentType.COMEDY),
    }

    result = assemble(items, analyses, {})
    fmt = next(r for r in result.recommendations if r.type == "format")

    assert fmt.title == "Content Format Insights"
    assert fmt.description.startswith("Dominant content types: horror, comedy.")


def test_statistics_without_parseable_fields() -> None:
    """No durations or channel names leave those statistics absent."""
    result = assemble([_item("a", "No views", channel="", duration="")], {}, {}, summary="Report")

    assert result.metadata.total_views == 0
    assert result.metadata.average_duration is None
    assert result.metadata.top_channel is None
    assert result.metadata.content_types == ()
    assert result.summary == "Report"
