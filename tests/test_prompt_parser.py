"""Tests for prompt parsing."""

from insight_engine.domain.enums import TimeWindow
from insight_engine.services.prompt_parser import DEFAULT_QUERY, clamp_max_results, parse_prompt


def test_parse_full_prompt() -> None:
    """Query, count and time window are all read from the prompt."""
    request = parse_prompt("Find 15 videos about haunted lighthouses from the last week")

    assert request.max_results == 15
    assert request.time_window == TimeWindow.WEEK
    assert request.query.startswith("15 videos about haunted lighthouses")


def test_known_topic_overrides_query() -> None:
    """A recognised topic phrase wins over the generic query match."""
    request = parse_prompt("Search for the best ghost stories. Past year please")

    assert request.query == "ghost stories"
    assert request.time_window == TimeWindow.YEAR


def test_defaults_when_nothing_matches() -> None:
    """Missing values fall back to configured defaults."""
    request = parse_prompt("surprise me")

    assert request.query == DEFAULT_QUERY
    assert request.max_results == 10
    assert request.time_window == TimeWindow.MONTH


def test_time_window_with_count() -> None:
    """'past 2 days' maps to the day window."""
    request = parse_prompt("videos on true crime from the past 2 days")

    assert request.time_window == TimeWindow.DAY
    assert request.query == "true crime"


def test_result_count_is_capped() -> None:
    """Requested counts are clamped to the configured cap."""
    assert parse_prompt("Find 500 results about mysteries").max_results == 50
    assert clamp_max_results(0) == 1
    assert clamp_max_results(7) == 7
