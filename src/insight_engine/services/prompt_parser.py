"""Extract search parameters from a natural-language prompt."""

import re
from dataclasses import dataclass

from insight_engine.config import settings
from insight_engine.domain.enums import TimeWindow
from insight_engine.logging import get_logger

logger = get_logger(__name__)

DEFAULT_QUERY = "trending videos"

_QUERY_PATTERN = re.compile(r"\b(?:search for|find|about|on)\s+([^.!?]+)", re.IGNORECASE)
_TIME_PATTERN = re.compile(r"\b(?:last|past)\s+(?:\d+\s*)?(hour|day|week|month|year)s?", re.IGNORECASE)
_COUNT_PATTERN = re.compile(r"(\d+)\s*(?:videos?|results?)", re.IGNORECASE)

# Known topics win over the generic query match
TOPIC_PATTERNS = [
    re.compile(r"paranormal encounters?", re.IGNORECASE),
    re.compile(r"ghost stories?", re.IGNORECASE),
    re.compile(r"horror stories?", re.IGNORECASE),
    re.compile(r"true crime", re.IGNORECASE),
    re.compile(r"conspiracy theories?", re.IGNORECASE),
    re.compile(r"mysteries?", re.IGNORECASE),
    re.compile(r"unexplained phenomena", re.IGNORECASE),
]


@dataclass(frozen=True)
class SearchRequest:
    """Search parameters derived from a prompt."""

    query: str
    time_window: TimeWindow
    max_results: int


def parse_prompt(prompt: str) -> SearchRequest:
    """Parse a prompt such as "Find 10 videos about ghost stories from the last week".

    Args:
        prompt: Free-text user prompt

    Returns:
        SearchRequest with query, time window and result count. Values
        not found in the prompt fall back to configured defaults.
    """
    query = DEFAULT_QUERY
    match = _QUERY_PATTERN.search(prompt)
    if match:
        query = match.group(1).strip()

    for pattern in TOPIC_PATTERNS:
        topic = pattern.search(prompt)
        if topic:
            query = topic.group(0)

    time_window = TimeWindow(settings.default_time_window)
    match = _TIME_PATTERN.search(prompt)
    if match:
        time_window = TimeWindow(match.group(1).lower())

    max_results = settings.default_max_results
    match = _COUNT_PATTERN.search(prompt)
    if match:
        max_results = clamp_max_results(int(match.group(1)))

    request = SearchRequest(query=query, time_window=time_window, max_results=max_results)
    logger.debug(
        "prompt_parsed",
        query=request.query,
        time_window=request.time_window.value,
        max_results=request.max_results,
    )
    return request


def clamp_max_results(value: int) -> int:
    """Bound a requested result count to [1, max_results_cap]."""
    return max(1, min(value, settings.max_results_cap))
