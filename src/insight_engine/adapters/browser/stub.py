"""Stub browser provider for testing."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from insight_engine.adapters.browser.base import BrowserPage, BrowserProvider
from insight_engine.exceptions import ScrapeError
from insight_engine.logging import get_logger

logger = get_logger(__name__)

PAGE_HEIGHT = 1000


def make_raw_video(index: int, views: str | None = None) -> dict[str, str]:
    """Build one raw record in the shape the page extraction script returns."""
    video_id = f"vid{index:05d}"
    return {
        "videoId": video_id,
        "title": f"Paranormal encounter caught on camera #{index}",
        "channelName": f"Channel {index % 3}",
        "channelId": f"UC{index % 3:04d}",
        "description": f"Episode {index} of the series.",
        "viewCount": views if views is not None else f"{index * 10}K views",
        "uploadDate": "2 weeks ago",
        "duration": "12:34",
        "thumbnailUrl": "",
        "videoUrl": f"https://www.youtube.com/watch?v={video_id}",
    }


def default_result_pages() -> list[list[dict[str, str]]]:
    """Three result loads of four videos; the last video of each load repeats in the next."""
    pages = []
    for page in range(3):
        start = page * 3 + 1
        pages.append([make_raw_video(i) for i in range(start, start + 4)])
    return pages


class StubPage(BrowserPage):
    """Scripted page revealing one result load per scroll."""

    def __init__(self, provider: "StubBrowserProvider") -> None:
        self._provider = provider
        self.visited_urls: list[str] = []
        self.clicked: list[str] = []
        self.scrolls = 0
        self._revealed = 1

    def _load(self, index: int) -> list[dict[str, str]]:
        if self._provider.endless:
            start = index * 10 + 1
            return [make_raw_video(i) for i in range(start, start + 10)]
        return self._provider.pages[index]

    def _has_more(self) -> bool:
        return self._provider.endless or self._revealed < len(self._provider.pages)

    async def goto(self, url: str, timeout_ms: int) -> None:
        if self._provider.fail_navigation:
            raise ScrapeError(f"Navigation to {url} timed out after {timeout_ms}ms")
        self.visited_urls.append(url)

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:  # noqa: ARG002
        return not self._provider.missing_container

    async def click(self, selector: str, timeout_ms: int) -> bool:  # noqa: ARG002
        self.clicked.append(selector)
        return selector == self._provider.consent_selector

    async def evaluate(self, script: str, arg: Any = None) -> Any:  # noqa: ARG002
        if self._provider.fail_extraction:
            raise ScrapeError("Page evaluation failed: stub extraction error")
        visible: list[dict[str, str]] = []
        for index in range(self._revealed):
            visible.extend(self._load(index))
        return visible

    async def scroll_to_bottom(self) -> None:
        self.scrolls += 1
        if self._has_more():
            self._revealed += 1

    async def scroll_height(self) -> int:
        return PAGE_HEIGHT * self._revealed

    async def pause(self, ms: int) -> None:  # noqa: ARG002
        return None


class StubBrowserProvider(BrowserProvider):
    """Stub provider that serves scripted search results without a browser."""

    def __init__(
        self,
        pages: list[list[dict[str, str]]] | None = None,
        endless: bool = False,
        fail_navigation: bool = False,
        fail_extraction: bool = False,
        missing_container: bool = False,
        consent_selector: str | None = None,
    ) -> None:
        self.pages = pages if pages is not None else default_result_pages()
        self.endless = endless
        self.fail_navigation = fail_navigation
        self.fail_extraction = fail_extraction
        self.missing_container = missing_container
        self.consent_selector = consent_selector
        self.sessions_opened = 0
        self.sessions_closed = 0
        self.last_page: StubPage | None = None

    @property
    def name(self) -> str:
        return "stub"

    @asynccontextmanager
    async def session(self) -> AsyncIterator[BrowserPage]:
        self.sessions_opened += 1
        page = StubPage(self)
        self.last_page = page
        logger.info("stub_browser_session_opened")
        try:
            yield page
        finally:
            self.sessions_closed += 1
            logger.info("stub_browser_session_closed")
