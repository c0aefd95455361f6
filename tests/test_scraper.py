"""Tests for the scraper engine against the scripted browser."""

from datetime import UTC, datetime

import pytest

from insight_engine.adapters.browser.stub import StubBrowserProvider, make_raw_video
from insight_engine.domain.enums import TimeWindow
from insight_engine.exceptions import ScrapeError
from insight_engine.services.scraper import (
    CONSENT_SELECTORS,
    ScraperEngine,
    build_search_url,
    parse_raw_video,
)


def _engine(browser: StubBrowserProvider, **kwargs) -> ScraperEngine:
    return ScraperEngine(browser=browser, scroll_delay_ms=0, **kwargs)


def test_build_search_url() -> None:
    """Query is URL-encoded and the upload-date filter applied."""
    url = build_search_url("ghost stories", TimeWindow.WEEK)

    assert url == "https://www.youtube.com/results?search_query=ghost+stories&sp=EgIIAw%3D%3D"


def test_parse_raw_video_requires_id_and_title() -> None:
    """Records without an id or title are dropped."""
    now = datetime.now(UTC)
    raw = make_raw_video(7)

    item = parse_raw_video(raw, now)
    assert item is not None
    assert item.external_id == "vid00007"
    assert item.url == "https://www.youtube.com/watch?v=vid00007"
    assert item.view_count == "70K views"

    assert parse_raw_video({**raw, "videoId": ""}, now) is None
    assert parse_raw_video({**raw, "title": "  "}, now) is None


class TestScraperEngine:
    """Tests for ScraperEngine.search."""

    @pytest.mark.asyncio
    async def test_dedups_across_scrolls(self) -> None:
        """Overlapping result loads produce unique items in page order."""
        browser = StubBrowserProvider()

        items = await _engine(browser).search("ghosts", TimeWindow.MONTH, 10)

        assert [i.external_id for i in items] == [f"vid{n:05d}" for n in range(1, 11)]
        assert browser.last_page.scrolls == 2

    @pytest.mark.asyncio
    async def test_stops_at_max_results(self) -> None:
        """No more than max_results items are returned."""
        browser = StubBrowserProvider()

        items = await _engine(browser).search("ghosts", TimeWindow.MONTH, 5)

        assert len(items) == 5
        assert browser.last_page.scrolls == 1

    @pytest.mark.asyncio
    async def test_stops_when_height_unchanged_twice(self) -> None:
        """An exhausted feed ends the search with whatever was found."""
        browser = StubBrowserProvider()

        items = await _engine(browser).search("ghosts", TimeWindow.MONTH, 50)

        assert len(items) == 10
        assert browser.last_page.scrolls == 4

    @pytest.mark.asyncio
    async def test_page_cap_bounds_endless_feed(self) -> None:
        """An endless feed is bounded by the page cap."""
        browser = StubBrowserProvider(endless=True)

        items = await _engine(browser, max_pages=2).search("ghosts", TimeWindow.MONTH, 50)

        assert len(items) == 20
        assert browser.last_page.scrolls == 1

    @pytest.mark.asyncio
    async def test_duplicates_within_one_load(self) -> None:
        """Duplicate ids on the same page are collapsed."""
        browser = StubBrowserProvider(
            pages=[[make_raw_video(1), make_raw_video(1), make_raw_video(2)]]
        )

        items = await _engine(browser).search("ghosts", TimeWindow.DAY, 10)

        assert [i.external_id for i in items] == ["vid00001", "vid00002"]

    @pytest.mark.asyncio
    async def test_navigates_to_filtered_search(self) -> None:
        """The search URL carries the query and the time filter."""
        browser = StubBrowserProvider()

        await _engine(browser).search("true crime", TimeWindow.HOUR, 3)

        assert browser.last_page.visited_urls == [
            "https://www.youtube.com/results?search_query=true+crime&sp=EgIIAQ%3D%3D"
        ]

    @pytest.mark.asyncio
    async def test_consent_dismissed_once(self) -> None:
        """Consent selectors are tried in order until one works."""
        browser = StubBrowserProvider(consent_selector=CONSENT_SELECTORS[1])

        await _engine(browser).search("ghosts", TimeWindow.MONTH, 3)

        assert browser.last_page.clicked == CONSENT_SELECTORS[:2]

    @pytest.mark.asyncio
    async def test_consent_absent_is_not_fatal(self) -> None:
        """A page without a consent dialog is scraped normally."""
        browser = StubBrowserProvider()

        items = await _engine(browser).search("ghosts", TimeWindow.MONTH, 3)

        assert len(items) == 3
        assert browser.last_page.clicked == CONSENT_SELECTORS

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "failure",
        ["fail_navigation", "missing_container", "fail_extraction"],
    )
    async def test_failures_raise_and_close_session(self, failure: str) -> None:
        """Every failure raises ScrapeError and still releases the session."""
        browser = StubBrowserProvider(**{failure: True})

        with pytest.raises(ScrapeError):
            await _engine(browser).search("ghosts", TimeWindow.MONTH, 10)

        assert browser.sessions_opened == 1
        assert browser.sessions_closed == 1

    @pytest.mark.asyncio
    async def test_session_closed_on_success(self) -> None:
        """Each search opens and closes exactly one session."""
        browser = StubBrowserProvider()
        engine = _engine(browser)

        await engine.search("ghosts", TimeWindow.MONTH, 3)
        await engine.search("ghosts", TimeWindow.MONTH, 3)

        assert browser.sessions_opened == 2
        assert browser.sessions_closed == 2
