"""YouTube search scraping over a headless browser session."""

from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote_plus

from insight_engine.adapters.browser.base import BrowserPage, BrowserProvider
from insight_engine.config import settings
from insight_engine.domain.enums import TimeWindow
from insight_engine.domain.models import ItemRecord
from insight_engine.exceptions import ScrapeError
from insight_engine.logging import get_logger

logger = get_logger(__name__)

SEARCH_URL = "https://www.youtube.com/results"
RESULTS_CONTAINER = "#contents"

# Upload-date filter tokens for the "sp" query parameter
TIME_FILTERS: dict[TimeWindow, str] = {
    TimeWindow.HOUR: "EgIIAQ%3D%3D",
    TimeWindow.DAY: "EgIIAg%3D%3D",
    TimeWindow.WEEK: "EgIIAw%3D%3D",
    TimeWindow.MONTH: "EgIIBA%3D%3D",
    TimeWindow.YEAR: "EgIIBQ%3D%3D",
}

CONSENT_SELECTORS = [
    '[data-testid="cookie-accept"]',
    ".cookie-accept",
    "#accept-cookies",
    'button[aria-label*="Accept"]',
    'button[aria-label*="I accept"]',
]
CONSENT_CLICK_TIMEOUT_MS = 1000

# Consecutive scrolls without a height change before the feed is considered exhausted
MAX_UNCHANGED_SCROLLS = 2

EXTRACT_VIDEOS_SCRIPT = """
() => {
    const videos = [];
    for (const el of document.querySelectorAll('ytd-video-renderer')) {
        const link = el.querySelector('a#video-title');
        const href = link ? link.href : '';
        const idMatch = href.match(/watch\\?v=([^&]+)/);
        const channel = el.querySelector('#channel-info a, ytd-channel-name a');
        const channelHref = channel ? channel.href : '';
        const channelMatch = channelHref.match(/channel\\/([^\\/]+)/);
        const meta = el.querySelectorAll('#metadata-line span');
        const text = (node) => (node && node.textContent ? node.textContent.trim() : '');
        const thumb = el.querySelector('img');
        videos.push({
            videoId: idMatch ? idMatch[1] : '',
            title: text(link),
            channelName: text(channel),
            channelId: channelMatch ? channelMatch[1] : '',
            description: text(el.querySelector('.metadata-snippet-text, #description-text')),
            viewCount: text(meta[0]),
            uploadDate: text(meta[1]),
            duration: text(el.querySelector('ytd-thumbnail-overlay-time-status-renderer span')),
            thumbnailUrl: thumb && thumb.src ? thumb.src : '',
        });
    }
    return videos;
}
"""


def build_search_url(query: str, time_window: TimeWindow) -> str:
    """Build a search URL with the upload-date filter applied."""
    return f"{SEARCH_URL}?search_query={quote_plus(query)}&sp={TIME_FILTERS[time_window]}"


def parse_raw_video(raw: dict[str, Any], scraped_at: datetime) -> ItemRecord | None:
    """Convert one extracted record to an ItemRecord. Returns None if unusable."""
    video_id = (raw.get("videoId") or "").strip()
    title = (raw.get("title") or "").strip()
    if not video_id or not title:
        return None

    return ItemRecord(
        external_id=video_id,
        title=title,
        channel_name=raw.get("channelName") or "",
        channel_id=raw.get("channelId") or "",
        view_count=raw.get("viewCount") or "",
        duration=raw.get("duration") or "",
        upload_date=raw.get("uploadDate") or "",
        url=f"https://www.youtube.com/watch?v={video_id}",
        thumbnail_url=raw.get("thumbnailUrl") or "",
        description=raw.get("description") or "",
        scraped_at=scraped_at,
    )


def get_browser_provider() -> BrowserProvider:
    """Get the production browser provider."""
    from insight_engine.adapters.browser.playwright import PlaywrightBrowserProvider

    return PlaywrightBrowserProvider()


class ScraperEngine:
    """Searches the platform and extracts a bounded, de-duplicated list of videos.

    Every ``search`` call opens its own browser session and closes it before
    returning or raising. Navigation failures raise ScrapeError and are not
    retried here.
    """

    def __init__(
        self,
        browser: BrowserProvider | None = None,
        navigation_timeout_ms: int | None = None,
        element_timeout_ms: int | None = None,
        max_pages: int | None = None,
        scroll_delay_ms: int | None = None,
    ) -> None:
        self.browser = browser or get_browser_provider()
        self.navigation_timeout_ms = navigation_timeout_ms or settings.browser_navigation_timeout_ms
        self.element_timeout_ms = element_timeout_ms or settings.browser_element_timeout_ms
        self.max_pages = max_pages or settings.scraper_max_pages
        self.scroll_delay_ms = (
            settings.scraper_scroll_delay_ms if scroll_delay_ms is None else scroll_delay_ms
        )

    async def search(
        self,
        query: str,
        time_window: TimeWindow,
        max_results: int,
    ) -> list[ItemRecord]:
        """Search for videos.

        Args:
            query: Search terms
            time_window: Upload date window
            max_results: Upper bound on returned records

        Returns:
            At most ``max_results`` records, unique by external id, in page order

        Raises:
            ScrapeError: navigation, results wait, or extraction failure
        """
        url = build_search_url(query, time_window)
        logger.info(
            "scrape_started",
            browser=self.browser.name,
            query=query,
            time_window=time_window.value,
            max_results=max_results,
        )

        async with self.browser.session() as page:
            await page.goto(url, timeout_ms=self.navigation_timeout_ms)
            await self._dismiss_consent(page)

            if not await page.wait_for_selector(RESULTS_CONTAINER, self.element_timeout_ms):
                raise ScrapeError(
                    f"Search results did not appear within {self.element_timeout_ms}ms"
                )

            items, stop_reason, pages = await self._collect(page, max_results)

        logger.info(
            "scrape_completed",
            query=query,
            items=len(items),
            pages=pages,
            stop_reason=stop_reason,
        )
        return items

    async def _dismiss_consent(self, page: BrowserPage) -> None:
        """Try each known consent selector once. Never fatal."""
        for selector in CONSENT_SELECTORS:
            if await page.click(selector, CONSENT_CLICK_TIMEOUT_MS):
                logger.debug("cookie_consent_dismissed", selector=selector)
                return

    async def _collect(
        self, page: BrowserPage, max_results: int
    ) -> tuple[list[ItemRecord], str, int]:
        items: list[ItemRecord] = []
        seen: set[str] = set()
        pages = 0
        unchanged_scrolls = 0
        height = await page.scroll_height()

        while True:
            scraped_at = datetime.now(UTC)
            for raw in await page.evaluate(EXTRACT_VIDEOS_SCRIPT) or []:
                item = parse_raw_video(raw, scraped_at)
                if item is None or item.external_id in seen:
                    continue
                seen.add(item.external_id)
                items.append(item)
                if len(items) >= max_results:
                    return items, "max_results", pages + 1

            pages += 1
            if pages >= self.max_pages:
                return items, "page_cap", pages

            await page.scroll_to_bottom()
            await page.pause(self.scroll_delay_ms)
            new_height = await page.scroll_height()

            if new_height == height:
                unchanged_scrolls += 1
                if unchanged_scrolls >= MAX_UNCHANGED_SCROLLS:
                    return items, "exhausted", pages
            else:
                unchanged_scrolls = 0
                height = new_height
