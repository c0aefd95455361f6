"""Base interface for headless browser providers."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any


class BrowserPage(ABC):
    """One open page inside a browser session.

    Navigation failures raise ScrapeError. Element waits and clicks are
    non-fatal and report success as a bool.
    """

    @abstractmethod
    async def goto(self, url: str, timeout_ms: int) -> None:
        """Navigate to a URL, raising ScrapeError on failure or timeout."""
        ...

    @abstractmethod
    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        """Wait for an element to appear. Returns False on timeout."""
        ...

    @abstractmethod
    async def click(self, selector: str, timeout_ms: int) -> bool:
        """Click an element if present. Returns False when it is not found."""
        ...

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run a data-extraction function in the page context."""
        ...

    @abstractmethod
    async def scroll_to_bottom(self) -> None:
        """Scroll to the bottom of the document to trigger lazy loading."""
        ...

    @abstractmethod
    async def scroll_height(self) -> int:
        """Current document scroll height in pixels."""
        ...

    @abstractmethod
    async def pause(self, ms: int) -> None:
        """Let the page settle after an interaction."""
        ...


class BrowserProvider(ABC):
    """Abstract base class for browser providers.

    Implementations:
    - PlaywrightBrowserProvider: Chromium via Playwright
    - StubBrowserProvider: Scripted pages for testing

    Each call to ``session()`` launches a fresh, isolated browser that is
    torn down when the context exits, whether normally or by exception.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    def session(self) -> AbstractAsyncContextManager[BrowserPage]:
        """Open a browser session scoped to an ``async with`` block."""
        ...
