"""Headless browser adapters."""

from insight_engine.adapters.browser.base import BrowserPage, BrowserProvider
from insight_engine.adapters.browser.stub import StubBrowserProvider

__all__ = [
    "BrowserPage",
    "BrowserProvider",
    "StubBrowserProvider",
]
