"""Adapters for external services."""

from insight_engine.adapters.browser.base import BrowserPage, BrowserProvider
from insight_engine.adapters.llm.base import LLMProvider

__all__ = [
    "BrowserPage",
    "BrowserProvider",
    "LLMProvider",
]
