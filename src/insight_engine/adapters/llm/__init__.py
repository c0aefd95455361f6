"""LLM provider adapters."""

from insight_engine.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from insight_engine.adapters.llm.anthropic import AnthropicProvider
from insight_engine.adapters.llm.factory import get_llm_provider
from insight_engine.adapters.llm.openai import OpenAIProvider
from insight_engine.adapters.llm.stub import StubLLMProvider

__all__ = [
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "AnthropicProvider",
    "OpenAIProvider",
    "StubLLMProvider",
    "get_llm_provider",
]
