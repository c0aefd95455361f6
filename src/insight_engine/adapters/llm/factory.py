"""Provider selection by configuration value."""

from insight_engine.adapters.llm.anthropic import AnthropicProvider
from insight_engine.adapters.llm.base import LLMProvider
from insight_engine.adapters.llm.openai import OpenAIProvider
from insight_engine.adapters.llm.stub import StubLLMProvider
from insight_engine.config import settings
from insight_engine.domain.enums import ProviderName


def get_llm_provider(name: ProviderName | str | None = None) -> LLMProvider:
    """Get the LLM provider for a configured name.

    Falls back to ``settings.llm_provider`` when no name is given. Unknown
    names raise ValueError rather than silently picking another backend.
    """
    provider = ProviderName((name or settings.llm_provider).lower())

    if provider == ProviderName.OPENAI:
        return OpenAIProvider()
    if provider == ProviderName.ANTHROPIC:
        return AnthropicProvider()
    return StubLLMProvider()
