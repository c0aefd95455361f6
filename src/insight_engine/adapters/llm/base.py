"""Base interface for LLM providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from insight_engine.domain.enums import ProviderErrorKind
from insight_engine.exceptions import ProviderError


@dataclass
class LLMResponse:
    """Response from an LLM provider."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    raw_response: dict[str, Any] | None = None
    finish_reason: str | None = None


@dataclass
class LLMMessage:
    """A message in a conversation."""

    role: str  # "system", "user", "assistant"
    content: str


def classify_http_error(error: Exception, provider: str) -> ProviderError:
    """Translate an httpx failure into a classified ProviderError."""
    if isinstance(error, httpx.TimeoutException):
        return ProviderError(ProviderErrorKind.TIMEOUT, str(error) or "request timed out", provider)

    if isinstance(error, httpx.HTTPStatusError):
        code = error.response.status_code
        message = f"HTTP {code}: {error.response.text[:200]}"
        if code in (401, 403):
            return ProviderError(ProviderErrorKind.AUTH, message, provider)
        if code == 429:
            return ProviderError(ProviderErrorKind.RATE_LIMITED, message, provider)
        if code in (408, 504):
            return ProviderError(ProviderErrorKind.TIMEOUT, message, provider)
        if code >= 500:
            return ProviderError(ProviderErrorKind.NETWORK, message, provider)
        # Other 4xx: the request itself is wrong, retrying won't help, but
        # the item can still fail on its own without aborting the task.
        return ProviderError(ProviderErrorKind.INVALID_RESPONSE, message, provider)

    if isinstance(error, httpx.TransportError):
        return ProviderError(ProviderErrorKind.NETWORK, str(error) or type(error).__name__, provider)

    return ProviderError(ProviderErrorKind.INVALID_RESPONSE, str(error), provider)


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Implementations:
    - OpenAIProvider: Uses OpenAI API (GPT-4o, etc.)
    - AnthropicProvider: Uses Anthropic API (Claude)
    - StubLLMProvider: Returns mock data for testing

    Every failure from ``complete`` is raised as a ProviderError so callers
    can decide on retries without knowing provider internals.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate a completion from messages.

        Args:
            messages: List of conversation messages
            temperature: Sampling temperature (0-2)
            max_tokens: Maximum tokens in response
            json_mode: If True, request JSON output format

        Returns:
            LLMResponse with generated content

        Raises:
            ProviderError: classified as rate_limited, timeout,
                invalid_response, network or auth
        """
        ...
