"""OpenAI LLM provider implementation."""

from typing import Any

import httpx

from insight_engine.adapters.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    classify_http_error,
)
from insight_engine.config import settings
from insight_engine.domain.enums import ProviderErrorKind
from insight_engine.exceptions import ProviderError
from insight_engine.logging import get_logger

logger = get_logger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI API provider for GPT models."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = "https://api.openai.com/v1",
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.base_url = base_url
        self.timeout = timeout or settings.inference_timeout_seconds

        if not self.api_key:
            logger.warning("OpenAI API key not configured")

    @property
    def name(self) -> str:
        return f"openai:{self.model}"

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate completion using OpenAI API."""
        if not self.api_key:
            raise ProviderError(ProviderErrorKind.AUTH, "OpenAI API key not configured", self.name)

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        logger.debug(
            "openai_request",
            model=self.model,
            message_count=len(messages),
            json_mode=json_mode,
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise classify_http_error(e, self.name) from e

        try:
            choice = data["choices"][0]
            content = choice["message"]["content"]
            finish_reason = choice.get("finish_reason")
            usage = data.get("usage") or {}
            token_usage = {
                key: int(usage.get(key) or 0)
                for key in ("prompt_tokens", "completion_tokens", "total_tokens")
            }
        except (KeyError, IndexError, AttributeError, TypeError, ValueError) as e:
            raise ProviderError(
                ProviderErrorKind.INVALID_RESPONSE,
                f"Unexpected response shape: {e}",
                self.name,
            ) from e

        if content is not None and not isinstance(content, str):
            raise ProviderError(
                ProviderErrorKind.INVALID_RESPONSE, "Message content is not text", self.name
            )

        logger.info(
            "openai_response",
            model=self.model,
            tokens_used=token_usage["total_tokens"],
            finish_reason=finish_reason,
        )

        return LLMResponse(
            content=content or "",
            model=data.get("model") or self.model,
            usage=token_usage,
            raw_response=data,
            finish_reason=finish_reason,
        )
