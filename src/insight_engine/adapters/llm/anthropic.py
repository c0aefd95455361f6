"""Anthropic LLM provider implementation."""

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


class AnthropicProvider(LLMProvider):
    """Anthropic API provider for Claude models."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = "https://api.anthropic.com/v1",
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model or settings.anthropic_model
        self.base_url = base_url
        self.timeout = timeout or settings.inference_timeout_seconds

        if not self.api_key:
            logger.warning("Anthropic API key not configured")

    @property
    def name(self) -> str:
        return f"anthropic:{self.model}"

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key or "",
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json",
        }

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate completion using Anthropic API."""
        if not self.api_key:
            raise ProviderError(
                ProviderErrorKind.AUTH, "Anthropic API key not configured", self.name
            )

        # Separate system message from conversation
        system_message = ""
        conversation_messages = []

        for msg in messages:
            if msg.role == "system":
                system_message = msg.content
            else:
                conversation_messages.append({"role": msg.role, "content": msg.content})

        if json_mode:
            json_instruction = "\n\nIMPORTANT: You must respond with valid JSON only. No other text."
            system_message = system_message + json_instruction if system_message else json_instruction

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": conversation_messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        if system_message:
            payload["system"] = system_message

        logger.debug(
            "anthropic_request",
            model=self.model,
            message_count=len(conversation_messages),
            json_mode=json_mode,
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/messages",
                    headers=self._headers(),
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise classify_http_error(e, self.name) from e

        try:
            content = "".join(
                block.get("text") or ""
                for block in data.get("content") or []
                if block.get("type") == "text"
            )
            usage = data.get("usage") or {}
            input_tokens = int(usage.get("input_tokens") or 0)
            output_tokens = int(usage.get("output_tokens") or 0)
        except (AttributeError, TypeError, ValueError) as e:
            raise ProviderError(
                ProviderErrorKind.INVALID_RESPONSE,
                f"Unexpected response shape: {e}",
                self.name,
            ) from e

        if not content:
            raise ProviderError(
                ProviderErrorKind.INVALID_RESPONSE, "Response contained no text blocks", self.name
            )

        logger.info(
            "anthropic_response",
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            stop_reason=data.get("stop_reason"),
        )

        return LLMResponse(
            content=content,
            model=data.get("model") or self.model,
            usage={
                "prompt_tokens": input_tokens,
                "completion_tokens": output_tokens,
                "total_tokens": input_tokens + output_tokens,
            },
            raw_response=data,
            finish_reason=data.get("stop_reason"),
        )
