"""Tests for LLM provider adapters."""

import json
from collections.abc import Callable

import httpx
import pytest

from insight_engine.adapters.llm import (
    AnthropicProvider,
    LLMMessage,
    OpenAIProvider,
    StubLLMProvider,
    get_llm_provider,
)
from insight_engine.adapters.llm.base import classify_http_error
from insight_engine.domain.enums import ProviderErrorKind
from insight_engine.exceptions import ProviderError

MESSAGES = [
    LLMMessage(role="system", content="You analyze videos."),
    LLMMessage(role="user", content="Title: Haunted house tour"),
]

_RealAsyncClient = httpx.AsyncClient


@pytest.fixture
def mock_http(monkeypatch: pytest.MonkeyPatch) -> Callable[..., list[httpx.Request]]:
    """Route every httpx.AsyncClient through a mock transport."""

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> list[httpx.Request]:
        seen: list[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        def factory(**kwargs):
            return _RealAsyncClient(transport=httpx.MockTransport(recording), **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", factory)
        return seen

    return install


class TestOpenAIProvider:
    """Tests for the OpenAI chat completions adapter."""

    @pytest.mark.asyncio
    async def test_complete_success(self, mock_http) -> None:
        """A well-formed response is returned with usage."""
        seen = mock_http(
            lambda request: httpx.Response(
                200,
                json={
                    "model": "gpt-4o-mini",
                    "choices": [{"message": {"content": '{"ok": true}'}, "finish_reason": "stop"}],
                    "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
                },
            )
        )
        provider = OpenAIProvider(api_key="sk-test")

        response = await provider.complete(MESSAGES, json_mode=True)

        assert response.content == '{"ok": true}'
        assert response.usage["total_tokens"] == 15
        body = json.loads(seen[0].content)
        assert body["response_format"] == {"type": "json_object"}
        assert seen[0].headers["Authorization"] == "Bearer sk-test"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status_code", "kind"),
        [
            (401, ProviderErrorKind.AUTH),
            (403, ProviderErrorKind.AUTH),
            (429, ProviderErrorKind.RATE_LIMITED),
            (504, ProviderErrorKind.TIMEOUT),
            (500, ProviderErrorKind.NETWORK),
            (503, ProviderErrorKind.NETWORK),
        ],
    )
    async def test_status_classification(self, mock_http, status_code: int, kind) -> None:
        """HTTP failures map to provider error kinds."""
        mock_http(lambda request: httpx.Response(status_code, text="nope"))
        provider = OpenAIProvider(api_key="sk-test")

        with pytest.raises(ProviderError) as exc_info:
            await provider.complete(MESSAGES)

        assert exc_info.value.kind == kind

    @pytest.mark.asyncio
    async def test_malformed_body(self, mock_http) -> None:
        """A body without choices is an invalid response."""
        mock_http(lambda request: httpx.Response(200, json={"unexpected": True}))

        with pytest.raises(ProviderError) as exc_info:
            await OpenAIProvider(api_key="sk-test").complete(MESSAGES)

        assert exc_info.value.kind == ProviderErrorKind.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_non_json_body(self, mock_http) -> None:
        """A non-JSON body is an invalid response."""
        mock_http(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(ProviderError) as exc_info:
            await OpenAIProvider(api_key="sk-test").complete(MESSAGES)

        assert exc_info.value.kind == ProviderErrorKind.INVALID_RESPONSE

    @pytest.mark.parametrize(
        "body",
        [
            {"choices": [{"message": {"content": "{}"}}], "usage": ["tokens"]},
            {"choices": [{"message": {"content": ["not", "text"]}}]},
            {"choices": ["not a choice"]},
            ["choices"],
        ],
    )
    @pytest.mark.asyncio
    async def test_malformed_shapes_are_invalid(self, mock_http, body) -> None:
        """Malformed 200 bodies raise invalid_response, never a bare TypeError."""
        mock_http(lambda request: httpx.Response(200, json=body))

        with pytest.raises(ProviderError) as exc_info:
            await OpenAIProvider(api_key="sk-test").complete(MESSAGES)

        assert exc_info.value.kind == ProviderErrorKind.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_null_usage_is_tolerated(self, mock_http) -> None:
        """A null usage block reads as zero tokens."""
        mock_http(
            lambda request: httpx.Response(
                200, json={"choices": [{"message": {"content": "{}"}}], "usage": None}
            )
        )

        response = await OpenAIProvider(api_key="sk-test").complete(MESSAGES)

        assert response.content == "{}"
        assert response.usage == {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    @pytest.mark.asyncio
    async def test_missing_key_is_auth_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without an API key no request is attempted."""
        from insight_engine.adapters.llm import openai as openai_module

        monkeypatch.setattr(openai_module.settings, "openai_api_key", None)

        with pytest.raises(ProviderError) as exc_info:
            await OpenAIProvider().complete(MESSAGES)

        assert exc_info.value.kind == ProviderErrorKind.AUTH
        assert not exc_info.value.transient


class TestAnthropicProvider:
    """Tests for the Anthropic messages adapter."""

    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self, mock_http) -> None:
        """Text blocks are concatenated; the system prompt is sent separately."""
        seen = mock_http(
            lambda request: httpx.Response(
                200,
                json={
                    "model": "claude-test",
                    "content": [{"type": "text", "text": '{"a": '}, {"type": "text", "text": "1}"}],
                    "usage": {"input_tokens": 3, "output_tokens": 4},
                    "stop_reason": "end_turn",
                },
            )
        )
        provider = AnthropicProvider(api_key="ak-test", model="claude-test")

        response = await provider.complete(MESSAGES, json_mode=True)

        assert response.content == '{"a": 1}'
        assert response.usage["total_tokens"] == 7
        body = json.loads(seen[0].content)
        assert body["system"].startswith("You analyze videos.")
        assert "valid JSON" in body["system"]
        assert body["messages"] == [{"role": "user", "content": "Title: Haunted house tour"}]
        assert seen[0].headers["x-api-key"] == "ak-test"

    @pytest.mark.asyncio
    async def test_empty_content_is_invalid(self, mock_http) -> None:
        """A response without text is an invalid response."""
        mock_http(lambda request: httpx.Response(200, json={"content": []}))

        with pytest.raises(ProviderError) as exc_info:
            await AnthropicProvider(api_key="ak-test").complete(MESSAGES)

        assert exc_info.value.kind == ProviderErrorKind.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_null_usage_is_tolerated(self, mock_http) -> None:
        """A null usage block reads as zero tokens."""
        mock_http(
            lambda request: httpx.Response(
                200, json={"content": [{"type": "text", "text": "{}"}], "usage": None}
            )
        )

        response = await AnthropicProvider(api_key="ak-test").complete(MESSAGES)

        assert response.content == "{}"
        assert response.usage["total_tokens"] == 0

    @pytest.mark.parametrize(
        "body",
        [
            {"content": ["plain string block"]},
            {"content": [{"type": "text", "text": 42}]},
            {"content": [{"type": "text", "text": "{}"}], "usage": "many"},
            [{"type": "text", "text": "{}"}],
        ],
    )
    @pytest.mark.asyncio
    async def test_malformed_shapes_are_invalid(self, mock_http, body) -> None:
        """Malformed 200 bodies raise invalid_response, never a bare AttributeError."""
        mock_http(lambda request: httpx.Response(200, json=body))

        with pytest.raises(ProviderError) as exc_info:
            await AnthropicProvider(api_key="ak-test").complete(MESSAGES)

        assert exc_info.value.kind == ProviderErrorKind.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_connection_error_is_network(self, mock_http) -> None:
        """Transport failures are transient network errors."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        mock_http(refuse)

        with pytest.raises(ProviderError) as exc_info:
            await AnthropicProvider(api_key="ak-test").complete(MESSAGES)

        assert exc_info.value.kind == ProviderErrorKind.NETWORK
        assert exc_info.value.transient


def test_classify_timeout() -> None:
    """httpx timeouts are classified as timeouts."""
    error = classify_http_error(httpx.ReadTimeout("slow"), "openai")

    assert error.kind == ProviderErrorKind.TIMEOUT
    assert error.provider == "openai"


def test_factory_selects_provider() -> None:
    """The factory maps names to implementations and rejects unknown names."""
    assert isinstance(get_llm_provider("stub"), StubLLMProvider)
    assert isinstance(get_llm_provider("OpenAI"), OpenAIProvider)
    assert isinstance(get_llm_provider("anthropic"), AnthropicProvider)

    with pytest.raises(ValueError):
        get_llm_provider("llama")


def test_factory_defaults_to_settings() -> None:
    """Without a name the configured provider is used."""
    assert isinstance(get_llm_provider(), StubLLMProvider)


@pytest.mark.asyncio
async def test_stub_returns_analysis_and_storyboard() -> None:
    """The stub answers both request kinds with parseable JSON."""
    provider = StubLLMProvider()

    analysis = json.loads((await provider.complete(MESSAGES)).content)
    storyboard = json.loads(
        (
            await provider.complete(
                [LLMMessage(role="system", content="You create a storyboard."), MESSAGES[1]]
            )
        ).content
    )

    assert analysis["themes"] == ["haunted", "house", "tour"]
    assert storyboard["title"] == "Storyboard for Haunted house tour"
    assert len(storyboard["scenes"]) == 5


@pytest.mark.asyncio
async def test_stub_returns_summary_text() -> None:
    """Report requests get plain text counting the listed videos."""
    response = await StubLLMProvider().complete(
        [
            LLMMessage(role="system", content="You are an analyst creating reports."),
            LLMMessage(role="user", content="Video 1: A\n- Channel: X\n\nVideo 2: B\n- Channel: Y"),
        ]
    )

    assert response.content.startswith("Overall trends: 2 videos analysed.")
