"""Batched AI analysis, storyboard synthesis and summary reports for scraped videos.

Items are processed in batches of ``concurrency`` concurrent requests.
Each request is retried with exponential backoff on transient provider
failures, then on the fallback provider if one is configured; an item
whose retries run out simply has no analysis. An authentication failure
stops the run.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from insight_engine.adapters.llm.base import LLMMessage, LLMProvider
from insight_engine.config import settings
from insight_engine.domain.enums import ContentType, ProviderErrorKind, Sentiment
from insight_engine.domain.models import (
    AnalysisResult,
    ItemRecord,
    ResultEntry,
    Scene,
    Storyboard,
)
from insight_engine.exceptions import ProviderError
from insight_engine.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# Response schemas
# =============================================================================


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return "; ".join(str(v) for v in value)
    return str(value)


class AnalysisPayload(BaseModel):
    """Expected shape of an analysis response. Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    summary: str = Field(min_length=1)
    themes: list[str] = Field(default_factory=list)
    sentiment: Sentiment
    sentiment_score: float = Field(default=0.0, alias="sentimentScore")
    content_type: str | None = Field(default=None, alias="contentType")
    credibility_score: float = Field(default=0.5, alias="credibilityScore")
    key_topics: list[str] = Field(default_factory=list, alias="keyTopics")
    target_audience: str = Field(default="", alias="targetAudience")
    recommendations: str = ""

    @field_validator("sentiment", mode="before")
    @classmethod
    def _normalize_sentiment(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("target_audience", "recommendations", mode="before")
    @classmethod
    def _flatten_text(cls, value: Any) -> str:
        return _as_text(value)

    def to_result(self) -> AnalysisResult:
        themes: list[str] = []
        for theme in self.themes:
            tag = theme.strip().lower()
            if tag and tag not in themes:
                themes.append(tag)

        return AnalysisResult(
            summary=self.summary.strip(),
            themes=tuple(themes),
            sentiment=self.sentiment,
            sentiment_score=max(-1.0, min(1.0, self.sentiment_score)),
            content_type=ContentType.from_label(self.content_type),
            credibility_score=max(0.0, min(1.0, self.credibility_score)),
            recommendations=self.recommendations,
            key_topics=tuple(t.strip() for t in self.key_topics if t.strip()),
            target_audience=self.target_audience,
        )


class ScenePayload(BaseModel):
    """One storyboard scene in a model response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sequence_number: int = Field(alias="sequenceNumber")
    title: str = Field(default="", alias="sceneTitle")
    duration: str = ""
    narration_text: str = Field(alias="narrationText", min_length=1)
    visual_elements: list[str] = Field(default_factory=list, alias="visualElements")
    audio_cues: list[str] = Field(default_factory=list, alias="audioCues")
    transition_notes: str = Field(default="", alias="transitionNotes")

    @field_validator("duration", "transition_notes", mode="before")
    @classmethod
    def _flatten_text(cls, value: Any) -> str:
        return _as_text(value)


class StoryboardPayload(BaseModel):
    """Expected shape of a storyboard response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(min_length=1)
    scenes: list[ScenePayload] = Field(min_length=1)

    def to_storyboard(self) -> Storyboard:
        scenes = sorted(self.scenes, key=lambda s: s.sequence_number)
        return Storyboard(
            title=self.title.strip(),
            scenes=tuple(
                Scene(
                    sequence_number=s.sequence_number,
                    title=s.title,
                    duration=s.duration,
                    narration_text=s.narration_text,
                    visual_elements=tuple(s.visual_elements),
                    audio_cues=tuple(s.audio_cues),
                    transition_notes=s.transition_notes,
                )
                for s in scenes
            ),
        )


def extract_json_object(text: str) -> dict[str, Any]:
    """Pull the outermost JSON object out of free text (code fences, preambles)."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("no JSON object found in response")
    data = json.loads(text[start : end + 1])
    if not isinstance(data, dict):
        raise ValueError("response JSON is not an object")
    return data


# =============================================================================
# Prompts
# =============================================================================

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert content analyzer specializing in video content analysis. "
    "Provide detailed, structured analysis of video content including themes, "
    "sentiment, and key insights."
)

STORYBOARD_SYSTEM_PROMPT = (
    "You are a professional video storyboard creator. Generate detailed storyboard "
    "sequences for video narration based on the content analysis provided."
)


def build_analysis_prompt(item: ItemRecord) -> str:
    return f"""Analyze the following YouTube video content and provide a structured analysis:

Title: {item.title}
Channel: {item.channel_name}
Duration: {item.duration}
Views: {item.view_count}
Upload Date: {item.upload_date}
Description: {item.description or "No description available"}

Please provide analysis in the following JSON format:
{{
    "summary": "Brief summary of the video content",
    "themes": ["theme1", "theme2", "theme3"],
    "sentiment": "positive|negative|neutral",
    "sentimentScore": 0.0,
    "keyTopics": ["topic1", "topic2", "topic3"],
    "contentType": "{"|".join(c.value for c in ContentType)}",
    "targetAudience": "description of target audience",
    "credibilityScore": 0.0,
    "recommendations": "recommendations for similar content"
}}

sentimentScore is between -1 and 1; credibilityScore is between 0 and 1.
Provide only valid JSON response."""


def build_storyboard_prompt(item: ItemRecord, analysis: AnalysisResult) -> str:
    key_topics = ", ".join(analysis.key_topics) or "No key topics available"
    return f"""Create a detailed storyboard for video narration based on the following video and analysis:

Video Data:
- Title: {item.title}
- Channel: {item.channel_name}
- Duration: {item.duration}
- Description: {item.description or "No description"}

Analysis Data:
- Summary: {analysis.summary}
- Content Type: {analysis.content_type.value}
- Key Topics: {key_topics}
- Themes: {", ".join(analysis.themes) or "None"}

Create a storyboard with 5-8 scenes in the following JSON format:
{{
    "title": "Storyboard for [Video Title]",
    "scenes": [
        {{
            "sequenceNumber": 1,
            "sceneTitle": "Scene title",
            "duration": "30 seconds",
            "narrationText": "Detailed narration script for this scene",
            "visualElements": ["visual1", "visual2", "visual3"],
            "audioCues": ["audio1", "audio2"],
            "transitionNotes": "How to transition to next scene"
        }}
    ]
}}

Focus on creating engaging narration that would work well for {analysis.content_type.value} content.
Provide only valid JSON response."""


SUMMARY_SYSTEM_PROMPT = (
    "You are a professional content analyst creating comprehensive reports "
    "from video analysis data."
)


def build_summary_prompt(entries: list[ResultEntry]) -> str:
    blocks = []
    for index, entry in enumerate(entries, start=1):
        analysis = entry.analysis
        blocks.append(
            f"""Video {index}: {entry.item.title}
- Channel: {entry.item.channel_name}
- Views: {entry.item.view_count}
- Themes: {", ".join(analysis.themes) if analysis and analysis.themes else "N/A"}
- Sentiment: {analysis.sentiment.value if analysis else "N/A"}
- Content Type: {analysis.content_type.value if analysis else "N/A"}"""
        )
    summaries = "\n\n".join(blocks)
    return f"""Create a comprehensive analysis report based on the following video data:

{summaries}

Generate a detailed report covering:
1. Overall trends and patterns
2. Content themes analysis
3. Audience engagement insights
4. Sentiment analysis summary
5. Recommendations for content creators
6. Market insights and opportunities

Make the report professional, detailed, and actionable."""


# =============================================================================
# Batcher
# =============================================================================


class AnalysisBatcher:
    """Runs analysis (and optional storyboard) requests for a list of items.

    When a ``fallback`` provider is given, a request whose retries on the
    primary provider run out gets the same retry budget on the fallback.
    """

    def __init__(
        self,
        provider: LLMProvider,
        fallback: LLMProvider | None = None,
        backoff_base_seconds: float | None = None,
        backoff_max_seconds: float | None = None,
        batch_delay_seconds: float | None = None,
        inference_timeout_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.fallback = fallback
        self.backoff_base = (
            settings.analysis_backoff_base_seconds
            if backoff_base_seconds is None
            else backoff_base_seconds
        )
        self.backoff_max = (
            settings.analysis_backoff_max_seconds
            if backoff_max_seconds is None
            else backoff_max_seconds
        )
        self.batch_delay = (
            settings.analysis_batch_delay_seconds
            if batch_delay_seconds is None
            else batch_delay_seconds
        )
        self.inference_timeout = inference_timeout_seconds or settings.inference_timeout_seconds
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retrying after the given zero-based attempt."""
        return min(self.backoff_base * (2**attempt), self.backoff_max)

    def _providers(self) -> list[LLMProvider]:
        if self.fallback is None or self.fallback.name == self.provider.name:
            return [self.provider]
        return [self.provider, self.fallback]

    async def analyze(
        self,
        items: list[ItemRecord],
        concurrency: int | None = None,
        max_retries: int | None = None,
        want_storyboard: bool = True,
    ) -> list[ResultEntry]:
        """Analyze items in bounded concurrent batches.

        Args:
            items: Scraped records to analyze
            concurrency: Batch size, i.e. max in-flight requests
            max_retries: Retries per request on transient failures
            want_storyboard: Also synthesize a storyboard for analysed items

        Returns:
            One ResultEntry per input item, in input order. Failed items
            carry no analysis.

        Raises:
            ProviderError: only for non-transient (auth) failures
        """
        concurrency = max(1, concurrency or settings.analysis_concurrency)
        max_retries = settings.analysis_max_retries if max_retries is None else max_retries
        abort = asyncio.Event()
        entries: list[ResultEntry] = []

        logger.info(
            "analysis_started",
            provider=self.provider.name,
            fallback=self.fallback.name if self.fallback else None,
            items=len(items),
            concurrency=concurrency,
            max_retries=max_retries,
            want_storyboard=want_storyboard,
        )

        for start in range(0, len(items), concurrency):
            batch = items[start : start + concurrency]
            outcomes = await asyncio.gather(
                *(self._process_item(item, max_retries, want_storyboard, abort) for item in batch),
                return_exceptions=True,
            )

            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    logger.error("analysis_aborted", error=str(outcome))
                    raise outcome
                entries.append(outcome)

            if start + concurrency < len(items) and self.batch_delay > 0:
                await self._sleep(self.batch_delay)

        logger.info(
            "analysis_completed",
            items=len(entries),
            analyzed=sum(1 for e in entries if e.analysis),
            storyboards=sum(1 for e in entries if e.storyboard),
        )
        return entries

    async def summarize(
        self, entries: list[ResultEntry], max_retries: int | None = None
    ) -> str | None:
        """Overall report text for the analysed entries.

        Never raises: a summary that cannot be produced is None, so the
        task still completes with its per-item results.
        """
        if not any(e.analysis for e in entries):
            logger.info("summary_skipped", reason="no_analyses")
            return None

        max_retries = settings.analysis_max_retries if max_retries is None else max_retries
        prompt = build_summary_prompt(entries)
        try:
            summary = await self._with_retries(
                "report",
                "summary",
                lambda provider: self._request_summary(provider, prompt),
                max_retries,
                asyncio.Event(),
            )
        except ProviderError as e:
            logger.warning("summary_failed", error=str(e), error_kind=e.kind.value)
            return None

        if summary is not None:
            logger.info("summary_completed", length=len(summary))
        return summary

    async def _process_item(
        self,
        item: ItemRecord,
        max_retries: int,
        want_storyboard: bool,
        abort: asyncio.Event,
    ) -> ResultEntry:
        analysis = await self._with_retries(
            item.external_id,
            "analysis",
            lambda provider: self._request_analysis(provider, item),
            max_retries,
            abort,
        )
        storyboard = None
        if analysis is not None and want_storyboard:
            storyboard = await self._with_retries(
                item.external_id,
                "storyboard",
                lambda provider: self._request_storyboard(provider, item, analysis),
                max_retries,
                abort,
            )
        return ResultEntry(item=item, analysis=analysis, storyboard=storyboard)

    async def _with_retries(
        self,
        item_id: str,
        stage: str,
        call: Callable[[LLMProvider], Awaitable[T]],
        max_retries: int,
        abort: asyncio.Event,
    ) -> T | None:
        for provider in self._providers():
            if provider is not self.provider:
                logger.info("analysis_fallback", stage=stage, item_id=item_id, provider=provider.name)
            result = await self._attempts(provider, item_id, stage, call, max_retries, abort)
            if result is not None or abort.is_set():
                return result
        return None

    async def _attempts(
        self,
        provider: LLMProvider,
        item_id: str,
        stage: str,
        call: Callable[[LLMProvider], Awaitable[T]],
        max_retries: int,
        abort: asyncio.Event,
    ) -> T | None:
        for attempt in range(max_retries + 1):
            if abort.is_set():
                return None
            try:
                return await call(provider)
            except ProviderError as e:
                if not e.transient:
                    abort.set()
                    raise
                if attempt >= max_retries:
                    logger.warning(
                        "analysis_item_failed",
                        stage=stage,
                        item_id=item_id,
                        provider=provider.name,
                        attempts=attempt + 1,
                        error=str(e),
                    )
                    return None
                delay = self.backoff_delay(attempt)
                logger.info(
                    "analysis_retry",
                    stage=stage,
                    item_id=item_id,
                    provider=provider.name,
                    attempt=attempt + 1,
                    delay=delay,
                    error_kind=e.kind.value,
                )
                await self._sleep(delay)
        return None

    async def _complete(
        self,
        provider: LLMProvider,
        system: str,
        prompt: str,
        temperature: float,
        json_mode: bool = True,
    ) -> str:
        messages = [
            LLMMessage(role="system", content=system),
            LLMMessage(role="user", content=prompt),
        ]
        try:
            response = await asyncio.wait_for(
                provider.complete(
                    messages=messages,
                    temperature=temperature,
                    max_tokens=settings.analysis_max_tokens,
                    json_mode=json_mode,
                ),
                timeout=self.inference_timeout,
            )
        except TimeoutError as e:
            raise ProviderError(
                ProviderErrorKind.TIMEOUT,
                f"no response within {self.inference_timeout}s",
                provider.name,
            ) from e
        return response.content

    async def _infer(
        self, provider: LLMProvider, system: str, prompt: str, temperature: float
    ) -> dict[str, Any]:
        content = await self._complete(provider, system, prompt, temperature)
        try:
            return extract_json_object(content)
        except ValueError as e:
            raise ProviderError(
                ProviderErrorKind.INVALID_RESPONSE, f"unparseable JSON: {e}", provider.name
            ) from e

    async def _request_analysis(self, provider: LLMProvider, item: ItemRecord) -> AnalysisResult:
        data = await self._infer(
            provider,
            ANALYSIS_SYSTEM_PROMPT,
            build_analysis_prompt(item),
            settings.analysis_temperature,
        )
        try:
            return AnalysisPayload.model_validate(data).to_result()
        except ValidationError as e:
            raise ProviderError(
                ProviderErrorKind.INVALID_RESPONSE,
                f"analysis failed validation: {e.error_count()} errors",
                provider.name,
            ) from e

    async def _request_storyboard(
        self, provider: LLMProvider, item: ItemRecord, analysis: AnalysisResult
    ) -> Storyboard:
        data = await self._infer(
            provider,
            STORYBOARD_SYSTEM_PROMPT,
            build_storyboard_prompt(item, analysis),
            settings.storyboard_temperature,
        )
        try:
            return StoryboardPayload.model_validate(data).to_storyboard()
        except ValidationError as e:
            raise ProviderError(
                ProviderErrorKind.INVALID_RESPONSE,
                f"storyboard failed validation: {e.error_count()} errors",
                provider.name,
            ) from e

    async def _request_summary(self, provider: LLMProvider, prompt: str) -> str:
        content = await self._complete(
            provider, SUMMARY_SYSTEM_PROMPT, prompt, settings.summary_temperature, json_mode=False
        )
        summary = content.strip()
        if not summary:
            raise ProviderError(
                ProviderErrorKind.INVALID_RESPONSE, "empty summary report", provider.name
            )
        return summary
