"""Stub LLM provider for testing."""

import json
import re

from insight_engine.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from insight_engine.logging import get_logger

logger = get_logger(__name__)

_STOPWORDS = {"the", "a", "an", "and", "of", "in", "on", "to", "for", "with", "from", "is"}


class StubLLMProvider(LLMProvider):
    """Stub provider that returns mock analysis, storyboard and summary responses."""

    @property
    def name(self) -> str:
        return "stub"

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,  # noqa: ARG002
        max_tokens: int = 4096,  # noqa: ARG002
        json_mode: bool = False,
    ) -> LLMResponse:
        """Return a mock completion response."""
        logger.info(
            "stub_llm_complete",
            message_count=len(messages),
            json_mode=json_mode,
        )

        system_message = ""
        user_message = ""
        for msg in messages:
            if msg.role == "system":
                system_message = msg.content
            elif msg.role == "user":
                user_message = msg.content

        title_match = re.search(r"Title:\s*(.+)", user_message)
        title = title_match.group(1).strip() if title_match else "Untitled"

        if "report" in system_message.lower():
            count = len(re.findall(r"^Video \d+:", user_message, re.MULTILINE))
            content = (
                f"Overall trends: {count} videos analysed. "
                "Recurring themes suggest steady audience interest in this topic."
            )
        elif "storyboard" in system_message.lower():
            content = json.dumps(
                {
                    "title": f"Storyboard for {title}",
                    "scenes": [
                        {
                            "sequenceNumber": i + 1,
                            "sceneTitle": ["Hook", "Context", "Evidence", "Reflection", "Outro"][i],
                            "duration": "30 seconds",
                            "narrationText": f"Scene {i + 1} narration about {title}.",
                            "visualElements": ["Title card", "B-roll footage"],
                            "audioCues": ["Ambient music"],
                            "transitionNotes": "Cross-fade",
                        }
                        for i in range(5)
                    ],
                },
                indent=2,
            )
        else:
            words = [w.lower() for w in re.findall(r"[A-Za-z]+", title)]
            themes = [w for w in words if w not in _STOPWORDS][:3] or ["general"]
            content = json.dumps(
                {
                    "summary": f"A video titled '{title}'.",
                    "themes": themes,
                    "sentiment": "neutral",
                    "sentimentScore": 0.0,
                    "keyTopics": themes,
                    "contentType": "entertainment",
                    "targetAudience": "general",
                    "credibilityScore": 0.5,
                    "recommendations": f"Explore more content like '{title}'.",
                },
                indent=2,
            )

        return LLMResponse(
            content=content,
            model="stub-model",
            usage={
                "prompt_tokens": len(user_message.split()),
                "completion_tokens": len(content.split()),
                "total_tokens": len(user_message.split()) + len(content.split()),
            },
            finish_reason="stop",
        )
