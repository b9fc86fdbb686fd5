# src/taskflow/ai/synthesizer.py

"""
AI task synthesizer: free-text prompt -> {title, description, priority}.

One completion request per call, no retries. A reply that is not a usable
JSON object never fails the call: it degrades to a fallback suggestion built
from the prompt. Only request-level failures (missing configuration,
network, auth) propagate, as NotConfigured / SynthesisUnavailable.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from ..core.ports import CompletionClient
from ..errors import ValidationError
from ..tasks.task_models import AISuggestion, TaskPriority

logger = logging.getLogger(__name__)

SYNTHESIS_SYSTEM_PROMPT = """
You are a helpful project management assistant.
Given a brief description of a task, generate a clear task title, a concise description, and an appropriate priority level.
Respond ONLY with a valid JSON object in this exact format (no markdown, no backticks):
{
  "title": "Short, action-oriented task title",
  "description": "Clear, one or two sentence description of what needs to be done and why.",
  "priority": "low" | "medium" | "high"
}
""".strip()

FALLBACK_DESCRIPTION = "Generated from AI prompt."
DEFAULT_FALLBACK_TITLE_CHARS = 80


def _extract_json_object(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("{") and raw.endswith("}"):
        return raw
    first = raw.find("{")
    last = raw.rfind("}")
    if first != -1 and last != -1 and last > first:
        return raw[first : last + 1]
    return raw


def _field(data: dict[str, Any], name: str) -> str | None:
    v = data.get(name)
    if not isinstance(v, str):
        return None
    v = v.strip()
    return v or None


def parse_suggestion(raw: str) -> AISuggestion | None:
    """
    Parse the model's text into a suggestion.

    Returns None when the text is not a JSON object or a field is missing or
    empty. An out-of-enum priority is coerced to medium.
    """
    if not raw or not raw.strip():
        return None
    try:
        data = json.loads(_extract_json_object(raw))
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    title = _field(data, "title")
    description = _field(data, "description")
    priority_raw = _field(data, "priority")
    if title is None or description is None or priority_raw is None:
        return None

    try:
        priority = TaskPriority(priority_raw.lower())
    except ValueError:
        logger.info("AI: priority %r outside low/medium/high, using medium", priority_raw)
        priority = TaskPriority.MEDIUM

    return AISuggestion(title=title, description=description, priority=priority)


def fallback_suggestion(prompt: str, *, title_chars: int = DEFAULT_FALLBACK_TITLE_CHARS) -> AISuggestion:
    return AISuggestion(
        title=prompt[:title_chars],
        description=FALLBACK_DESCRIPTION,
        priority=TaskPriority.MEDIUM,
    )


class TaskSynthesizer:
    def __init__(self, client: CompletionClient, settings: Any = None) -> None:
        self._client = client
        self._title_chars = int(
            getattr(settings, "ai_fallback_title_chars", DEFAULT_FALLBACK_TITLE_CHARS)
        )

    def synthesize(self, prompt: str) -> AISuggestion:
        """
        Turn a natural-language prompt into a task suggestion.

        Raises ValidationError for an empty prompt; NotConfigured /
        SynthesisUnavailable come from the completion client unchanged.
        """
        prompt = prompt or ""
        # The prompt is sent and sliced as given; stripping only decides emptiness.
        if not prompt.strip():
            raise ValidationError("prompt is required")

        raw = self._client.complete([{"role": "user", "content": prompt}], SYNTHESIS_SYSTEM_PROMPT)

        suggestion = parse_suggestion(raw)
        if suggestion is None:
            logger.warning("AI: unusable response, using fallback suggestion. Raw=%r", raw[:500])
            return fallback_suggestion(prompt, title_chars=self._title_chars)

        logger.debug("AI: suggestion title=%r priority=%s", suggestion.title, suggestion.priority.value)
        return suggestion

    async def synthesize_async(self, prompt: str) -> AISuggestion:
        """
        Awaitable variant; the request runs in a worker thread.

        Cancelling the awaiting task abandons the result. The synthesizer
        never touches the task store, so an abandoned call cannot change it.
        """
        return await asyncio.to_thread(self.synthesize, prompt)
