"""AI event generation: prompt, call Gemini, and extract events."""

import json
import time
from typing import Any

from timeline_pro.config import settings
from timeline_pro.errors import GenerationError
from timeline_pro.logging import get_logger
from timeline_pro.models import (
    Event,
    EventSource,
    GenerationMode,
    coerce_importance,
    parse_event_date,
)
from timeline_pro.services.gemini import GeminiService
from timeline_pro.services.images import optimize_image_url
from timeline_pro.services.prompts import build_expand_prompt, build_research_prompt

logger = get_logger('services.generation')

MIN_EXPAND_COUNT = 1
MAX_EXPAND_COUNT = 10

IMPORTANCE_KEYS = ("absImp", "importance", "rawImportance", "abs_importance")
IMAGE_KEYS = ("imageurl", "imageUrl", "image_url", "image")
DEFAULT_IMPORTANCE = {
    GenerationMode.EXPAND: 50,
    GenerationMode.RESEARCH: 1,
}

NOT_CONFIGURED_MESSAGE = "AI generation is not configured."
FAILED_MESSAGE = "AI generation failed."


def _strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def _first_present(item: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if item.get(key) not in (None, ""):
            return item[key]
    return None


def parse_generated_events(raw_response: str, mode: GenerationMode) -> list[Event]:
    """
    Extract events from a model JSON response.

    Items lacking a title or a parseable date are dropped. Importance that is
    missing or not numeric falls back to the mode default.

    :raises ValueError: If the response is not a JSON object with an events list
    """
    try:
        data = json.loads(_strip_code_fence(raw_response))
    except json.JSONDecodeError as e:
        raise ValueError(f"LLM returned invalid JSON: {e}")

    items = data.get("events") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError("LLM response has no events list")

    stamp = int(time.time() * 1000)
    fallback = DEFAULT_IMPORTANCE[mode]
    events: list[Event] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        title = str(item.get("title") or "").strip()
        event_date = parse_event_date(item.get("date"))
        if not title or event_date is None:
            logger.debug(f"Skipping generated item {index}: missing title or invalid date")
            continue

        importance = coerce_importance(_first_present(item, IMPORTANCE_KEYS)) or fallback
        events.append(Event(
            id=f"ai-{index}-{stamp}",
            date=event_date,
            title=title,
            description=str(item.get("description") or ""),
            image_url=optimize_image_url(_first_present(item, IMAGE_KEYS)) or None,
            raw_importance=importance,
            source=EventSource.AI,
        ))
    return events


class GenerationService:
    """Builds research prompts and turns model output into events."""

    def __init__(self, gemini: GeminiService):
        self.gemini = gemini

    async def _generate(self, prompt: str, mode: GenerationMode) -> list[Event]:
        if not self.gemini.is_available:
            raise GenerationError(NOT_CONFIGURED_MESSAGE)

        result = await self.gemini.generate_json(prompt)
        if not result.success or result.text is None:
            raise GenerationError(FAILED_MESSAGE)

        try:
            events = parse_generated_events(result.text, mode)
        except ValueError as e:
            logger.error(f"Could not parse {mode.value} generation output: {e}")
            raise GenerationError(FAILED_MESSAGE) from e

        logger.info(f"Generated {len(events)} events ({mode.value})")
        return events

    async def generate_events(
        self,
        title: str,
        description: str,
        existing_titles: list[str],
        count: int,
    ) -> list[Event]:
        """
        Ask for ``count`` new events that extend an existing timeline.

        :raises ValueError: If ``count`` is outside 1-10
        :raises GenerationError: If the call fails or returns unusable output
        """
        if not MIN_EXPAND_COUNT <= count <= MAX_EXPAND_COUNT:
            raise ValueError(f"count must be between {MIN_EXPAND_COUNT} and {MAX_EXPAND_COUNT}")
        prompt = build_expand_prompt(title, description, existing_titles, count)
        return await self._generate(prompt, GenerationMode.EXPAND)

    async def research_timeline(self, topic: str, count: int | None = None) -> list[Event]:
        """Ask for a comprehensive timeline on ``topic``."""
        topic = topic.strip()
        if not topic:
            raise ValueError("topic must not be empty")
        prompt = build_research_prompt(topic, count or settings.RESEARCH_EVENT_COUNT)
        return await self._generate(prompt, GenerationMode.RESEARCH)
