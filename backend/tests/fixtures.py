"""Builders shared by the test modules."""

import datetime as dt
import json
from itertools import count

from timeline_pro.models import Event

_ids = count(1)


def make_event(
    year: int,
    importance: int = 50,
    *,
    month: int = 1,
    day: int = 1,
    title: str | None = None,
    tier: int | None = None,
) -> Event:
    n = next(_ids)
    return Event(
        id=f"evt-{n}",
        date=dt.date(year, month, day),
        title=title or f"Event {n}",
        raw_importance=importance,
        display_tier=tier,
    )


def gemini_payload(events: list[dict]) -> dict:
    """A generateContent response whose candidate text is ``{"events": events}``."""
    return {
        "candidates": [
            {"content": {"parts": [{"text": json.dumps({"events": events})}]}}
        ],
        "usageMetadata": {
            "promptTokenCount": 12,
            "candidatesTokenCount": 34,
            "totalTokenCount": 46,
        },
        "modelVersion": "gemini-test",
    }


SAMPLE_CSV = (
    "Date,Title,Description,Importance,Image,Region\n"
    '1969-07-20,Moon landing,"Apollo 11, first crewed landing",95,File:Aldrin Apollo 11.jpg,Space\n'
    "\n"
    "1989-11-09,Fall of the Berlin Wall,,80,,Europe\n"
    "not a date,Bad row,,10,,\n"
    "2001-01-01,,Missing title,10,,\n"
)
