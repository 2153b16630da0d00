"""Event domain model."""

import datetime as dt
import re
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from timeline_pro.models.enums import EventSource


_YEAR_MONTH_PATTERN = re.compile(r"^(\d{1,4})-(\d{1,2})$")
_YEAR_PATTERN = re.compile(r"^\d{1,4}$")
_US_DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{1,4})$")


def parse_event_date(raw: Any) -> Optional[dt.date]:
    """
    Parse a loosely formatted calendar date, or return None.

    Accepts ``YYYY-MM-DD`` (optionally followed by a time), ``YYYY-MM``,
    ``YYYY`` and ``M/D/YYYY``.
    """
    if isinstance(raw, dt.datetime):
        return raw.date()
    if isinstance(raw, dt.date):
        return raw
    text = str(raw or "").strip()
    if not text:
        return None
    try:
        if _YEAR_PATTERN.match(text):
            return dt.date(int(text), 1, 1)
        match = _YEAR_MONTH_PATTERN.match(text)
        if match:
            return dt.date(int(match.group(1)), int(match.group(2)), 1)
        match = _US_DATE_PATTERN.match(text)
        if match:
            return dt.date(int(match.group(3)), int(match.group(1)), int(match.group(2)))
        return dt.date.fromisoformat(text[:10])
    except ValueError:
        return None


def coerce_importance(value: Any) -> int:
    """Best-effort integer importance; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return 0


class EventCreate(BaseModel):
    """Payload for manually adding an event to the workspace."""
    model_config = ConfigDict(populate_by_name=True)

    date: dt.date
    title: str = Field(min_length=1)
    description: str = ""
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    raw_importance: int = Field(default=50, alias="rawImportance", ge=1, le=100)


class Event(BaseModel):
    """A single historical record on a timeline."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    date: dt.date
    title: str
    description: str = ""
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    raw_importance: int = Field(default=0, alias="rawImportance")
    display_tier: Optional[int] = Field(default=None, alias="displayTier", ge=1, le=10)
    source: EventSource = EventSource.USER
    extra: dict[str, str] = Field(
        default_factory=dict,
        description="Spreadsheet columns with no dedicated field.",
    )

    @field_validator("raw_importance", mode="before")
    @classmethod
    def _default_importance(cls, value: Any) -> int:
        return coerce_importance(value)

    @property
    def year(self) -> int:
        return self.date.year
