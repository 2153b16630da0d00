"""Saved timeline (library) domain models."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from timeline_pro.models.domain.event import Event


class TimelineDocument(BaseModel):
    """A timeline persisted to the user's library."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    title: str
    description: str = ""
    events: list[Event] = Field(default_factory=list)
    zoom_level: int = Field(default=5, alias="zoomLevel", ge=1, le=10)
    topic: Optional[str] = None
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="updatedAt",
    )


class LibraryEntry(BaseModel):
    """Listing projection of a saved timeline, without its events."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str = ""
    topic: Optional[str] = None
    event_count: int = Field(default=0, alias="eventCount")
    updated_at: datetime = Field(alias="updatedAt")
