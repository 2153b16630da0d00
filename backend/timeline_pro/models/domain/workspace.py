"""Workspace (current editing session) domain models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from timeline_pro.models.domain.event import Event

DEFAULT_TITLE = "Timeline"
DEFAULT_DESCRIPTION = "Create a timeline and start generating!"


class Workspace(BaseModel):
    """The timeline a user is currently viewing and editing."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    title: str = DEFAULT_TITLE
    description: str = DEFAULT_DESCRIPTION
    events: list[Event] = Field(default_factory=list)
    zoom_level: int = Field(default=5, alias="zoomLevel", ge=1, le=10)
    topic: Optional[str] = None


class WorkspaceCreate(BaseModel):
    """Payload for starting a fresh timeline."""
    title: Optional[str] = None
    description: Optional[str] = None


class ZoomUpdate(BaseModel):
    """Payload for changing the zoom level."""
    model_config = ConfigDict(populate_by_name=True)

    zoom_level: int = Field(alias="zoomLevel", ge=1, le=10)


class GenerateRequest(BaseModel):
    """Payload for expanding the current timeline with AI events."""
    count: int = Field(default=5, ge=1, le=10)


class ResearchRequest(BaseModel):
    """Payload for researching a whole timeline on a topic."""
    topic: str = Field(min_length=1, max_length=500)


class SheetImportRequest(BaseModel):
    """Payload for importing events from a published spreadsheet."""
    url: str = Field(min_length=1)
