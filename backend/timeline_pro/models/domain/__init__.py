"""Domain models: events, render items, saved timelines, identities and workspaces."""

from timeline_pro.models.domain.event import Event, EventCreate, coerce_importance, parse_event_date
from timeline_pro.models.domain.layout import EventItem, MarkerItem, RenderItem
from timeline_pro.models.domain.timeline import TimelineDocument, LibraryEntry
from timeline_pro.models.domain.identity import CustomTokenSignIn, UserIdentity
from timeline_pro.models.domain.workspace import (
    DEFAULT_DESCRIPTION,
    DEFAULT_TITLE,
    Workspace,
    WorkspaceCreate,
    ZoomUpdate,
    GenerateRequest,
    ResearchRequest,
    SheetImportRequest,
)

__all__ = [
    "Event", "EventCreate", "coerce_importance", "parse_event_date",
    "EventItem", "MarkerItem", "RenderItem",
    "TimelineDocument", "LibraryEntry",
    "CustomTokenSignIn", "UserIdentity",
    "DEFAULT_DESCRIPTION", "DEFAULT_TITLE",
    "Workspace", "WorkspaceCreate", "ZoomUpdate",
    "GenerateRequest", "ResearchRequest", "SheetImportRequest",
]
