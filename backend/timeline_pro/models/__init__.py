"""
Timeline Pro models.

Usage:
    from timeline_pro.models import Event, EventItem, MarkerItem, RenderItem
    from timeline_pro.models import TimelineDocument, LibraryEntry, Workspace
    from timeline_pro.models import EventSource, GenerateContentResult
"""

# --- Enums & utilities ---
from timeline_pro.models.enums import (
    EventSource,
    GenerationMode,
    normalize_header,
)

# --- Domain models ---
from timeline_pro.models.domain import (
    Event, EventCreate, coerce_importance, parse_event_date,
    EventItem, MarkerItem, RenderItem,
    TimelineDocument, LibraryEntry,
    CustomTokenSignIn, UserIdentity,
    DEFAULT_DESCRIPTION, DEFAULT_TITLE,
    Workspace, WorkspaceCreate, ZoomUpdate,
    GenerateRequest, ResearchRequest, SheetImportRequest,
)

# --- Result models ---
from timeline_pro.models.results import GeminiResult, GenerateContentResult

__all__ = [
    # Enums
    "EventSource", "GenerationMode", "normalize_header",
    # Domain
    "Event", "EventCreate", "coerce_importance", "parse_event_date",
    "EventItem", "MarkerItem", "RenderItem",
    "TimelineDocument", "LibraryEntry",
    "CustomTokenSignIn", "UserIdentity",
    "DEFAULT_DESCRIPTION", "DEFAULT_TITLE",
    "Workspace", "WorkspaceCreate", "ZoomUpdate",
    "GenerateRequest", "ResearchRequest", "SheetImportRequest",
    # Results
    "GeminiResult", "GenerateContentResult",
]
