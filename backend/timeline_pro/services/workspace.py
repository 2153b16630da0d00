"""
Workspace service: the timeline each user is currently editing.

Every mutation that changes the event set re-ranks the whole collection.
Imports and AI calls take a request ticket when they start; a result whose
ticket has been superseded by a newer replacing request is discarded.
"""

from collections import OrderedDict
from dataclasses import dataclass
import itertools

from timeline_pro.config import settings
from timeline_pro.core import build_layout, normalize, visible_events
from timeline_pro.errors import StaleRequestError
from timeline_pro.logging import get_logger
from timeline_pro.models import (
    DEFAULT_DESCRIPTION,
    DEFAULT_TITLE,
    Event,
    EventCreate,
    EventSource,
    RenderItem,
    TimelineDocument,
    Workspace,
    WorkspaceCreate,
)
from timeline_pro.services.generation import GenerationService
from timeline_pro.services.library import LibraryService
from timeline_pro.services.sheets import SheetImportService

logger = get_logger('services.workspace')


@dataclass
class _Session:
    workspace: Workspace
    generation: int = 0


class WorkspaceService:
    """In-memory per-user editing state and its mutation entry points."""

    def __init__(
        self,
        generation: GenerationService,
        sheets: SheetImportService,
        library: LibraryService,
        max_sessions: int | None = None,
    ):
        self.generation = generation
        self.sheets = sheets
        self.library = library
        self.max_sessions = max_sessions or settings.MAX_WORKSPACE_SESSIONS
        # Least recently used first
        self._sessions: OrderedDict[str, _Session] = OrderedDict()
        # Unique across sessions, including evicted ones
        self._tickets = itertools.count(1)

    def _session(self, user_id: str) -> _Session:
        session = self._sessions.get(user_id)
        if session is not None:
            self._sessions.move_to_end(user_id)
            return session

        session = _Session(Workspace(user_id=user_id, zoom_level=settings.DEFAULT_ZOOM_LEVEL))
        self._sessions[user_id] = session
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted idle workspace of {evicted[:8]}")
        return session

    def session_count(self) -> int:
        return len(self._sessions)

    def _update(self, user_id: str, **changes) -> Workspace:
        session = self._session(user_id)
        session.workspace = session.workspace.model_copy(update=changes)
        return session.workspace

    def _begin_request(self, user_id: str) -> int:
        session = self._session(user_id)
        session.generation = next(self._tickets)
        return session.generation

    def _ensure_current(self, user_id: str, ticket: int, action: str) -> None:
        if self._session(user_id).generation != ticket:
            logger.info(f"Discarding superseded {action} result for {user_id[:8]}")
            raise StaleRequestError("A newer request replaced this one.")

    # ── State ──

    def get_workspace(self, user_id: str) -> Workspace:
        return self._session(user_id).workspace

    def create_new(self, user_id: str, data: WorkspaceCreate) -> Workspace:
        self._begin_request(user_id)
        return self._update(
            user_id,
            title=data.title or DEFAULT_TITLE,
            description=data.description or DEFAULT_DESCRIPTION,
            events=[],
            topic=None,
        )

    def set_zoom(self, user_id: str, zoom_level: int) -> Workspace:
        if not 1 <= zoom_level <= 10:
            raise ValueError("zoom_level must be between 1 and 10")
        return self._update(user_id, zoom_level=zoom_level)

    def layout(self, user_id: str, zoom_level: int | None = None) -> list[RenderItem]:
        workspace = self.get_workspace(user_id)
        level = zoom_level if zoom_level is not None else workspace.zoom_level
        return build_layout(visible_events(workspace.events, level))

    # ── Event set mutations ──

    def add_event(self, user_id: str, data: EventCreate) -> Workspace:
        event = Event(
            date=data.date,
            title=data.title,
            description=data.description,
            image_url=data.image_url,
            raw_importance=data.raw_importance,
            source=EventSource.USER,
        )
        events = self.get_workspace(user_id).events + [event]
        return self._update(user_id, events=normalize(events))

    def remove_event(self, user_id: str, event_id: str) -> Workspace:
        """
        Remove one event and re-rank the rest.

        :raises LookupError: If no event has ``event_id``
        """
        current = self.get_workspace(user_id).events
        remaining = [e for e in current if e.id != event_id]
        if len(remaining) == len(current):
            raise LookupError("Event not found")
        return self._update(user_id, events=normalize(remaining))

    async def expand_with_ai(self, user_id: str, count: int) -> Workspace:
        workspace = self.get_workspace(user_id)
        ticket = self._begin_request(user_id)
        generated = await self.generation.generate_events(
            title=workspace.title,
            description=workspace.description,
            existing_titles=[e.title for e in workspace.events],
            count=count,
        )
        self._ensure_current(user_id, ticket, "generation")
        merged = self.get_workspace(user_id).events + generated
        return self._update(user_id, events=normalize(merged))

    async def research(self, user_id: str, topic: str) -> Workspace:
        ticket = self._begin_request(user_id)
        generated = await self.generation.research_timeline(topic)
        self._ensure_current(user_id, ticket, "research")
        return self._update(user_id, events=normalize(generated), topic=topic.strip())

    async def import_sheet(self, user_id: str, url: str) -> Workspace:
        ticket = self._begin_request(user_id)
        imported = await self.sheets.import_events(url)
        self._ensure_current(user_id, ticket, "sheet import")
        return self._update(user_id, events=normalize(imported))

    # ── Library ──

    async def save_to_library(self, user_id: str) -> TimelineDocument:
        """
        Persist the workspace as a new library document.

        :raises ValueError: If the workspace has no events
        """
        workspace = self.get_workspace(user_id)
        if not workspace.events:
            raise ValueError("Cannot save an empty timeline")
        return await self.library.save_timeline(
            user_id=user_id,
            title=workspace.title,
            description=workspace.description,
            events=workspace.events,
            zoom_level=workspace.zoom_level,
            topic=workspace.topic,
        )

    async def load_from_library(self, user_id: str, doc_id: str) -> Workspace:
        """
        Replace the workspace with a saved document, trusting its stored tiers.

        :raises LookupError: If the document does not exist
        :raises StaleRequestError: If a newer replacing request started meanwhile
        """
        ticket = self._begin_request(user_id)
        document = await self.library.get_timeline(user_id, doc_id)
        if document is None:
            raise LookupError("Timeline not found")
        self._ensure_current(user_id, ticket, "library load")
        return self._update(
            user_id,
            title=document.title,
            description=document.description,
            events=document.events,
            zoom_level=document.zoom_level,
            topic=document.topic,
        )
