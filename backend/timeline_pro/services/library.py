"""
Library service: per-user timeline documents with live snapshot subscriptions.

Documents are keyed by tenant, user and a ``<slug>-<epoch millis>`` id.
Saved events keep their display tiers; loading never re-ranks them.
"""

import asyncio
import json
import re
import time
from datetime import datetime, timezone
from typing import Optional

import aiosqlite

from timeline_pro.database.db import connect
from timeline_pro.logging import get_logger
from timeline_pro.models import Event, LibraryEntry, TimelineDocument

logger = get_logger('services.library')

SLUG_MAX_LENGTH = 40


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def slugify(title: str) -> str:
    return re.sub(r"\s+", "-", title.strip().lower())[:SLUG_MAX_LENGTH]


def make_document_id(title: str, millis: int | None = None) -> str:
    stamp = millis if millis is not None else int(time.time() * 1000)
    return f"{slugify(title)}-{stamp}"


def _dump_events(events: list[Event]) -> str:
    return json.dumps([e.model_dump(mode="json", by_alias=True) for e in events])


def _load_events(raw: str | None) -> list[Event]:
    if not raw:
        return []
    return [Event.model_validate(item) for item in json.loads(raw)]


def _row_to_document(row: dict) -> TimelineDocument:
    return TimelineDocument(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        description=row.get("description") or "",
        events=_load_events(row.get("events")),
        zoom_level=row["zoom_level"],
        topic=row.get("topic"),
        updated_at=row["updated_at"],
    )


def _row_to_entry(row: dict) -> LibraryEntry:
    return LibraryEntry(
        id=row["id"],
        title=row["title"],
        description=row.get("description") or "",
        topic=row.get("topic"),
        event_count=row["event_count"],
        updated_at=row["updated_at"],
    )


class LibrarySubscription:
    """
    A live feed of full library snapshots for one user.

    Iterate with ``async for``; the first snapshot is the library at the time
    of subscribing. ``cancel()`` detaches the feed and ends iteration.
    """

    def __init__(self, user_id: str, service: "LibraryService"):
        self.user_id = user_id
        self._service = service
        self._queue: asyncio.Queue[Optional[list[LibraryEntry]]] = asyncio.Queue()
        self.cancelled = False

    def push(self, snapshot: list[LibraryEntry]) -> None:
        if not self.cancelled:
            self._queue.put_nowait(snapshot)

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._service._detach(self)
        self._queue.put_nowait(None)

    def __aiter__(self) -> "LibrarySubscription":
        return self

    async def __anext__(self) -> list[LibraryEntry]:
        snapshot = await self._queue.get()
        if snapshot is None:
            raise StopAsyncIteration
        return snapshot


class LibraryService:
    """Persistence for saved timelines."""

    def __init__(self, db_path: str, tenant_id: str):
        self.db_path = db_path
        self.tenant_id = tenant_id
        self._subscriptions: dict[str, set[LibrarySubscription]] = {}

    async def _get_db(self) -> aiosqlite.Connection:
        return await connect(self.db_path)

    # ── Documents ──

    async def save_timeline(
        self,
        user_id: str,
        title: str,
        description: str,
        events: list[Event],
        zoom_level: int = 5,
        topic: str | None = None,
    ) -> TimelineDocument:
        document = TimelineDocument(
            id=make_document_id(title),
            user_id=user_id,
            title=title,
            description=description,
            events=events,
            zoom_level=zoom_level,
            topic=topic,
            updated_at=_now(),
        )

        db = await self._get_db()
        try:
            await db.execute(
                """INSERT OR REPLACE INTO timelines
                   (tenant_id, user_id, id, title, description, events, zoom_level, topic, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (self.tenant_id, user_id, document.id, document.title, document.description,
                 _dump_events(document.events), document.zoom_level, document.topic,
                 document.updated_at.isoformat()),
            )
            await db.commit()
        finally:
            await db.close()

        logger.info(f"Saved timeline {document.id} ({len(events)} events) for {user_id[:8]}")
        await self._publish(user_id)
        return document

    async def list_timelines(self, user_id: str) -> list[LibraryEntry]:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                """SELECT id, title, description, topic, updated_at,
                          json_array_length(events) AS event_count
                   FROM timelines
                   WHERE tenant_id = ? AND user_id = ?
                   ORDER BY updated_at DESC""",
                (self.tenant_id, user_id),
            )
            rows = await cursor.fetchall()
            return [_row_to_entry(dict(r)) for r in rows]
        finally:
            await db.close()

    async def get_timeline(self, user_id: str, doc_id: str) -> TimelineDocument | None:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "SELECT * FROM timelines WHERE tenant_id = ? AND user_id = ? AND id = ?",
                (self.tenant_id, user_id, doc_id),
            )
            row = await cursor.fetchone()
            return _row_to_document(dict(row)) if row else None
        finally:
            await db.close()

    async def delete_timeline(self, user_id: str, doc_id: str) -> bool:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "DELETE FROM timelines WHERE tenant_id = ? AND user_id = ? AND id = ?",
                (self.tenant_id, user_id, doc_id),
            )
            await db.commit()
            deleted = cursor.rowcount > 0
        finally:
            await db.close()

        if deleted:
            logger.info(f"Deleted timeline {doc_id} for {user_id[:8]}")
            await self._publish(user_id)
        return deleted

    # ── Subscriptions ──

    async def subscribe(self, user_id: str) -> LibrarySubscription:
        subscription = LibrarySubscription(user_id, self)
        self._subscriptions.setdefault(user_id, set()).add(subscription)
        subscription.push(await self.list_timelines(user_id))
        return subscription

    def _detach(self, subscription: LibrarySubscription) -> None:
        subscribers = self._subscriptions.get(subscription.user_id)
        if not subscribers:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._subscriptions[subscription.user_id]

    def subscriber_count(self, user_id: str) -> int:
        return len(self._subscriptions.get(user_id, ()))

    async def _publish(self, user_id: str) -> None:
        subscribers = self._subscriptions.get(user_id)
        if not subscribers:
            return
        snapshot = await self.list_timelines(user_id)
        for subscription in list(subscribers):
            subscription.push(snapshot)
