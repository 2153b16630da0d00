"""
Spreadsheet import: resolve a published sheet to its CSV export, fetch it
and parse rows into events.
"""

import csv
import re
import time
from typing import Optional

import httpx

from timeline_pro.config import settings
from timeline_pro.errors import SheetImportError
from timeline_pro.logging import get_logger
from timeline_pro.models import Event, EventSource, normalize_header, parse_event_date
from timeline_pro.services.images import optimize_image_url
from timeline_pro.services.retry import run_with_retry

logger = get_logger('services.sheets')

_SHEET_ID_PATTERN = re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)")
_GID_PATTERN = re.compile(r"[#&?]gid=([0-9]+)")
_LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")

SHEET_CSV_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv&gid={gid}"

IMPORTANCE_HEADERS = frozenset({
    "importance",
    "abs_importance",
    "absimp",
    "abs_imp",
    "rawimportance",
    "raw_importance",
})
IMAGE_HEADERS = frozenset({"image", "imageurl", "image_url", "img"})
TEXT_HEADERS = frozenset({"date", "title", "description"})

DEFAULT_IMPORTANCE = 50

LOAD_FAILED_MESSAGE = "Could not load sheet. Is it public?"


def resolve_sheet_csv_url(url: str) -> str:
    """
    Turn a Google Sheets link into its CSV export URL.

    Links that are not sheets, or already request CSV, are returned unchanged.
    """
    url = url.strip()
    sheet_match = _SHEET_ID_PATTERN.search(url)
    if not sheet_match or "tqx=out:csv" in url:
        return url
    gid_match = _GID_PATTERN.search(url)
    return SHEET_CSV_EXPORT_URL.format(
        sheet_id=sheet_match.group(1),
        gid=gid_match.group(1) if gid_match else "0",
    )


def parse_importance(raw: str, fallback: int = DEFAULT_IMPORTANCE) -> int:
    """Leading integer of ``raw``; zero or unparseable yields ``fallback``."""
    match = _LEADING_INT_PATTERN.match(raw or "")
    if not match:
        return fallback
    return int(match.group(1)) or fallback


def parse_events_csv(text: str) -> list[Event]:
    """
    Parse CSV text with a header row into events.

    Rows without a title or a parseable date are dropped.

    :param text: CSV document
    :type text: str
    :return: Parsed events in row order
    :rtype: list[Event]
    :raises SheetImportError: If there is no header and data row
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise SheetImportError("Source is empty.")

    rows = csv.reader(lines, skipinitialspace=True)
    headers = [normalize_header(h) for h in next(rows)]
    stamp = int(time.time() * 1000)

    events: list[Event] = []
    for row_number, row in enumerate(rows, start=1):
        fields: dict[str, str] = {}
        extra: dict[str, str] = {}
        importance: Optional[int] = None
        image_url: Optional[str] = None

        for index, header in enumerate(headers):
            value = row[index].strip() if index < len(row) else ""
            if header in IMPORTANCE_HEADERS:
                importance = parse_importance(value)
            elif header in IMAGE_HEADERS:
                image_url = optimize_image_url(value) or None
            elif header in TEXT_HEADERS:
                fields[header] = value
            elif header:
                extra[header] = value

        title = fields.get("title", "")
        event_date = parse_event_date(fields.get("date"))
        if not title or event_date is None:
            logger.debug(f"Skipping sheet row {row_number}: missing title or invalid date")
            continue

        events.append(Event(
            id=f"csv-{row_number}-{stamp}",
            date=event_date,
            title=title,
            description=fields.get("description", ""),
            image_url=image_url,
            raw_importance=importance if importance is not None else DEFAULT_IMPORTANCE,
            source=EventSource.CSV,
            extra=extra,
        ))

    return events


class SheetImportService:
    """Fetch published spreadsheets and turn them into events."""

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.client = client or httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def fetch_csv(self, url: str) -> str:
        fetch_url = resolve_sheet_csv_url(url)

        async def _fetch() -> str:
            response = await self.client.get(fetch_url)
            response.raise_for_status()
            return response.text

        return await run_with_retry("Sheet fetch", _fetch, logger)

    async def import_events(self, url: str) -> list[Event]:
        """
        Fetch a sheet and parse its rows.

        :param url: Sheet link or direct CSV URL
        :type url: str
        :return: Parsed events, not yet normalized
        :rtype: list[Event]
        :raises SheetImportError: If the sheet cannot be fetched or is empty
        """
        try:
            text = await self.fetch_csv(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Sheet import failed for {url}: {e}")
            raise SheetImportError(LOAD_FAILED_MESSAGE) from e

        events = parse_events_csv(text)
        logger.info(f"Imported {len(events)} events from sheet")
        return events
