"""
Enum definitions for the Timeline Pro API.
"""
from enum import Enum


class EventSource(str, Enum):
    """Where an event entered the timeline."""
    USER = "user"
    CSV = "csv"
    AI = "ai"


class GenerationMode(str, Enum):
    """Which AI call produced a batch of events."""
    EXPAND = "expand"
    RESEARCH = "research"


def normalize_header(header: str) -> str:
    """
    Normalize a spreadsheet header for alias matching.

    - Strip surrounding quotes and whitespace
    - Lowercase

    Examples:
        '"Date"' -> "date"
        " Abs_Importance " -> "abs_importance"
    """
    return header.strip().strip('"').strip().lower()
