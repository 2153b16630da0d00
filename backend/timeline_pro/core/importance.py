"""Relative importance ranking and zoom filtering.

``normalize`` spreads the full event set over ten display tiers by rank of
raw importance. Tier ``t`` is visible at zoom level ``z`` when ``t >= 11 - z``.
"""

from timeline_pro.models import Event

TIER_COUNT = 10
MIN_ZOOM_LEVEL = 1
MAX_ZOOM_LEVEL = 10


def display_tier(position: int, total: int) -> int:
    """
    Tier for the zero-based ``position`` among ``total`` importance-sorted events.

    Computes ``min(10, ceil((position + 1) / total * 10))`` in integer arithmetic.
    """
    return min(TIER_COUNT, -(-(position + 1) * TIER_COUNT // total))


def normalize(events: list[Event]) -> list[Event]:
    """
    Assign every event a display tier relative to the whole collection.

    :param events: The full current event collection
    :type events: list[Event]
    :return: New events with ``display_tier`` set, sorted by date
    :rtype: list[Event]
    """
    if not events:
        return []

    # Ties rank by date so re-normalizing date-sorted output changes nothing
    by_importance = sorted(events, key=lambda e: (e.raw_importance, e.date))
    total = len(by_importance)
    ranked = [
        event.model_copy(update={"display_tier": display_tier(i, total)})
        for i, event in enumerate(by_importance)
    ]
    return sorted(ranked, key=lambda e: e.date)


def _check_zoom_level(zoom_level: int) -> None:
    if not MIN_ZOOM_LEVEL <= zoom_level <= MAX_ZOOM_LEVEL:
        raise ValueError(
            f"zoom_level must be between {MIN_ZOOM_LEVEL} and {MAX_ZOOM_LEVEL}"
        )


def filter_by_zoom(events: list[Event], zoom_level: int) -> list[Event]:
    """Keep events whose tier is visible at ``zoom_level``. Unranked events count as tier 1."""
    _check_zoom_level(zoom_level)
    threshold = TIER_COUNT + 1 - zoom_level
    return [e for e in events if (e.display_tier or 1) >= threshold]


def visible_events(events: list[Event], zoom_level: int) -> list[Event]:
    """Events visible at ``zoom_level``, in chronological order."""
    return sorted(filter_by_zoom(events, zoom_level), key=lambda e: e.date)
