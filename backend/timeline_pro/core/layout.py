"""Sparse timeline layout: visible events interleaved with year markers."""

from timeline_pro.models import Event, EventItem, MarkerItem, RenderItem


def marker_step(gap: int) -> int:
    """Years between markers for a gap of ``gap`` years."""
    if gap > 100:
        return 50
    if gap > 20:
        return 10
    return 5


def build_layout(visible_events: list[Event]) -> list[RenderItem]:
    """
    Build the render sequence for chronologically sorted events.

    Markers fill the years strictly between consecutive events, spaced by
    ``marker_step`` of the gap. Nothing is emitted before the first event or
    after the last.

    :param visible_events: Events sorted ascending by date
    :type visible_events: list[Event]
    :return: Event and marker items in display order
    :rtype: list[RenderItem]
    """
    items: list[RenderItem] = []
    last_year: int | None = None

    for index, event in enumerate(visible_events):
        year = event.year
        if last_year is not None and year > last_year:
            step = marker_step(year - last_year)
            for marker_year in range(last_year + step, year, step):
                items.append(MarkerItem(key=f"m-{marker_year}-{index}", year=marker_year))
        items.append(EventItem(key=event.id, event=event))
        last_year = year

    return items
