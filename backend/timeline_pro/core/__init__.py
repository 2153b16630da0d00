"""Pure timeline transformations: importance ranking, zoom filtering and layout."""

from timeline_pro.core.importance import (
    display_tier,
    filter_by_zoom,
    normalize,
    visible_events,
)
from timeline_pro.core.layout import build_layout, marker_step

__all__ = [
    "display_tier", "filter_by_zoom", "normalize", "visible_events",
    "build_layout", "marker_step",
]
