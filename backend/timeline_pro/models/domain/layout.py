"""Render sequence models produced by the layout builder."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from timeline_pro.models.domain.event import Event


class EventItem(BaseModel):
    """A visible event in the render sequence."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["event"] = "event"
    key: str
    event: Event


class MarkerItem(BaseModel):
    """A synthetic year marker filling a gap between events."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["marker"] = "marker"
    key: str
    year: int


RenderItem = Annotated[Union[EventItem, MarkerItem], Field(discriminator="kind")]
