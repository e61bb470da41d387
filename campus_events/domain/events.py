"""Domain events emitted while serving event and registration views."""

from __future__ import annotations

from pydantic import BaseModel

from campus_events.domain.models import Event, EventStatus


class EventsFetched(BaseModel):
    """Fired whenever fresh event records arrive from the events API."""

    events: list[Event]


class EventUpdated(BaseModel):
    """Fired when the events API accepted an edit."""

    event: Event
    fields: list[str]


class EventEditRejected(BaseModel):
    """Fired when the events API refused an edit the local policy allowed."""

    event_id: str
    fields: list[str]
    believed_status: EventStatus
    reason: str
