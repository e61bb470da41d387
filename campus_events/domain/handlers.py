"""Handlers that keep the cached event views in step with the events API."""

from __future__ import annotations

import logging

from campus_events.domain.bus import EventBus
from campus_events.domain.events import EventEditRejected, EventsFetched, EventUpdated
from campus_events.repos.memory import EventRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the view state."""

    def __init__(self, bus: EventBus, event_repo: EventRepository) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventsFetched, self.on_events_fetched)
        self.bus.subscribe(EventUpdated, self.on_event_updated)
        self.bus.subscribe(EventEditRejected, self.on_event_edit_rejected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_events_fetched(self, event: EventsFetched) -> None:
        self.event_repo.add_many(event.events)

    def on_event_updated(self, event: EventUpdated) -> None:
        self.event_repo.add(event.event)
        logger.info(
            "event %s updated: %s", event.event.id, ", ".join(event.fields)
        )

    def on_event_edit_rejected(self, event: EventEditRejected) -> None:
        # The cached copy led to a wrong decision; drop it so the next read
        # goes back to the API.
        self.event_repo.delete(event.event_id)
        logger.warning(
            "edit of %s on event %s rejected while believed %s: %s",
            ", ".join(event.fields),
            event.event_id,
            event.believed_status.value,
            event.reason,
        )
