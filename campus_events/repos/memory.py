"""In-memory view state: the last copy of each event fetched from the API."""

from __future__ import annotations

from campus_events.domain.models import Event


class EventRepository:
    """Dict-backed store for Event instances, keyed by id.

    Holds data only. Anything time-dependent (status, registration open)
    is recomputed by the caller from these records on every read.

    At most *max_size* events are kept; storing one more evicts the event
    stored longest ago.
    """

    def __init__(self, max_size: int = 500) -> None:
        self.max_size = max_size
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        # re-adding moves the event to the newest position
        self._store.pop(event.id, None)
        self._store[event.id] = event
        while len(self._store) > self.max_size:
            del self._store[next(iter(self._store))]

    def add_many(self, events: list[Event]) -> None:
        for event in events:
            self.add(event)

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def delete(self, event_id: str) -> None:
        self._store.pop(event_id, None)
