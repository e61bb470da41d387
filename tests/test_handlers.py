"""Tests for the event bus and the view-state handlers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from campus_events.domain.bus import EventBus
from campus_events.domain.events import EventEditRejected, EventsFetched, EventUpdated
from campus_events.domain.handlers import HandlerRegistry
from campus_events.domain.models import Event, EventStatus, EventType
from campus_events.repos.memory import EventRepository

_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def env():
    """Fresh bus + repo + registry for each test."""
    bus = EventBus()
    event_repo = EventRepository()
    registry = HandlerRegistry(bus=bus, event_repo=event_repo)

    class Env:
        pass

    e = Env()
    e.bus = bus
    e.event_repo = event_repo
    e.registry = registry
    return e


def _make_event(**overrides) -> Event:
    defaults = dict(
        id="evt-1",
        name="Test event",
        type=EventType.NORMAL,
        start_date=_NOW + timedelta(days=1),
        end_date=_NOW + timedelta(days=1, hours=1),
        registration_deadline=_NOW,
    )
    defaults.update(overrides)
    return Event(**defaults)


def test_bus_calls_handlers_in_registration_order():
    bus = EventBus()
    calls: list[str] = []
    bus.subscribe(EventsFetched, lambda e: calls.append("first"))
    bus.subscribe(EventsFetched, lambda e: calls.append("second"))

    bus.publish(EventsFetched(events=[]))

    assert calls == ["first", "second"]


def test_bus_ignores_events_without_subscribers():
    EventBus().publish(EventsFetched(events=[]))


def test_fetched_events_are_stored(env):
    events = [_make_event(id="a"), _make_event(id="b")]

    env.bus.publish(EventsFetched(events=events))

    assert [e.id for e in env.event_repo.list_all()] == ["a", "b"]


def test_refetch_replaces_stored_copy(env):
    env.bus.publish(EventsFetched(events=[_make_event()]))
    env.bus.publish(EventsFetched(events=[_make_event(is_published=True)]))

    assert env.event_repo.get("evt-1").is_published is True
    assert len(env.event_repo.list_all()) == 1


def test_update_stores_new_version(env):
    env.bus.publish(EventsFetched(events=[_make_event()]))

    env.bus.publish(
        EventUpdated(event=_make_event(description="New"), fields=["description"])
    )

    assert env.event_repo.get("evt-1").description == "New"


def test_rejected_edit_drops_cached_copy(env):
    env.bus.publish(EventsFetched(events=[_make_event()]))

    env.bus.publish(
        EventEditRejected(
            event_id="evt-1",
            fields=["venue"],
            believed_status=EventStatus.DRAFT,
            reason="Published events can only update: description",
        )
    )

    assert env.event_repo.get("evt-1") is None


def test_rejected_edit_for_unknown_event_is_harmless(env):
    env.bus.publish(
        EventEditRejected(
            event_id="ghost",
            fields=["name"],
            believed_status=EventStatus.DRAFT,
            reason="Event not found",
        )
    )
    assert env.event_repo.list_all() == []


def test_repository_evicts_oldest_beyond_max_size():
    repo = EventRepository(max_size=2)

    repo.add_many([_make_event(id="a"), _make_event(id="b"), _make_event(id="c")])

    assert [e.id for e in repo.list_all()] == ["b", "c"]
    assert repo.get("a") is None


def test_repository_readding_refreshes_position():
    repo = EventRepository(max_size=2)
    repo.add_many([_make_event(id="a"), _make_event(id="b")])

    repo.add(_make_event(id="a", description="again"))
    repo.add(_make_event(id="c"))

    assert [e.id for e in repo.list_all()] == ["a", "c"]
