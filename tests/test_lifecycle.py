"""Tests for lifecycle classification and registration state."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from campus_events.domain.models import Event, EventStatus, EventType
from campus_events.services.lifecycle import (
    classify,
    is_full,
    is_low_stock,
    is_registration_open,
)

_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def _make_event(**overrides) -> Event:
    defaults = dict(
        id="evt-1",
        name="Hackathon",
        type=EventType.NORMAL,
        start_date=_NOW + timedelta(days=2),
        end_date=_NOW + timedelta(days=3),
        registration_deadline=_NOW + timedelta(days=1),
        is_published=True,
    )
    defaults.update(overrides)
    return Event(**defaults)


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "start_offset, end_offset",
    [(-2, -1), (-1, 1), (1, 2)],
)
def test_unpublished_is_draft_regardless_of_dates(start_offset, end_offset):
    event = _make_event(
        is_published=False,
        start_date=_NOW + timedelta(days=start_offset),
        end_date=_NOW + timedelta(days=end_offset),
    )
    assert classify(event, _NOW) == EventStatus.DRAFT


def test_future_start_is_published():
    assert classify(_make_event(), _NOW) == EventStatus.PUBLISHED


def test_published_future_event_with_registrations_is_not_ongoing():
    event = _make_event(current_registrations=50)
    assert classify(event, _NOW) == EventStatus.PUBLISHED


def test_now_equal_to_start_is_ongoing():
    """The start boundary belongs to ongoing."""
    event = _make_event(start_date=_NOW, end_date=_NOW + timedelta(hours=4))
    assert classify(event, _NOW) == EventStatus.ONGOING


def test_now_equal_to_end_is_ongoing_and_one_ms_later_completed():
    event = _make_event(start_date=_NOW - timedelta(hours=4), end_date=_NOW)
    assert classify(event, _NOW) == EventStatus.ONGOING
    assert classify(event, _NOW + timedelta(milliseconds=1)) == EventStatus.COMPLETED


def test_started_yesterday_ending_tomorrow_is_ongoing():
    event = _make_event(
        start_date=_NOW - timedelta(days=1), end_date=_NOW + timedelta(days=1)
    )
    assert classify(event, _NOW) == EventStatus.ONGOING


def test_past_end_is_completed():
    event = _make_event(
        start_date=_NOW - timedelta(days=3), end_date=_NOW - timedelta(days=2)
    )
    assert classify(event, _NOW) == EventStatus.COMPLETED


def test_status_changes_with_time_alone():
    """Same record, later clock: recomputation moves it forward."""
    event = _make_event()
    assert classify(event, _NOW) == EventStatus.PUBLISHED
    assert classify(event, _NOW + timedelta(days=2, hours=1)) == EventStatus.ONGOING
    assert classify(event, _NOW + timedelta(days=4)) == EventStatus.COMPLETED


# ---------------------------------------------------------------------------
# Registration state
# ---------------------------------------------------------------------------


def test_unlimited_event_is_never_full():
    assert is_full(_make_event(current_registrations=10_000)) is False


def test_full_at_limit():
    assert is_full(_make_event(registration_limit=20, current_registrations=20))
    assert not is_full(_make_event(registration_limit=20, current_registrations=19))


def test_registration_open_before_deadline():
    assert is_registration_open(_make_event(), _NOW)


def test_registration_open_on_deadline_instant():
    event = _make_event(registration_deadline=_NOW)
    assert is_registration_open(event, _NOW)
    assert not is_registration_open(event, _NOW + timedelta(seconds=1))


def test_registration_closed_when_full():
    event = _make_event(registration_limit=5, current_registrations=5)
    assert not is_registration_open(event, _NOW)


def test_registration_closed_for_drafts():
    assert not is_registration_open(_make_event(is_published=False), _NOW)


def test_low_stock_only_for_merchandise():
    merch = _make_event(
        type=EventType.MERCHANDISE, stock_quantity=3, purchase_limit_per_participant=1
    )
    assert is_low_stock(merch)
    assert not is_low_stock(merch.model_copy(update={"stock_quantity": 10}))
    assert not is_low_stock(_make_event(stock_quantity=3))
