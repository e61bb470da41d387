"""Service for deriving an event's lifecycle status and registration state."""

from __future__ import annotations

from datetime import datetime

from campus_events.domain.models import Event, EventStatus, EventType

LOW_STOCK_THRESHOLD = 10


def classify(event: Event, now: datetime) -> EventStatus:
    """Return the lifecycle status of *event* at instant *now*.

    First match wins: unpublished -> draft, before start -> published,
    start <= now <= end -> ongoing (both bounds inclusive), else completed.
    The result is only valid for *now*; callers recompute instead of caching.
    """
    if not event.is_published:
        return EventStatus.DRAFT
    if now < event.start_date:
        return EventStatus.PUBLISHED
    if now <= event.end_date:
        return EventStatus.ONGOING
    return EventStatus.COMPLETED


def is_full(event: Event) -> bool:
    if event.registration_limit is None:
        return False
    return event.current_registrations >= event.registration_limit


def is_registration_open(event: Event, now: datetime) -> bool:
    """Published, deadline not passed (inclusive) and capacity left."""
    return (
        event.is_published
        and now <= event.registration_deadline
        and not is_full(event)
    )


def is_low_stock(event: Event, threshold: int = LOW_STOCK_THRESHOLD) -> bool:
    return (
        event.type == EventType.MERCHANDISE
        and event.stock_quantity is not None
        and event.stock_quantity < threshold
    )
