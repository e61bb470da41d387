"""Service for filtering events and registrations into page views."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from campus_events.domain.models import (
    ALL,
    Event,
    EventSummary,
    FilterSet,
    Registration,
    SearchTarget,
    TimeWindow,
)

TRENDING_LIMIT = 5

Item = Event | Registration
Predicate = Callable[[Item], bool]


def _event_of(item: Item) -> Event | EventSummary | None:
    if isinstance(item, Registration):
        return item.event_summary
    return item


def _on_event(check: Callable[[Event | EventSummary], bool]) -> Predicate:
    """Lift an event check to items; registrations without an event fail it."""

    def predicate(item: Item) -> bool:
        event = _event_of(item)
        return event is not None and check(event)

    return predicate


def _matches_search(item: Item, query: str, target: SearchTarget) -> bool:
    if target == SearchTarget.PARTICIPANT:
        participant = item.participant_ref if isinstance(item, Registration) else None
        if participant is None:
            return False
        return (
            query in participant.full_name.lower()
            or query in participant.email.lower()
        )
    event = _event_of(item)
    return event is not None and query in event.name.lower()


def build_predicates(filters: FilterSet, now: datetime) -> list[Predicate]:
    """Return one predicate per active filter; bypassed filters add nothing."""
    predicates: list[Predicate] = []

    if filters.status != ALL:
        predicates.append(
            lambda item: isinstance(item, Registration)
            and item.status == filters.status
        )

    if filters.payment_status != ALL:
        predicates.append(
            lambda item: isinstance(item, Registration)
            and item.payment_status == filters.payment_status
        )

    if filters.time_window == TimeWindow.UPCOMING:
        predicates.append(_on_event(lambda e: e.start_date >= now))
    elif filters.time_window == TimeWindow.PAST:
        predicates.append(_on_event(lambda e: e.start_date < now))

    query = filters.search.strip().lower()
    if query:
        predicates.append(
            lambda item: _matches_search(item, query, filters.search_target)
        )

    if filters.followed_only and filters.following:
        predicates.append(_on_event(lambda e: e.organizer_id in filters.following))

    if filters.event_type is not None:
        predicates.append(_on_event(lambda e: e.type == filters.event_type))

    if filters.category is not None:
        predicates.append(_on_event(lambda e: e.category == filters.category))

    if filters.starts_after is not None:
        predicates.append(_on_event(lambda e: e.start_date >= filters.starts_after))

    if filters.starts_before is not None:
        predicates.append(_on_event(lambda e: e.start_date <= filters.starts_before))

    return predicates


def apply_filters(
    items: Sequence[Item], filters: FilterSet, now: datetime
) -> list[Item]:
    """Keep the items passing every active predicate, in input order.

    Never mutates *items*; always returns a new list.
    """
    predicates = build_predicates(filters, now)
    return [item for item in items if all(p(item) for p in predicates)]


def trending(events: Sequence[Event], limit: int = TRENDING_LIMIT) -> list[Event]:
    """Published events with the most registrations first, top *limit*.

    ``sorted`` stays stable with ``reverse=True``, so ties keep input order.
    """
    published = [e for e in events if e.is_published]
    ranked = sorted(published, key=lambda e: e.current_registrations, reverse=True)
    return ranked[:limit]
