"""Service deciding which event fields may change in each lifecycle status.

This is a client-side gate only. The events API enforces its own rules and
may still reject an edit allowed here (see ``StaleStatusMismatch``).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic.alias_generators import to_camel

from campus_events.domain.errors import FieldLockedError
from campus_events.domain.models import Event, EventStatus, EventType

CUSTOM_FORM = "customForm"
IS_PUBLISHED = "isPublished"

# Every field an organizer can touch while the event is still a draft.
# type, id, organizer and currentRegistrations are locked in every status.
DRAFT_FIELDS = frozenset(
    {
        "name",
        "description",
        "category",
        "startDate",
        "endDate",
        "registrationDeadline",
        "registrationFee",
        "registrationLimit",
        CUSTOM_FORM,
        "itemDetails",
        "stockQuantity",
        "purchaseLimitPerParticipant",
        IS_PUBLISHED,
        "imageUrl",
        "venue",
        "tags",
        "eligibility",
    }
)

_EDITABLE: dict[EventStatus, frozenset[str]] = {
    EventStatus.DRAFT: DRAFT_FIELDS,
    EventStatus.PUBLISHED: frozenset(
        {"description", "registrationDeadline", "registrationLimit"}
    ),
    EventStatus.ONGOING: frozenset({IS_PUBLISHED}),
    EventStatus.COMPLETED: frozenset({IS_PUBLISHED}),
}


def wire_name(field: str) -> str:
    """Accept both ``custom_form`` and ``customForm``."""
    return to_camel(field) if "_" in field else field


def wire_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """*changes* keyed by the names the events API stores."""
    return {wire_name(k): v for k, v in changes.items()}


def has_registrations(event: Event) -> bool:
    return event.current_registrations > 0


def editable_fields(status: EventStatus, has_registrations: bool) -> frozenset[str]:
    fields = _EDITABLE[status]
    if status == EventStatus.DRAFT and has_registrations:
        return fields - {CUSTOM_FORM}
    return fields


def is_editable(field: str, status: EventStatus, has_registrations: bool) -> bool:
    return wire_name(field) in editable_fields(status, has_registrations)


def check_update(
    changes: Mapping[str, Any], status: EventStatus, has_registrations: bool
) -> None:
    """Raise ``FieldLockedError`` listing every locked field in *changes*.

    Raises ``ValueError`` when *changes* is empty.
    """
    if not changes:
        raise ValueError("No fields to update")
    locked = [
        field
        for field in changes
        if not is_editable(field, status, has_registrations)
    ]
    if locked:
        raise FieldLockedError(locked, status)


def check_merchandise_complete(event: Event, changes: Mapping[str, Any]) -> None:
    """Reject a draft edit that would leave a merchandise event incomplete.

    Values in *changes* (wire names) override the stored ones.
    """
    if event.type != EventType.MERCHANDISE:
        return
    merged = wire_changes(changes)

    stock = merged.get("stockQuantity", event.stock_quantity)
    if stock is None:
        raise ValueError("stockQuantity is required for Merchandise events")

    purchase_limit = merged.get(
        "purchaseLimitPerParticipant", event.purchase_limit_per_participant
    )
    if not purchase_limit:
        raise ValueError(
            "purchaseLimitPerParticipant is required for Merchandise events"
        )

    details = merged.get("itemDetails", event.item_details)
    if isinstance(details, Mapping):
        empty = not any(details.get(key) for key in ("size", "color", "variants"))
    else:
        empty = details is None or details.is_empty
    if empty:
        raise ValueError(
            "itemDetails (size, color, or variants) are required for "
            "Merchandise events"
        )


def apply_changes(event: Event, changes: Mapping[str, Any]) -> Event:
    """The event as it would read after *changes*.

    Raises ``pydantic.ValidationError`` when the result breaks an Event
    invariant (end before start, non-positive limit, ...).
    """
    merged = event.model_dump(mode="json", by_alias=True)
    merged.update(wire_changes(changes))
    return Event.model_validate(merged)
