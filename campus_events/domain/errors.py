"""Domain error codes for the campus events view service."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from campus_events.domain.models import EventStatus


class ErrorCode(Enum):
    """Domain error codes."""

    FIELD_LOCKED = "FIELD_LOCKED"
    STALE_STATUS = "STALE_STATUS"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class FieldLockedError(DomainError):
    """Raised when an edit touches fields the event's status does not allow."""

    def __init__(self, fields: Iterable[str], status: EventStatus) -> None:
        self.fields = tuple(fields)
        self.status = status
        super().__init__(
            code=ErrorCode.FIELD_LOCKED,
            message=(
                f"Cannot modify {', '.join(self.fields)} "
                f"while the event is {status.value}"
            ),
        )


class StaleStatusMismatch(DomainError):
    """The events API rejected an edit that the local policy allowed.

    Usually the event moved on (draft -> published -> ongoing) between the
    local check and the API call. ``status`` is the freshly recomputed one.
    """

    def __init__(
        self,
        event_id: str,
        status: EventStatus,
        reason: str,
        editable_fields: Iterable[str] = (),
    ) -> None:
        self.event_id = event_id
        self.status = status
        self.reason = reason
        self.editable_fields = sorted(editable_fields)
        super().__init__(
            code=ErrorCode.STALE_STATUS,
            message=f"Event is now {status.value}; reload before editing",
        )


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found")
        self.event_id = event_id


class UpstreamError(DomainError):
    """Raised when the events API answers with an error or cannot be reached."""

    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(code=ErrorCode.UPSTREAM_ERROR, message=message)
        self.status_code = status_code
