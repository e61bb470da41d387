"""FastAPI application for the campus events view service."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from campus_events.config import Settings, get_settings
from campus_events.domain.bus import EventBus
from campus_events.domain.errors import (
    EventNotFoundError,
    FieldLockedError,
    StaleStatusMismatch,
    UpstreamError,
)
from campus_events.domain.events import EventEditRejected, EventsFetched, EventUpdated
from campus_events.domain.handlers import HandlerRegistry
from campus_events.domain.models import (
    ALL,
    EditabilityView,
    Event,
    EventCategory,
    EventStatus,
    EventType,
    EventView,
    FilterSet,
    Registration,
    SearchTarget,
    Session,
    StaleEditResponse,
    TimeWindow,
)
from campus_events.repos.memory import EventRepository
from campus_events.services.api_client import EventsApiClient
from campus_events.services.dates import parse_date_param
from campus_events.services.editability import (
    apply_changes,
    check_merchandise_complete,
    check_update,
    editable_fields,
    has_registrations,
    wire_changes,
)
from campus_events.services.filters import apply_filters, trending
from campus_events.services.lifecycle import (
    classify,
    is_full,
    is_low_stock,
    is_registration_open,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Campus Events View Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = EventRepository(max_size=get_settings().cache_size)

handler_registry = HandlerRegistry(bus=event_bus, event_repo=event_repo)


# ── Dependencies ──────────────────────────────────────────────────────


def get_now() -> datetime:
    return datetime.now(timezone.utc)


def get_session(authorization: str | None = Header(default=None)) -> Session | None:
    """Turn an ``Authorization: Bearer <token>`` header into a Session."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Malformed Authorization header")
    return Session(token=token.strip())


def require_session(session: Session | None = Depends(get_session)) -> Session:
    if session is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return session


def get_api_client(
    session: Session | None = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> Iterator[EventsApiClient]:
    with EventsApiClient(
        settings.api_url, session=session, timeout=settings.api_timeout
    ) as client:
        yield client


# ── Error mapping ─────────────────────────────────────────────────────


@app.exception_handler(EventNotFoundError)
def _event_not_found(request: Request, exc: EventNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(UpstreamError)
def _upstream_failed(request: Request, exc: UpstreamError) -> JSONResponse:
    # auth failures are the caller's problem, everything else is ours
    if exc.status_code in (401, 403):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
    return JSONResponse(status_code=502, content={"detail": exc.message})


@app.exception_handler(StaleStatusMismatch)
def _stale_status(request: Request, exc: StaleStatusMismatch) -> JSONResponse:
    body = StaleEditResponse(
        detail=exc.message,
        status=exc.status,
        editable_fields=exc.editable_fields,
    )
    return JSONResponse(status_code=409, content=body.model_dump(mode="json"))


def _filters(**values: Any) -> FilterSet:
    try:
        return FilterSet(**values)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422, detail=exc.errors(include_url=False, include_context=False)
        ) from exc


def _date_bound(raw: str | None, now: datetime) -> datetime | None:
    try:
        return parse_date_param(raw, now)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _view(event: Event, now: datetime, settings: Settings) -> EventView:
    return EventView(
        event=event,
        status=classify(event, now),
        registration_open=is_registration_open(event, now),
        is_full=is_full(event),
        low_stock=is_low_stock(event, settings.low_stock_threshold),
    )


def _fetch_event(client: EventsApiClient, event_id: str) -> Event:
    event = client.get_event(event_id)
    event_bus.publish(EventsFetched(events=[event]))
    return event


def _load_event(client: EventsApiClient, event_id: str) -> Event:
    """The copy the edit surface was rendered from, fetching it if unseen."""
    return event_repo.get(event_id) or _fetch_event(client, event_id)


# ── Routes: events ────────────────────────────────────────────────────


@app.get("/events", response_model=list[Event])
def browse_events(
    search: str = "",
    type: EventType | None = None,
    category: EventCategory | None = None,
    followed_only: bool = False,
    starts_after: str | None = None,
    starts_before: str | None = None,
    client: EventsApiClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
) -> list[Event]:
    """Published events narrowed by the browse page's filters."""
    following: frozenset[str] = frozenset()
    if followed_only and client.session is not None:
        following = client.following()

    filters = _filters(
        search=search,
        event_type=type,
        category=category,
        followed_only=followed_only,
        following=following,
        starts_after=_date_bound(starts_after, now),
        starts_before=_date_bound(starts_before, now),
    )
    events = client.list_public_events()
    event_bus.publish(EventsFetched(events=events))
    return apply_filters(events, filters, now)


@app.get("/events/trending", response_model=list[Event])
def trending_events(
    client: EventsApiClient = Depends(get_api_client),
    settings: Settings = Depends(get_settings),
) -> list[Event]:
    """The most registered published events."""
    events = client.list_public_events()
    event_bus.publish(EventsFetched(events=events))
    return trending(events, settings.trending_limit)


@app.get("/events/{event_id}", response_model=EventView)
def get_event(
    event_id: str,
    client: EventsApiClient = Depends(get_api_client),
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
) -> EventView:
    """A single event with its lifecycle status and registration state."""
    return _view(_fetch_event(client, event_id), now, settings)


@app.get("/events/{event_id}/editability", response_model=EditabilityView)
def get_editability(
    event_id: str,
    session: Session = Depends(require_session),
    client: EventsApiClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
) -> EditabilityView:
    """Which fields the edit form may unlock right now."""
    event = _fetch_event(client, event_id)
    status = classify(event, now)
    registered = has_registrations(event)
    return EditabilityView(
        event_id=event.id,
        status=status,
        has_registrations=registered,
        editable_fields=sorted(editable_fields(status, registered)),
    )


@app.patch(
    "/events/{event_id}",
    response_model=EventView,
    responses={409: {"model": StaleEditResponse}},
)
def edit_event(
    event_id: str,
    changes: dict[str, Any] = Body(...),
    session: Session = Depends(require_session),
    client: EventsApiClient = Depends(get_api_client),
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
) -> EventView:
    """Check an edit against the lifecycle policy, then forward it.

    Locked fields, and values that would leave the event invalid, are
    refused locally and never reach the events API. When
    the API refuses an edit the policy allowed, the event is re-fetched and
    the fresh status is returned with a 409.
    """
    event = _load_event(client, event_id)
    status = classify(event, now)
    registered = has_registrations(event)
    changes = wire_changes(changes)

    try:
        check_update(changes, status, registered)
        if status == EventStatus.DRAFT:
            check_merchandise_complete(event, changes)
        apply_changes(event, changes)
    except FieldLockedError as exc:
        raise HTTPException(
            status_code=400,
            detail={"message": exc.message, "locked_fields": list(exc.fields)},
        ) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=400,
            detail=exc.errors(
                include_url=False, include_context=False, include_input=False
            ),
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        updated = client.update_event(event_id, changes)
    except UpstreamError as exc:
        if exc.status_code not in (400, 409):
            raise
        event_bus.publish(
            EventEditRejected(
                event_id=event_id,
                fields=list(changes),
                believed_status=status,
                reason=exc.message,
            )
        )
        fresh = _fetch_event(client, event_id)
        fresh_status = classify(fresh, now)
        raise StaleStatusMismatch(
            event_id,
            fresh_status,
            exc.message,
            editable_fields(fresh_status, has_registrations(fresh)),
        ) from exc

    logger.info("forwarded edit of %s on event %s", ", ".join(changes), event_id)
    event_bus.publish(EventUpdated(event=updated, fields=list(changes)))
    return _view(updated, now, settings)


@app.get("/organizer/events", response_model=list[EventView])
def organizer_events(
    session: Session = Depends(require_session),
    client: EventsApiClient = Depends(get_api_client),
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
) -> list[EventView]:
    """The organizer dashboard: every own event with its current status."""
    events = client.list_organizer_events()
    event_bus.publish(EventsFetched(events=events))
    return [_view(event, now, settings) for event in events]


# ── Routes: registrations ─────────────────────────────────────────────


@app.get("/registrations/me", response_model=list[Registration])
def my_registrations(
    status: str = ALL,
    time: TimeWindow = TimeWindow.ALL,
    search: str = "",
    session: Session = Depends(require_session),
    client: EventsApiClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
) -> list[Registration]:
    """The participant's registrations, searched by event name."""
    filters = _filters(status=status, time_window=time, search=search)
    return apply_filters(client.my_registrations(), filters, now)


@app.get("/events/{event_id}/registrations", response_model=list[Registration])
def event_registrations(
    event_id: str,
    status: str = ALL,
    payment: str = ALL,
    search: str = "",
    session: Session = Depends(require_session),
    client: EventsApiClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
) -> list[Registration]:
    """An event's registrations, searched by participant name or email."""
    filters = _filters(
        status=status,
        payment_status=payment,
        search=search,
        search_target=SearchTarget.PARTICIPANT,
    )
    return apply_filters(client.event_registrations(event_id), filters, now)
