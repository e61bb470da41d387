"""HTTP client for the campus events API.

Every payload is parsed into domain models here, so the rest of the service
only ever sees validated records.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from campus_events.domain.errors import EventNotFoundError, UpstreamError
from campus_events.domain.models import Event, Registration, Session, ref_ids

logger = logging.getLogger(__name__)

_event = TypeAdapter(Event)
_registration = TypeAdapter(Registration)


class EventsApiClient:
    """Thin wrapper over ``httpx.Client`` bound to one caller's session."""

    def __init__(
        self,
        base_url: str,
        session: Session | None = None,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if session is not None:
            headers["Authorization"] = f"Bearer {session.token}"
        self.session = session
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> EventsApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("events API %s %s failed: %s", method, path, exc)
            raise UpstreamError(None, "Events API is unavailable") from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "events API %s %s -> %s: %s",
                method,
                path,
                response.status_code,
                message,
            )
            raise UpstreamError(response.status_code, message)

        return response.json().get("data")

    @staticmethod
    def _parse(adapter: TypeAdapter, payload: Any) -> Any:
        try:
            return adapter.validate_python(payload)
        except ValidationError as exc:
            logger.warning("events API returned malformed data: %s", exc)
            raise UpstreamError(None, "Events API returned malformed data") from exc

    @staticmethod
    def _parse_each(adapter: TypeAdapter, payload: Any) -> list[Any]:
        """Parse a list payload record by record, skipping malformed ones."""
        if not isinstance(payload, list):
            logger.warning(
                "events API returned %s instead of a list", type(payload).__name__
            )
            raise UpstreamError(None, "Events API returned malformed data")

        records = []
        for item in payload:
            try:
                records.append(adapter.validate_python(item))
            except ValidationError as exc:
                record_id = item.get("_id") if isinstance(item, dict) else None
                logger.warning("skipping malformed record %s: %s", record_id, exc)
        return records

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def list_public_events(self) -> list[Event]:
        return self._parse_each(_event, self._request("GET", "/events/public"))

    def list_organizer_events(self) -> list[Event]:
        return self._parse_each(
            _event, self._request("GET", "/events/organizer/my-events")
        )

    def get_event(self, event_id: str) -> Event:
        try:
            payload = self._request("GET", f"/events/{event_id}")
        except UpstreamError as exc:
            if exc.status_code == 404:
                raise EventNotFoundError(event_id) from exc
            raise
        return self._parse(_event, payload)

    def update_event(self, event_id: str, changes: dict[str, Any]) -> Event:
        payload = self._request("PUT", f"/events/{event_id}", json=changes)
        return self._parse(_event, payload)

    # ------------------------------------------------------------------
    # Registrations and preferences
    # ------------------------------------------------------------------

    def my_registrations(self) -> list[Registration]:
        return self._parse_each(
            _registration, self._request("GET", "/registrations/me")
        )

    def event_registrations(self, event_id: str) -> list[Registration]:
        return self._parse_each(
            _registration, self._request("GET", f"/registrations/event/{event_id}")
        )

    def following(self) -> frozenset[str]:
        """Organizer ids the current participant follows."""
        me = self._request("GET", "/users/me") or {}
        preferences = me.get("preferences") or {}
        return ref_ids(preferences.get("following"))


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or response.reason_phrase
    return response.reason_phrase
