"""Service for reading human-entered date bounds from query parameters."""

from __future__ import annotations

from datetime import datetime, timezone

import dateparser


def parse_date_param(raw: str | None, now: datetime) -> datetime | None:
    """Parse "2026-11-01", "next friday" or "in 2 weeks" into a UTC datetime.

    Relative phrases are resolved against *now*. Returns ``None`` for an empty
    value and raises ``ValueError`` when the text is not a date.
    """
    if raw is None or not raw.strip():
        return None
    settings = {
        "PREFER_DATES_FROM": "future",
        "TIMEZONE": "UTC",
        "TO_TIMEZONE": "UTC",
        "RELATIVE_BASE": now.astimezone(timezone.utc).replace(tzinfo=None),
        "RETURN_AS_TIMEZONE_AWARE": False,
    }
    result = dateparser.parse(raw, settings=settings)
    if result is None:
        raise ValueError(f"Could not understand date {raw!r}")
    return result.replace(tzinfo=timezone.utc)
