"""Smoke tests for reading date bounds from query parameters."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from campus_events.services.dates import parse_date_param

# Fixed reference time: Monday 2026-06-01 12:00 UTC
NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_iso_date():
    assert parse_date_param("2026-06-10", NOW).date() == datetime(2026, 6, 10).date()


def test_relative_phrase_resolves_against_now():
    assert parse_date_param("tomorrow", NOW).date() == datetime(2026, 6, 2).date()


def test_result_is_utc_aware():
    assert parse_date_param("2026-06-10", NOW).tzinfo == timezone.utc


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_blank_is_none(raw):
    assert parse_date_param(raw, NOW) is None


def test_nonsense_raises_value_error():
    with pytest.raises(ValueError, match="Could not understand date"):
        parse_date_param("qqqqzzzz", NOW)
