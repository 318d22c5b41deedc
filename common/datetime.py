"""Datetime helpers shared by the collection builder.

    parse_iso8601(s): ISO-8601 parser that always returns an *aware* UTC
    datetime. Accepts a trailing "Z", explicit offsets and fractional seconds.
    iso_date(v): ``YYYY-MM-DD`` rendering for date, datetime or string input.
"""
from __future__ import annotations

import datetime as _dt
from typing import Union

from dateutil.parser import isoparse as _isoparse

__all__ = ["parse_iso8601", "iso_date"]


def _ensure_utc(dt: _dt.datetime) -> _dt.datetime:
    """Return *dt* converted to UTC and TZ-aware."""
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        # naive → assume already UTC
        return dt.replace(tzinfo=_dt.timezone.utc)
    return dt.astimezone(_dt.timezone.utc)


def parse_iso8601(value: Union[str, _dt.datetime]) -> _dt.datetime:
    """Parse *value* into a timezone-aware UTC datetime.

    If *value* is already a datetime, it is normalised to UTC.
    """
    if isinstance(value, _dt.datetime):
        return _ensure_utc(value)

    if not isinstance(value, str):
        raise TypeError("parse_iso8601 expects str or datetime, got " + type(value).__name__)

    try:
        dt = _isoparse(value)
    except ValueError as exc:
        raise ValueError(f"invalid ISO-8601 datetime: {value}") from exc

    return _ensure_utc(dt)


def iso_date(value: Union[str, _dt.date, _dt.datetime]) -> str:
    """Return *value* as an ISO ``YYYY-MM-DD`` date string."""
    if isinstance(value, _dt.datetime):
        return _ensure_utc(value).date().isoformat()
    if isinstance(value, _dt.date):
        return value.isoformat()
    return parse_iso8601(value).date().isoformat()
