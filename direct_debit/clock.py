"""Injectable time source so document generation stays deterministic in tests."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from common.datetime import iso_date

__all__ = ["Clock", "SystemClock", "today_iso"]


class Clock(Protocol):
    """Abstract clock used for deterministic testing."""

    def now_iso(self) -> str:  # pragma: no cover – protocol stub
        """Return current timestamp in ISO-8601 (UTC) format."""


class SystemClock:
    """Wall clock in UTC."""

    def now_iso(self) -> str:
        return datetime.now(timezone.utc).isoformat()


def today_iso(clock: Clock) -> str:
    """Return the clock's current date as ``YYYY-MM-DD``."""
    return iso_date(clock.now_iso())
