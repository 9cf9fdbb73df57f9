"""Injectable clock for time-dependent operations.

Every service that needs "now" receives a ``Clock``; nothing in the engine
reads the system time directly. Tests pass a ``FakeClock`` and move it by hand.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        """Return the current instant as an aware UTC datetime."""
        ...


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FakeClock:
    """Settable clock for deterministic tests."""

    def __init__(self, initial: datetime | None = None):
        self._current = _as_utc(initial) if initial else datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._current

    def set(self, instant: datetime) -> None:
        """Jump to a specific instant."""
        self._current = _as_utc(instant)

    def advance(self, milliseconds: float) -> None:
        """Advance time by milliseconds."""
        self._current = self._current + timedelta(milliseconds=milliseconds)

    def advance_seconds(self, seconds: float) -> None:
        self.advance(seconds * 1000)

    def advance_minutes(self, minutes: float) -> None:
        self.advance(minutes * 60 * 1000)

    def advance_hours(self, hours: float) -> None:
        self.advance(hours * 60 * 60 * 1000)


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)
