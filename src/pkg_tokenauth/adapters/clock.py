from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..domain.ports import Clock


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    Clock frozen at a given instant; moves only when told to.

    Meant for tests and for replaying expiry scenarios deterministically.
    """

    def __init__(self, at: datetime | None = None) -> None:
        self._now = _aware(at) if at is not None else datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> datetime:
        self._now = self._now + delta
        return self._now

    def set(self, at: datetime) -> None:
        self._now = _aware(at)


def _aware(at: datetime) -> datetime:
    if at.tzinfo is None:
        raise ValueError("clock instants must be timezone-aware")
    return at
