"""Timezone-aware clock utilities.

All timestamps in lobby-reveal MUST be UTC-aware.  This module is the
single source of "now" so tests can monkey-patch it trivially, or inject
a FrozenClock wherever a ``Clock`` is accepted.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


class FrozenClock:
    """A Clock that only moves when told to."""

    def __init__(self, at: datetime) -> None:
        self._now = at

    def __call__(self) -> datetime:
        return self._now

    def set(self, at: datetime) -> None:
        self._now = at

    def advance(self, delta: timedelta) -> datetime:
        self._now = self._now + delta
        return self._now
