"""Countdown formatting for reveal thresholds and the departure banner.

Pure helpers: they take ``now`` explicitly and never go negative.  Once a
threshold has been reached the text collapses to ``"Now!"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from lobby_reveal.domain.enums import RevealState

NOW_TEXT = "Now!"

_LABELS = {
    RevealState.HIDDEN: "QR code available in:",
    RevealState.QR_ONLY: "Full reveal in:",
}


@dataclass(frozen=True)
class CountdownParts:
    """Whole units remaining.  ``days`` is 0 unless requested."""

    days: int
    hours: int
    minutes: int
    seconds: int

    def to_dict(self) -> dict:
        return {
            "days": self.days,
            "hours": self.hours,
            "minutes": self.minutes,
            "seconds": self.seconds,
        }


def remaining_parts(
    now: datetime,
    target: datetime,
    with_days: bool = False,
) -> CountdownParts | None:
    """Split the time until *target* into units, or None if reached.

    Sub-second remainders are truncated, as a ticking display would, so
    the last partial second reads as all zeros rather than as reached.
    """
    if target <= now:
        return None
    total = int((target - now).total_seconds())

    days = 0
    if with_days:
        days, total = divmod(total, 86400)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return CountdownParts(days=days, hours=hours, minutes=minutes, seconds=seconds)


def format_countdown(now: datetime, threshold_at: datetime) -> str:
    """``"{h}h {m}m {s}s"`` until *threshold_at*, or ``"Now!"``."""
    parts = remaining_parts(now, threshold_at)
    if parts is None:
        return NOW_TEXT
    return f"{parts.hours}h {parts.minutes}m {parts.seconds}s"


def format_reveal_eta(now: datetime, threshold_at: datetime) -> str | None:
    """Short minute-granularity ETA for schedule cards (``"2h 5m"``, ``"45m"``)."""
    parts = remaining_parts(now, threshold_at)
    if parts is None:
        return None
    if parts.hours > 0:
        return f"{parts.hours}h {parts.minutes}m"
    return f"{parts.minutes}m"


def departure_banner(now: datetime, departure_time: datetime) -> CountdownParts | None:
    """Days/hours/minutes/seconds until departure; None once the trip started."""
    return remaining_parts(now, departure_time, with_days=True)


def countdown_label(state: RevealState) -> str | None:
    """Caption for the ticket countdown in *state* (None when nothing is pending)."""
    return _LABELS.get(state)
