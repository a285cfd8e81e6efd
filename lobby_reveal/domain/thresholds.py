"""Reveal thresholds — how long before a target each transition happens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class RevealThresholds:
    """Durations before the target time at which reveal states change.

    qr_only_before must be strictly longer than full_before.  A violation
    is a configuration error and is raised at construction time.
    """

    qr_only_before: timedelta = timedelta(hours=3)
    full_before: timedelta = timedelta(hours=1)
    activity_before: timedelta = timedelta(hours=1)

    def __post_init__(self) -> None:
        if self.qr_only_before <= self.full_before:
            raise ValueError("qr_only_before must be longer than full_before")
        if self.full_before < timedelta(0) or self.activity_before < timedelta(0):
            raise ValueError("reveal thresholds must not be negative")

    @classmethod
    def from_minutes(
        cls,
        qr_only: int,
        full: int,
        activity: int,
    ) -> RevealThresholds:
        return cls(
            qr_only_before=timedelta(minutes=qr_only),
            full_before=timedelta(minutes=full),
            activity_before=timedelta(minutes=activity),
        )


DEFAULT_THRESHOLDS = RevealThresholds()
