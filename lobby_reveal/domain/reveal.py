"""Reveal predicates — pure functions from (now, target time) to a state.

Nothing in this module reads the clock, touches I/O or keeps state.  The
same arguments always produce the same answer, so the predicates can be
called as often as the refresh scheduler likes.

Boundary rule:
    Remaining time is compared as an exact ``timedelta`` (microsecond
    resolution, no float hours).  Landing exactly on a threshold yields the
    more-revealed state: 3h00m00s before departure is already ``qr_only``,
    1h00m00s before is already ``full``, and an activity is ``revealed``
    from exactly one hour before its start.

Timestamps are expected to be UTC-aware; parsing and validation happen at
the boundary (see foundation.timestamps).  Predicates only ever subtract
two datetimes, which cannot overflow, so they are total over the whole
datetime range.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from lobby_reveal.domain.enums import RevealKind, RevealState, TripPhase, TripStatus
from lobby_reveal.domain.thresholds import DEFAULT_THRESHOLDS, RevealThresholds

_STATE_ORDER: dict[RevealKind, tuple[RevealState, ...]] = {
    RevealKind.DEPARTURE: (RevealState.HIDDEN, RevealState.QR_ONLY, RevealState.FULL),
    RevealKind.ACTIVITY: (RevealState.HIDDEN, RevealState.REVEALED),
    RevealKind.DESTINATION: (RevealState.HIDDEN, RevealState.APPROXIMATE, RevealState.FULL),
}

SOON_WINDOW = timedelta(hours=24)


# ── Ordering ─────────────────────────────────────────────────────────────────


def state_order(kind: RevealKind) -> tuple[RevealState, ...]:
    """States of *kind* from least to most revealed."""
    return _STATE_ORDER[kind]


def maximal_state(kind: RevealKind) -> RevealState:
    return _STATE_ORDER[kind][-1]


def state_rank(kind: RevealKind, state: RevealState) -> int:
    """Position of *state* in the order of *kind*.

    Raises ValueError for a state that does not belong to *kind*
    (including UNKNOWN, which is unordered).
    """
    return _STATE_ORDER[kind].index(state)


# ── Predicates ───────────────────────────────────────────────────────────────


def departure_reveal_state(
    now: datetime,
    departure_time: datetime,
    thresholds: RevealThresholds = DEFAULT_THRESHOLDS,
) -> RevealState:
    """Ticket visibility: hidden → qr_only (3h) → full (1h)."""
    remaining = departure_time - now
    if remaining <= thresholds.full_before:
        return RevealState.FULL
    if remaining <= thresholds.qr_only_before:
        return RevealState.QR_ONLY
    return RevealState.HIDDEN


def activity_reveal_state(
    now: datetime,
    start_time: datetime,
    thresholds: RevealThresholds = DEFAULT_THRESHOLDS,
) -> RevealState:
    """Schedule item visibility: revealed from one hour before start."""
    if start_time - now <= thresholds.activity_before:
        return RevealState.REVEALED
    return RevealState.HIDDEN


def destination_reveal_state(
    now: datetime,
    departure_time: datetime,
    thresholds: RevealThresholds = DEFAULT_THRESHOLDS,
) -> RevealState:
    """Destination and weather: hidden → approximate (3h) → full (1h).

    Tracks the ticket timeline exactly: while the QR code is available
    the origin and weather conditions are shown but the place is not.
    """
    ticket = departure_reveal_state(now, departure_time, thresholds)
    if ticket == RevealState.FULL:
        return RevealState.FULL
    if ticket == RevealState.QR_ONLY:
        return RevealState.APPROXIMATE
    return RevealState.HIDDEN


def reveal_state(
    kind: RevealKind,
    now: datetime,
    target_time: datetime,
    thresholds: RevealThresholds = DEFAULT_THRESHOLDS,
) -> RevealState:
    """Dispatch to the predicate for *kind*."""
    if kind == RevealKind.DEPARTURE:
        return departure_reveal_state(now, target_time, thresholds)
    if kind == RevealKind.ACTIVITY:
        return activity_reveal_state(now, target_time, thresholds)
    return destination_reveal_state(now, target_time, thresholds)


# ── Transitions ──────────────────────────────────────────────────────────────


def _before(target_time: datetime, lead: timedelta) -> datetime | None:
    try:
        return target_time - lead
    except OverflowError:
        return None


def thresholds_for(
    kind: RevealKind,
    target_time: datetime,
    thresholds: RevealThresholds = DEFAULT_THRESHOLDS,
) -> list[tuple[datetime, RevealState]]:
    """Instants at which *kind* moves into each non-initial state, in order.

    An instant earlier than ``datetime.min`` has passed for every possible
    ``now`` and is left out.
    """
    if kind == RevealKind.ACTIVITY:
        leads = [(thresholds.activity_before, RevealState.REVEALED)]
    else:
        middle = RevealState.QR_ONLY if kind == RevealKind.DEPARTURE else RevealState.APPROXIMATE
        leads = [(thresholds.qr_only_before, middle), (thresholds.full_before, RevealState.FULL)]
    instants = []
    for lead, state in leads:
        at = _before(target_time, lead)
        if at is not None:
            instants.append((at, state))
    return instants


def next_threshold(
    kind: RevealKind,
    now: datetime,
    target_time: datetime,
    thresholds: RevealThresholds = DEFAULT_THRESHOLDS,
) -> tuple[datetime, RevealState] | None:
    """The next transition still ahead of *now*, or None once maximal."""
    for at, state in thresholds_for(kind, target_time, thresholds):
        if now < at:
            return at, state
    return None


# ── Activity & trip lifecycle ───────────────────────────────────────────────


def activity_is_past(
    now: datetime,
    start_time: datetime,
    end_time: datetime | None = None,
) -> bool:
    """True once the activity is over (its end, or its start if no end)."""
    return now > (end_time or start_time)


def trip_phase(
    now: datetime,
    departure_time: datetime | None,
    status: TripStatus = TripStatus.PLANNING,
    soon_window: timedelta = SOON_WINDOW,
) -> TripPhase:
    """Card label for a trip: completed, in progress, soon or planned."""
    if status == TripStatus.COMPLETED:
        return TripPhase.COMPLETED
    if departure_time is None:
        return TripPhase.UNSCHEDULED
    remaining = departure_time - now
    if remaining < timedelta(0):
        return TripPhase.IN_PROGRESS
    if remaining <= soon_window:
        return TripPhase.SOON
    return TripPhase.PLANNED
