"""RevealPolicy — the single place where reveal decisions are made.

Design principles:
    1. Pure: resolve() depends only on its arguments.
    2. No side effects, no state mutation, no I/O.
    3. Admin bypass: admins see the maximal state of a known target.
    4. A missing target is UNKNOWN for every role.  It is never coerced to
       HIDDEN (would suppress available info) or FULL (would leak).

Every view that needs to know what a viewer may see calls through here;
nothing else branches on hidden / qr_only / full.
"""

from __future__ import annotations

import logging
from datetime import datetime

from lobby_reveal.core.countdown import format_countdown
from lobby_reveal.domain.enums import RevealKind, RevealState, ViewerRole
from lobby_reveal.domain.reveal import maximal_state, next_threshold, reveal_state
from lobby_reveal.domain.snapshot import RevealDecision
from lobby_reveal.domain.thresholds import DEFAULT_THRESHOLDS, RevealThresholds
from lobby_reveal.foundation.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class RevealPolicy:
    """Combines the reveal predicates with the viewer's role.

    Args:
        thresholds: Transition durations (validated on construction).
        clock: Source of "now" for evaluate() when none is passed.
    """

    def __init__(
        self,
        thresholds: RevealThresholds = DEFAULT_THRESHOLDS,
        clock: Clock = utc_now,
    ) -> None:
        self._thresholds = thresholds
        self._clock = clock

    @property
    def thresholds(self) -> RevealThresholds:
        return self._thresholds

    def now(self) -> datetime:
        return self._clock()

    def resolve(
        self,
        kind: RevealKind,
        now: datetime,
        target_time: datetime | None,
        viewer_role: ViewerRole,
    ) -> RevealState:
        """Reveal state of *kind* for *viewer_role* at *now*."""
        if target_time is None:
            return RevealState.UNKNOWN
        if viewer_role == ViewerRole.ADMIN:
            return maximal_state(kind)
        return reveal_state(kind, now, target_time, self._thresholds)

    def evaluate(
        self,
        kind: RevealKind,
        target_time: datetime | None,
        viewer_role: ViewerRole,
        now: datetime | None = None,
    ) -> RevealDecision:
        """Resolve and annotate with the next transition and its countdown."""
        if now is None:
            now = self._clock()
        state = self.resolve(kind, now, target_time, viewer_role)

        upcoming = None
        if state not in (RevealState.UNKNOWN, maximal_state(kind)):
            upcoming = next_threshold(kind, now, target_time, self._thresholds)

        decision = RevealDecision(
            kind=kind,
            state=state,
            viewer_role=viewer_role,
            target_time=target_time,
            evaluated_at=now,
            next_state=upcoming[1] if upcoming else None,
            next_threshold_at=upcoming[0] if upcoming else None,
            countdown=format_countdown(now, upcoming[0]) if upcoming else None,
        )
        logger.debug("Resolved %s for %s → %s", kind.value, viewer_role.value, state.value)
        return decision
