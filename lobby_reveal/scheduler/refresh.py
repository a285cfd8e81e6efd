"""Live refresh scheduler — keeps reveal decisions current without a reload.

Reveal state is a function of time, not a stored column, so nothing ever
pushes a transition.  Each subscription owns one asyncio task that sleeps
for its interval and then re-evaluates the policy for its target.

Design notes:
    - Single event loop, cooperative.  Recomputation is synchronous and
      local; no network I/O happens on the tick path.
    - on_change observers are awaited only when the state differs from
      the previous tick.  on_tick observers (countdown displays) are
      awaited every tick.
    - Subscriptions have a scoped lifetime: unwatch() cancels the task and
      marks the subscription inactive, after which no observer is called.
      Use ``async with scheduler.subscription(...)`` to tie it to a block.
    - retarget() is the hook for data-layer edits: the timeline of the
      edited target restarts and is re-evaluated immediately.
    - A failing observer is logged and does not stop the timer.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Awaitable, Callable
from uuid import UUID

from lobby_reveal.core.policy import RevealPolicy
from lobby_reveal.domain.enums import RevealKind, ViewerRole
from lobby_reveal.domain.snapshot import RevealDecision
from lobby_reveal.foundation.identifiers import new_id

logger = logging.getLogger(__name__)

Observer = Callable[[RevealDecision], Awaitable[None]]


class RevealSubscription:
    """One watched target for one viewer.

    Mutated only by the owning RevealScheduler.
    """

    __slots__ = (
        "subscription_id",
        "key",
        "kind",
        "target_time",
        "viewer_role",
        "interval",
        "on_change",
        "on_tick",
        "decision",
        "active",
        "_task",
    )

    def __init__(
        self,
        key: str,
        kind: RevealKind,
        target_time: datetime | None,
        viewer_role: ViewerRole,
        interval: timedelta,
        on_change: Observer | None,
        on_tick: Observer | None,
        decision: RevealDecision,
    ) -> None:
        self.subscription_id: UUID = new_id()
        self.key = key
        self.kind = kind
        self.target_time = target_time
        self.viewer_role = viewer_role
        self.interval = interval
        self.on_change = on_change
        self.on_tick = on_tick
        self.decision = decision
        self.active = True
        self._task: asyncio.Task | None = None

    def __repr__(self) -> str:
        return (
            f"RevealSubscription(key={self.key!r}, kind={self.kind.value}, "
            f"state={self.decision.state.value}, active={self.active})"
        )


class RevealScheduler:
    """Owns the refresh timers for every displayed reveal target.

    Args:
        policy: The RevealPolicy every tick goes through.
        reveal_interval: Cadence for state-only subscriptions.
        countdown_interval: Cadence for subscriptions with an on_tick observer.
    """

    def __init__(
        self,
        policy: RevealPolicy,
        reveal_interval: timedelta = timedelta(seconds=60),
        countdown_interval: timedelta = timedelta(seconds=1),
    ) -> None:
        if reveal_interval <= timedelta(0) or countdown_interval <= timedelta(0):
            raise ValueError("refresh intervals must be positive")
        self._policy = policy
        self._reveal_interval = reveal_interval
        self._countdown_interval = countdown_interval
        self._subscriptions: dict[UUID, RevealSubscription] = {}

    # ── Lifetime ─────────────────────────────────────────────────────────

    def watch(
        self,
        key: str,
        kind: RevealKind,
        target_time: datetime | None,
        viewer_role: ViewerRole,
        on_change: Observer | None = None,
        on_tick: Observer | None = None,
        interval: timedelta | None = None,
    ) -> RevealSubscription:
        """Start refreshing a target.  Must be called from a running loop.

        The initial decision is available as ``subscription.decision``;
        observers only hear about later ticks.
        """
        if interval is None:
            interval = self._countdown_interval if on_tick else self._reveal_interval

        sub = RevealSubscription(
            key=key,
            kind=kind,
            target_time=target_time,
            viewer_role=viewer_role,
            interval=interval,
            on_change=on_change,
            on_tick=on_tick,
            decision=self._policy.evaluate(kind, target_time, viewer_role),
        )
        self._subscriptions[sub.subscription_id] = sub
        sub._task = asyncio.get_running_loop().create_task(self._run(sub))
        logger.info(
            "Watching %s (%s) for %s every %ss, state %s",
            key, kind.value, viewer_role.value, interval.total_seconds(), sub.decision.state.value,
        )
        return sub

    def unwatch(self, sub: RevealSubscription) -> None:
        """Stop *sub*.  No observer of *sub* runs after this returns."""
        if not sub.active:
            return
        sub.active = False
        self._subscriptions.pop(sub.subscription_id, None)
        if sub._task is not None and sub._task is not asyncio.current_task():
            sub._task.cancel()
        logger.info("Stopped watching %s (%s)", sub.key, sub.kind.value)

    @asynccontextmanager
    async def subscription(
        self,
        key: str,
        kind: RevealKind,
        target_time: datetime | None,
        viewer_role: ViewerRole,
        on_change: Observer | None = None,
        on_tick: Observer | None = None,
        interval: timedelta | None = None,
    ) -> AsyncIterator[RevealSubscription]:
        """Scoped watch(): the timer is cancelled when the block exits."""
        sub = self.watch(key, kind, target_time, viewer_role, on_change, on_tick, interval)
        try:
            yield sub
        finally:
            self.unwatch(sub)

    async def close(self) -> None:
        """Cancel every timer and wait for the tasks to finish."""
        subs = list(self._subscriptions.values())
        tasks = [s._task for s in subs if s._task is not None]
        for sub in subs:
            self.unwatch(sub)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @property
    def active_count(self) -> int:
        return len(self._subscriptions)

    def subscriptions_for(self, key: str) -> list[RevealSubscription]:
        return [s for s in self._subscriptions.values() if s.key == key]

    # ── Recomputation ────────────────────────────────────────────────────

    async def evaluate(self, sub: RevealSubscription) -> bool:
        """Recompute *sub* now and notify observers.  Returns True on change."""
        if not sub.active:
            return False

        decision = self._policy.evaluate(sub.kind, sub.target_time, sub.viewer_role)
        previous = sub.decision
        sub.decision = decision
        changed = decision.state != previous.state

        if changed:
            logger.info(
                "Reveal transition %s (%s): %s → %s",
                sub.key, sub.viewer_role.value, previous.state.value, decision.state.value,
            )
            await self._notify(sub, sub.on_change, decision)
        if sub.on_tick is not None:
            await self._notify(sub, sub.on_tick, decision)
        return changed

    async def refresh(self, key: str | None = None) -> int:
        """Re-evaluate every subscription (or those for *key*) immediately.

        Returns how many changed state.
        """
        subs = list(self._subscriptions.values())
        if key is not None:
            subs = [s for s in subs if s.key == key]
        changed = 0
        for sub in subs:
            if await self.evaluate(sub):
                changed += 1
        return changed

    async def retarget(self, key: str, target_time: datetime | None) -> int:
        """Point every subscription for *key* at a new target time.

        Called when the data layer reports an edit.  Returns the number of
        subscriptions affected.
        """
        subs = self.subscriptions_for(key)
        for sub in subs:
            sub.target_time = target_time
            await self.evaluate(sub)
        if subs:
            logger.info("Retargeted %d subscription(s) for %s", len(subs), key)
        return len(subs)

    # ── Internals ────────────────────────────────────────────────────────

    async def _run(self, sub: RevealSubscription) -> None:
        seconds = sub.interval.total_seconds()
        while sub.active:
            await asyncio.sleep(seconds)
            await self.evaluate(sub)

    async def _notify(
        self,
        sub: RevealSubscription,
        observer: Observer | None,
        decision: RevealDecision,
    ) -> None:
        if observer is None or not sub.active:
            return
        try:
            await observer(decision)
        except Exception as exc:
            logger.error("Reveal observer for %s failed: %s", sub.key, exc, exc_info=True)
