"""WebSocket endpoint: streams live reveal transitions for one trip.

Path: /ws/trips/{trip_id}/reveal?user_id=...

On connect the viewer gets a ``snapshot`` message with the current
decision for every displayed target.  After that:
    - ``reveal_changed`` whenever a target moves to a new state,
    - ``countdown`` every countdown tick for the ticket reveal.

All subscriptions are entered on an AsyncExitStack bound to the
connection, so they are cancelled when the client goes away.  No
timer outlives its socket.
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from datetime import datetime
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from lobby_reveal.core.countdown import countdown_label
from lobby_reveal.core.lobby_view import activity_key, departure_key, destination_key
from lobby_reveal.domain.enums import RevealKind, ViewerRole
from lobby_reveal.domain.snapshot import RevealDecision
from lobby_reveal.scheduler.refresh import RevealScheduler
from lobby_reveal.store.trip_store import TripNotFoundError, TripStore

logger = logging.getLogger(__name__)

CLOSE_NOT_FOUND = 4404
CLOSE_FORBIDDEN = 4403


def _changed_message(key: str, decision: RevealDecision) -> dict[str, Any]:
    return {"type": "reveal_changed", "key": key, "decision": decision.to_dict()}


def _countdown_message(key: str, decision: RevealDecision) -> dict[str, Any]:
    return {
        "type": "countdown",
        "key": key,
        "state": decision.state.value,
        "label": countdown_label(decision.state),
        "countdown": decision.countdown,
    }


class RevealStream:
    """Subscriptions of one connected viewer."""

    def __init__(self, websocket: WebSocket, scheduler: RevealScheduler, role: ViewerRole) -> None:
        self._ws = websocket
        self._scheduler = scheduler
        self._role = role
        self._stack = AsyncExitStack()
        self.snapshot: dict[str, dict[str, Any]] = {}

    async def __aenter__(self) -> RevealStream:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self._stack.aclose()

    async def watch(
        self,
        key: str,
        kind: RevealKind,
        target_time: datetime | None,
        countdown: bool = False,
    ) -> None:
        async def on_change(decision: RevealDecision) -> None:
            await self._ws.send_json(_changed_message(key, decision))

        async def on_tick(decision: RevealDecision) -> None:
            await self._ws.send_json(_countdown_message(key, decision))

        sub = await self._stack.enter_async_context(
            self._scheduler.subscription(
                key,
                kind,
                target_time,
                self._role,
                on_change=on_change,
                on_tick=on_tick if countdown else None,
            )
        )
        self.snapshot[key] = sub.decision.to_dict()


def create_reveal_ws_router(store: TripStore, scheduler: RevealScheduler) -> APIRouter:
    """Factory that wires the reveal stream to a store and scheduler."""

    router = APIRouter()

    @router.websocket("/ws/trips/{trip_id}/reveal")
    async def reveal_stream(websocket: WebSocket, trip_id: str, user_id: str) -> None:
        try:
            role = await store.role_of(trip_id, user_id)
        except TripNotFoundError:
            await websocket.close(code=CLOSE_NOT_FOUND)
            return
        if role is None:
            await websocket.close(code=CLOSE_FORBIDDEN)
            return

        await websocket.accept()
        trip = await store.get_trip(trip_id)
        schedule = await store.schedule_for(trip_id)
        logger.info("Reveal stream opened: trip %s, user %s (%s)", trip_id, user_id, role.value)

        async with RevealStream(websocket, scheduler, role) as stream:
            departure = trip.departure_at
            await stream.watch(departure_key(trip_id), RevealKind.DEPARTURE, departure, countdown=True)
            await stream.watch(destination_key(trip_id), RevealKind.DESTINATION, departure)
            for item in schedule:
                await stream.watch(activity_key(trip_id, item.id), RevealKind.ACTIVITY, item.start_at)

            await websocket.send_json({"type": "snapshot", "decisions": stream.snapshot})

            try:
                while True:
                    data = await websocket.receive_text()
                    if data.strip().lower() == "ping":
                        await websocket.send_text("pong")
            except WebSocketDisconnect:
                logger.info("Reveal stream closed: trip %s, user %s", trip_id, user_id)

    return router
