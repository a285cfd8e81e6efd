"""REST endpoints for trip lobbies.

Paths (prefix /api):
    POST  /trips                                  create a trip
    POST  /lobbies/{lobby_code}/join              join as member
    POST  /trips/{trip_id}/tickets                admin: add a ticket
    POST  /trips/{trip_id}/schedule               admin: add a schedule item
    PATCH /trips/{trip_id}/departure              admin: move departure
    PATCH /trips/{trip_id}/schedule/{item_id}     admin: move an activity
    GET   /trips/{trip_id}/lobby                  redacted lobby view
    GET   /trips/{trip_id}/reveal                 reveal decisions only

Every read goes through RevealPolicy; no handler branches on reveal
states itself.  Edits to target times retarget live subscriptions so
connected clients see the new timeline immediately.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, HTTPException

from lobby_reveal.core.lobby_view import (
    activity_key,
    build_lobby_view,
    departure_key,
    destination_key,
)
from lobby_reveal.core.policy import RevealPolicy
from lobby_reveal.domain.enums import RevealKind, ViewerRole
from lobby_reveal.domain.reveal import SOON_WINDOW
from lobby_reveal.foundation.identifiers import new_id, new_lobby_code
from lobby_reveal.models.records import ScheduleItem, Ticket, Trip, TripMember
from lobby_reveal.models.requests import (
    DepartureUpdate,
    JoinRequest,
    ScheduleItemCreate,
    ScheduleTimeUpdate,
    TicketCreate,
    TripCreate,
)
from lobby_reveal.scheduler.refresh import RevealScheduler
from lobby_reveal.store.trip_store import (
    LobbyCodeTakenError,
    ScheduleItemNotFoundError,
    TripNotFoundError,
    TripStore,
)

logger = logging.getLogger(__name__)

_LOBBY_CODE_ATTEMPTS = 5


async def viewer_role(store: TripStore, trip_id: str, user_id: str) -> ViewerRole:
    """Role of *user_id* in the trip; 404 for unknown trips, 403 for outsiders."""
    try:
        role = await store.role_of(trip_id, user_id)
    except TripNotFoundError:
        raise HTTPException(status_code=404, detail=f"Trip {trip_id} not found")
    if role is None:
        raise HTTPException(status_code=403, detail="Not a member of this trip")
    return role


async def require_admin(store: TripStore, trip_id: str, user_id: str) -> None:
    if await viewer_role(store, trip_id, user_id) != ViewerRole.ADMIN:
        raise HTTPException(status_code=403, detail="Only the trip admin can do this")


def create_lobby_router(
    store: TripStore,
    policy: RevealPolicy,
    scheduler: RevealScheduler,
    soon_window: timedelta = SOON_WINDOW,
) -> APIRouter:
    """Factory that wires the lobby endpoints to a store, policy and scheduler."""

    router = APIRouter(prefix="/api", tags=["lobby"])

    # ── Trips & members ───────────────────────────────────────────────

    @router.post("/trips", status_code=201)
    async def create_trip(body: TripCreate) -> Trip:
        trip_id = str(new_id())
        for _ in range(_LOBBY_CODE_ATTEMPTS):
            trip = Trip(
                id=trip_id,
                name=body.name,
                lobby_code=(body.lobby_code or new_lobby_code()).upper(),
                admin_id=body.admin_id,
                departure_time=body.departure_time,
                destination=body.destination,
                weather_summary=body.weather_summary,
            )
            try:
                return await store.put_trip(trip)
            except LobbyCodeTakenError as exc:
                if body.lobby_code:
                    raise HTTPException(status_code=409, detail=str(exc))
                logger.warning("Generated lobby code %s collided, retrying", trip.lobby_code)
        raise HTTPException(status_code=503, detail="Could not allocate a lobby code")

    @router.post("/lobbies/{lobby_code}/join")
    async def join_lobby(lobby_code: str, body: JoinRequest) -> dict[str, Any]:
        try:
            trip = await store.find_by_lobby_code(lobby_code)
        except TripNotFoundError:
            raise HTTPException(status_code=404, detail="Invalid lobby code")
        existing = await store.role_of(trip.id, body.user_id)
        if existing is None:
            await store.add_member(TripMember(trip_id=trip.id, user_id=body.user_id))
            logger.info("User %s joined trip %s", body.user_id, trip.id)
        role = existing or ViewerRole.MEMBER
        return {"trip_id": trip.id, "role": role.value}

    # ── Admin writes ──────────────────────────────────────────────────

    @router.post("/trips/{trip_id}/tickets", status_code=201)
    async def add_ticket(trip_id: str, user_id: str, body: TicketCreate) -> Ticket:
        await require_admin(store, trip_id, user_id)
        if await store.role_of(trip_id, body.member_id) is None:
            raise HTTPException(status_code=404, detail=f"Member {body.member_id} is not in this trip")
        ticket = Ticket(id=str(new_id()), trip_id=trip_id, **body.model_dump())
        return await store.put_ticket(ticket)

    @router.post("/trips/{trip_id}/schedule", status_code=201)
    async def add_schedule_item(trip_id: str, user_id: str, body: ScheduleItemCreate) -> ScheduleItem:
        await require_admin(store, trip_id, user_id)
        item = ScheduleItem(id=str(new_id()), trip_id=trip_id, **body.model_dump())
        return await store.put_schedule_item(item)

    @router.patch("/trips/{trip_id}/departure")
    async def move_departure(trip_id: str, user_id: str, body: DepartureUpdate) -> dict[str, Any]:
        await require_admin(store, trip_id, user_id)
        trip = await store.update_departure_time(trip_id, body.departure_time)
        departure = trip.departure_at
        retargeted = await scheduler.retarget(departure_key(trip_id), departure)
        retargeted += await scheduler.retarget(destination_key(trip_id), departure)
        return {"trip": trip.model_dump(mode="json"), "retargeted": retargeted}

    @router.patch("/trips/{trip_id}/schedule/{item_id}")
    async def move_schedule_item(
        trip_id: str,
        item_id: str,
        user_id: str,
        body: ScheduleTimeUpdate,
    ) -> dict[str, Any]:
        await require_admin(store, trip_id, user_id)
        try:
            item = await store.update_schedule_start(trip_id, item_id, body.start_time, body.end_time)
        except ScheduleItemNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        retargeted = await scheduler.retarget(activity_key(trip_id, item_id), item.start_at)
        return {"item": item.model_dump(mode="json"), "retargeted": retargeted}

    # ── Reads ─────────────────────────────────────────────────────────

    @router.get("/trips/{trip_id}/lobby")
    async def lobby(trip_id: str, user_id: str) -> dict[str, Any]:
        role = await viewer_role(store, trip_id, user_id)
        trip = await store.get_trip(trip_id)
        view = build_lobby_view(
            policy,
            trip,
            role,
            tickets=await store.tickets_for(trip_id, user_id),
            schedule=await store.schedule_for(trip_id),
            soon_window=soon_window,
        )
        return view.model_dump(mode="json")

    @router.get("/trips/{trip_id}/reveal")
    async def reveal(trip_id: str, user_id: str) -> dict[str, Any]:
        role = await viewer_role(store, trip_id, user_id)
        trip = await store.get_trip(trip_id)
        now = policy.now()
        departure = trip.departure_at
        return {
            "departure": policy.evaluate(RevealKind.DEPARTURE, departure, role, now=now).to_dict(),
            "destination": policy.evaluate(RevealKind.DESTINATION, departure, role, now=now).to_dict(),
            "activities": {
                item.id: policy.evaluate(RevealKind.ACTIVITY, item.start_at, role, now=now).to_dict()
                for item in await store.schedule_for(trip_id)
            },
        }

    return router
