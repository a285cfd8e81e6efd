"""In-memory trip store with async-safe access.

Design notes:
    - Stands in for the hosted data layer.  It holds exactly the records
      the reveal engine reads: trips, members, tickets and schedule items.
    - An asyncio.Lock guards all mutations so concurrent request handlers
      never corrupt state.
    - The store never computes reveal state.  It hands out records with
      their raw ISO-8601 timestamps; callers go through RevealPolicy.
    - Edits to departure or start times are plain writes.  Telling live
      subscriptions about them is the caller's job (RevealScheduler.retarget).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from lobby_reveal.domain.enums import ViewerRole
from lobby_reveal.models.records import ScheduleItem, Ticket, Trip, TripMember

logger = logging.getLogger(__name__)


_UNSCHEDULED = datetime.max.replace(tzinfo=timezone.utc)


def _start_key(item: ScheduleItem) -> datetime:
    return item.start_at or _UNSCHEDULED


class TripNotFoundError(LookupError):
    """Raised when a trip id or lobby code matches nothing."""


class ScheduleItemNotFoundError(LookupError):
    """Raised when a schedule item id matches nothing within a trip."""


class LobbyCodeTakenError(ValueError):
    """Raised when a lobby code already belongs to another trip."""


class TripStore:
    """Async-safe, in-memory store for trip records."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._trips: dict[str, Trip] = {}
        self._members: dict[str, dict[str, TripMember]] = {}
        self._tickets: dict[str, list[Ticket]] = {}
        self._schedule: dict[str, dict[str, ScheduleItem]] = {}

    # ── Trips ────────────────────────────────────────────────────────────

    async def put_trip(self, trip: Trip) -> Trip:
        """Insert or replace *trip*.  Its admin is registered as a member.

        Lobby codes are unique across trips, ignoring case.
        """
        code = trip.lobby_code.upper()
        async with self._lock:
            for other in self._trips.values():
                if other.id != trip.id and other.lobby_code.upper() == code:
                    raise LobbyCodeTakenError(f"Lobby code {code} is already in use")
            self._trips[trip.id] = trip
            members = self._members.setdefault(trip.id, {})
            members[trip.admin_id] = TripMember(
                trip_id=trip.id, user_id=trip.admin_id, role=ViewerRole.ADMIN
            )
            self._tickets.setdefault(trip.id, [])
            self._schedule.setdefault(trip.id, {})
            logger.info("Stored trip %s (%s)", trip.id, trip.lobby_code)
            return trip

    async def get_trip(self, trip_id: str) -> Trip:
        async with self._lock:
            return self._require_trip(trip_id)

    async def find_by_lobby_code(self, lobby_code: str) -> Trip:
        code = lobby_code.strip().upper()
        async with self._lock:
            for trip in self._trips.values():
                if trip.lobby_code.upper() == code:
                    return trip
        raise TripNotFoundError(f"No trip with lobby code {code}")

    async def update_departure_time(self, trip_id: str, departure_time: str | None) -> Trip:
        async with self._lock:
            trip = self._require_trip(trip_id)
            updated = trip.model_copy(update={"departure_time": departure_time})
            self._trips[trip_id] = updated
            logger.info("Trip %s departure changed to %s", trip_id, departure_time)
            return updated

    # ── Members ──────────────────────────────────────────────────────────

    async def add_member(self, member: TripMember) -> TripMember:
        async with self._lock:
            self._require_trip(member.trip_id)
            self._members[member.trip_id][member.user_id] = member
            return member

    async def role_of(self, trip_id: str, user_id: str) -> ViewerRole | None:
        """The user's role in the trip, or None if not a member."""
        async with self._lock:
            self._require_trip(trip_id)
            member = self._members[trip_id].get(user_id)
            return member.role if member else None

    async def members_of(self, trip_id: str) -> list[TripMember]:
        async with self._lock:
            self._require_trip(trip_id)
            return list(self._members[trip_id].values())

    # ── Tickets ──────────────────────────────────────────────────────────

    async def put_ticket(self, ticket: Ticket) -> Ticket:
        async with self._lock:
            self._require_trip(ticket.trip_id)
            tickets = [t for t in self._tickets[ticket.trip_id] if t.id != ticket.id]
            tickets.append(ticket)
            self._tickets[ticket.trip_id] = tickets
            return ticket

    async def tickets_for(self, trip_id: str, member_id: str) -> list[Ticket]:
        async with self._lock:
            self._require_trip(trip_id)
            return [t for t in self._tickets[trip_id] if t.member_id == member_id]

    # ── Schedule ─────────────────────────────────────────────────────────

    async def put_schedule_item(self, item: ScheduleItem) -> ScheduleItem:
        async with self._lock:
            self._require_trip(item.trip_id)
            self._schedule[item.trip_id][item.id] = item
            return item

    async def schedule_for(self, trip_id: str) -> list[ScheduleItem]:
        """Schedule items ordered by start time (unscheduled items last)."""
        async with self._lock:
            self._require_trip(trip_id)
            items = list(self._schedule[trip_id].values())
        return sorted(items, key=_start_key)

    async def update_schedule_start(
        self,
        trip_id: str,
        item_id: str,
        start_time: str | None,
        end_time: str | None = None,
    ) -> ScheduleItem:
        async with self._lock:
            self._require_trip(trip_id)
            item = self._schedule[trip_id].get(item_id)
            if item is None:
                raise ScheduleItemNotFoundError(f"No schedule item {item_id} in trip {trip_id}")
            updated = item.model_copy(update={"start_time": start_time, "end_time": end_time})
            self._schedule[trip_id][item_id] = updated
            logger.info("Schedule item %s start changed to %s", item_id, start_time)
            return updated

    # ── Internals ────────────────────────────────────────────────────────

    def _require_trip(self, trip_id: str) -> Trip:
        """Must be called while holding self._lock."""
        trip = self._trips.get(trip_id)
        if trip is None:
            raise TripNotFoundError(f"Trip {trip_id} not found")
        return trip
