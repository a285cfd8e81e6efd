"""Lobby view assembly — one redacted snapshot of a trip for one viewer.

Evaluates every reveal target of the trip once, at a single ``now``, so
the ticket, destination and schedule in a response never disagree.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel

from lobby_reveal.core.countdown import countdown_label, departure_banner, format_reveal_eta
from lobby_reveal.core.policy import RevealPolicy
from lobby_reveal.core.visibility import (
    DestinationView,
    ScheduleItemView,
    TicketView,
    redact_destination,
    redact_schedule_item,
    redact_ticket,
)
from lobby_reveal.domain.enums import RevealKind, TripPhase, ViewerRole
from lobby_reveal.domain.reveal import SOON_WINDOW, activity_is_past, trip_phase
from lobby_reveal.domain.snapshot import RevealDecision
from lobby_reveal.models.records import ScheduleItem, Ticket, Trip


class LobbyView(BaseModel):
    trip_id: str
    name: str
    lobby_code: str
    viewer_role: ViewerRole
    phase: TripPhase
    departure_time: str | None = None
    departure_countdown: dict | None = None
    ticket_decision: RevealDecision
    ticket_countdown_label: str | None = None
    tickets: list[TicketView]
    destination: DestinationView
    schedule: list[ScheduleItemView]
    evaluated_at: datetime


def departure_key(trip_id: str) -> str:
    return f"{trip_id}:departure"


def destination_key(trip_id: str) -> str:
    return f"{trip_id}:destination"


def activity_key(trip_id: str, item_id: str) -> str:
    return f"{trip_id}:activity:{item_id}"


def schedule_item_view(
    policy: RevealPolicy,
    item: ScheduleItem,
    role: ViewerRole,
    now: datetime,
) -> ScheduleItemView:
    start = item.start_at
    decision = policy.evaluate(RevealKind.ACTIVITY, start, role, now=now)
    past = start is not None and activity_is_past(now, start, item.end_at)
    eta = None
    if decision.next_threshold_at is not None:
        eta = format_reveal_eta(now, decision.next_threshold_at)
    return redact_schedule_item(item, decision.state, past=past, reveal_eta=eta)


def build_lobby_view(
    policy: RevealPolicy,
    trip: Trip,
    role: ViewerRole,
    tickets: list[Ticket],
    schedule: list[ScheduleItem],
    now: datetime | None = None,
    soon_window: timedelta = SOON_WINDOW,
) -> LobbyView:
    if now is None:
        now = policy.now()
    departure = trip.departure_at

    ticket_decision = policy.evaluate(RevealKind.DEPARTURE, departure, role, now=now)
    destination_decision = policy.evaluate(RevealKind.DESTINATION, departure, role, now=now)

    banner = departure_banner(now, departure) if departure is not None else None

    return LobbyView(
        trip_id=trip.id,
        name=trip.name,
        lobby_code=trip.lobby_code,
        viewer_role=role,
        phase=trip_phase(now, departure, trip.status, soon_window),
        departure_time=trip.departure_time,
        departure_countdown=banner.to_dict() if banner else None,
        ticket_decision=ticket_decision,
        ticket_countdown_label=countdown_label(ticket_decision.state),
        tickets=[redact_ticket(t, ticket_decision.state) for t in tickets],
        destination=redact_destination(
            trip.destination, trip.weather_summary, destination_decision.state
        ),
        schedule=[schedule_item_view(policy, item, role, now) for item in schedule],
        evaluated_at=now,
    )
