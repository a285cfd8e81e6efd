"""Visibility contract — what of a record a given reveal state exposes.

The policy decides the state; these functions only apply it.  They never
look at the clock or the viewer's role themselves, so every surface that
renders tickets, destinations or schedule items gets identical redaction.

    state        ticket                          destination        activity
    ───────────  ──────────────────────────────  ─────────────────  ─────────────
    unknown      id only                         nothing            id only
    hidden       departure time                  nothing            times, surprise
    qr_only      carrier, origin, QR, "???"      -                  -
    approximate  -                               weather only       -
    full         everything                      place + weather    -
    revealed     -                               -                  everything
"""

from __future__ import annotations

from pydantic import BaseModel

from lobby_reveal.domain.enums import RevealState, ScheduleItemType, TicketType
from lobby_reveal.models.records import ScheduleItem, Ticket

MASKED = "???"


class TicketView(BaseModel):
    id: str
    state: RevealState
    type: TicketType | None = None
    carrier: str | None = None
    departure_location: str | None = None
    arrival_location: str | None = None
    departure_time: str | None = None
    arrival_time: str | None = None
    seat_number: str | None = None
    gate: str | None = None
    booking_reference: str | None = None
    qr_code_url: str | None = None
    full_ticket_url: str | None = None


class DestinationView(BaseModel):
    state: RevealState
    destination: str | None = None
    weather_summary: str | None = None


class ScheduleItemView(BaseModel):
    id: str
    state: RevealState
    surprise: bool = False
    past: bool = False
    start_time: str | None = None
    end_time: str | None = None
    reveal_eta: str | None = None
    title: str | None = None
    type: ScheduleItemType | None = None
    description: str | None = None
    location: str | None = None
    location_url: str | None = None
    booking_url: str | None = None
    reservation_code: str | None = None
    contact_info: str | None = None
    estimated_cost: float | None = None


def redact_ticket(ticket: Ticket, state: RevealState) -> TicketView:
    if state == RevealState.FULL:
        return TicketView(state=state, **ticket.model_dump(exclude={"trip_id", "member_id"}))
    if state == RevealState.QR_ONLY:
        return TicketView(
            id=ticket.id,
            state=state,
            type=ticket.type,
            carrier=ticket.carrier,
            departure_location=ticket.departure_location,
            arrival_location=MASKED,
            departure_time=ticket.departure_time,
            qr_code_url=ticket.qr_code_url,
        )
    if state == RevealState.HIDDEN:
        return TicketView(id=ticket.id, state=state, departure_time=ticket.departure_time)
    return TicketView(id=ticket.id, state=state)


def redact_destination(
    destination: str | None,
    weather_summary: str | None,
    state: RevealState,
) -> DestinationView:
    if state == RevealState.FULL:
        return DestinationView(state=state, destination=destination, weather_summary=weather_summary)
    if state == RevealState.APPROXIMATE:
        return DestinationView(state=state, weather_summary=weather_summary)
    return DestinationView(state=state)


def redact_schedule_item(
    item: ScheduleItem,
    state: RevealState,
    past: bool = False,
    reveal_eta: str | None = None,
) -> ScheduleItemView:
    if state == RevealState.REVEALED:
        return ScheduleItemView(
            state=state,
            past=past,
            **item.model_dump(exclude={"trip_id"}),
        )
    if state == RevealState.HIDDEN:
        return ScheduleItemView(
            id=item.id,
            state=state,
            surprise=True,
            past=past,
            start_time=item.start_time,
            end_time=item.end_time,
            reveal_eta=reveal_eta,
        )
    return ScheduleItemView(id=item.id, state=state)
