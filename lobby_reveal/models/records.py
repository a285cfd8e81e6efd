"""Pydantic models for the records the data layer hands to the reveal engine.

Only the attributes that reveal decisions or redaction read are modelled.
Timestamps stay ISO-8601 strings exactly as stored; they are parsed at the
boundary via ``parse_timestamp`` so a bad value degrades to ``unknown``
instead of rejecting the whole record.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from lobby_reveal.domain.enums import ScheduleItemType, TicketType, TripStatus, ViewerRole
from lobby_reveal.foundation.timestamps import parse_timestamp


class Trip(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    lobby_code: str = Field(..., min_length=4, max_length=12)
    admin_id: str = Field(..., min_length=1)
    departure_time: str | None = Field(None, description="ISO-8601, hidden reveals key off this")
    destination: str | None = Field(None, description="Hidden from members until revealed")
    weather_summary: str | None = Field(None, description="Forecast text shown from the approximate reveal")
    status: TripStatus = TripStatus.PLANNING

    @property
    def departure_at(self) -> datetime | None:
        return parse_timestamp(self.departure_time)


class TripMember(BaseModel):
    trip_id: str
    user_id: str
    role: ViewerRole = ViewerRole.MEMBER


class Ticket(BaseModel):
    id: str
    trip_id: str
    member_id: str
    type: TicketType = TicketType.OTHER
    carrier: str | None = None
    departure_location: str
    arrival_location: str
    departure_time: str | None = None
    arrival_time: str | None = None
    seat_number: str | None = None
    gate: str | None = None
    booking_reference: str | None = None
    qr_code_url: str | None = None
    full_ticket_url: str | None = None


class ScheduleItem(BaseModel):
    id: str
    trip_id: str
    title: str
    description: str | None = None
    location: str | None = None
    location_url: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    type: ScheduleItemType = ScheduleItemType.ACTIVITY
    booking_url: str | None = None
    reservation_code: str | None = None
    contact_info: str | None = None
    estimated_cost: float | None = Field(None, ge=0.0)

    @property
    def start_at(self) -> datetime | None:
        return parse_timestamp(self.start_time)

    @property
    def end_at(self) -> datetime | None:
        return parse_timestamp(self.end_time)
