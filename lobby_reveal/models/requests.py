"""Request bodies accepted by the HTTP API.

Timestamps written through the API are validated here, at the boundary:
an unparseable value is rejected with 422.  Records that already sit in
the data layer are not re-validated; a bad stored value simply resolves
to the ``unknown`` reveal state.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from lobby_reveal.domain.enums import ScheduleItemType, TicketType
from lobby_reveal.foundation.timestamps import parse_timestamp


def _check_timestamp(v: str | None) -> str | None:
    if v is not None and parse_timestamp(v) is None:
        raise ValueError(f"not an ISO-8601 timestamp: {v!r}")
    return v


class TripCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    admin_id: str = Field(..., min_length=1)
    departure_time: str | None = None
    destination: str | None = None
    weather_summary: str | None = None
    lobby_code: str | None = Field(None, min_length=4, max_length=12)

    @field_validator("departure_time")
    @classmethod
    def departure_must_parse(cls, v: str | None) -> str | None:
        return _check_timestamp(v)


class JoinRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class DepartureUpdate(BaseModel):
    departure_time: str | None = None

    @field_validator("departure_time")
    @classmethod
    def departure_must_parse(cls, v: str | None) -> str | None:
        return _check_timestamp(v)


class TicketCreate(BaseModel):
    member_id: str = Field(..., min_length=1)
    type: TicketType = TicketType.OTHER
    carrier: str | None = None
    departure_location: str = Field(..., min_length=1)
    arrival_location: str = Field(..., min_length=1)
    departure_time: str | None = None
    arrival_time: str | None = None
    seat_number: str | None = None
    gate: str | None = None
    booking_reference: str | None = None
    qr_code_url: str | None = None
    full_ticket_url: str | None = None


class ScheduleItemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
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

    @field_validator("start_time", "end_time")
    @classmethod
    def times_must_parse(cls, v: str | None) -> str | None:
        return _check_timestamp(v)


class ScheduleTimeUpdate(BaseModel):
    start_time: str | None = None
    end_time: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def times_must_parse(cls, v: str | None) -> str | None:
        return _check_timestamp(v)
