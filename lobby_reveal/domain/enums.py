"""Controlled enumerations for the lobby-reveal domain.

Every categorical field in the domain MUST reference an enum defined here.
Free-form strings are not acceptable for classification fields.
"""

from __future__ import annotations

from enum import Enum


class RevealKind(str, Enum):
    """What a reveal decision is about."""

    DEPARTURE = "departure"
    ACTIVITY = "activity"
    DESTINATION = "destination"


class RevealState(str, Enum):
    """Discrete visibility levels.

    Departure uses HIDDEN < QR_ONLY < FULL, activities HIDDEN < REVEALED,
    destinations HIDDEN < APPROXIMATE < FULL.  UNKNOWN sits outside every
    order and means the target timestamp is missing.
    """

    HIDDEN = "hidden"
    QR_ONLY = "qr_only"
    APPROXIMATE = "approximate"
    FULL = "full"
    REVEALED = "revealed"
    UNKNOWN = "unknown"


class ViewerRole(str, Enum):
    """Role of the requesting identity within a trip."""

    ADMIN = "admin"
    MEMBER = "member"


class TripStatus(str, Enum):
    """Status stored on the trip record by the data layer."""

    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"


class TripPhase(str, Enum):
    """Derived, time-based phase shown on trip cards."""

    PLANNED = "planned"
    SOON = "soon"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    UNSCHEDULED = "unscheduled"


class TicketType(str, Enum):
    FLIGHT = "flight"
    TRAIN = "train"
    BUS = "bus"
    EVENT = "event"
    OTHER = "other"


class ScheduleItemType(str, Enum):
    TRAVEL = "travel"
    ACTIVITY = "activity"
    MEAL = "meal"
    ACCOMMODATION = "accommodation"
    FREE_TIME = "free_time"
    MEETING = "meeting"
