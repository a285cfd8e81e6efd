from lobby_reveal.models.records import ScheduleItem, Ticket, Trip, TripMember

__all__ = ["Trip", "TripMember", "Ticket", "ScheduleItem"]
