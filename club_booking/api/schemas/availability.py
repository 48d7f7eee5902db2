from datetime import date, datetime

from pydantic import BaseModel

from club_booking.domain.reservable import ConflictKind
from club_booking.domain.value_objects.time_slot import TimeSlot


class FreeSlotsResponse(BaseModel):
    resource_id: int
    day: date
    free_slots: list[TimeSlot]
    on_hold: bool = False
    hold_expires_at: datetime | None = None


class CalendarDay(BaseModel):
    day: date
    free_slots: list[TimeSlot]


class CalendarResponse(BaseModel):
    resource_id: int
    start: date
    end: date
    days: list[CalendarDay]


class ConflictResponse(BaseModel):
    resource_id: int
    conflict: bool
    kind: ConflictKind | None = None
    day: date | None = None
    slot: TimeSlot | None = None
    message: str | None = None


class SweepReportResponse(BaseModel):
    holds_cleared: int
    attempts_expired: int
    out_of_service_activated: int
    out_of_service_lifted: int
    reserved_set: int
    reserved_cleared: int
    booked_set: int
    booked_cleared: int
    failures: int
    skipped: bool
