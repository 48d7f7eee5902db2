from datetime import date, datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from club_booking.api.dependencies import get_use_cases
from club_booking.api.schemas.availability import (
    CalendarDay,
    CalendarResponse,
    ConflictResponse,
    FreeSlotsResponse,
)
from club_booking.domain.constants import PHOTOSHOOT_DURATION_HOURS
from club_booking.domain.errors import ValidationError
from club_booking.domain.reservable import BookingUnit
from club_booking.domain.value_objects.time_slot import TimeSlot
from club_booking.infrastructure.db.retry import retry_on_deadlock

router = APIRouter()


@router.get(
    "/resources/{resource_id}/availability",
    response_model=FreeSlotsResponse | CalendarResponse,
    status_code=status.HTTP_200_OK,
)
async def get_availability(
    resource_id: int,
    use_cases: Annotated[dict, Depends(get_use_cases)],
    day: date | None = Query(default=None, alias="date"),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
) -> FreeSlotsResponse | CalendarResponse:
    """Franjas libres de un día (`?date=`) o calendario de una ventana (`?start=&end=`)."""
    use_case = use_cases["get_availability"]

    if day is not None:
        free = await retry_on_deadlock(lambda: use_case.free_slots(resource_id, day))
        hold = await use_case.hold_state(resource_id)
        return FreeSlotsResponse(
            resource_id=resource_id,
            day=day,
            free_slots=free,
            on_hold=hold.active,
            hold_expires_at=hold.expires_at,
        )

    if start is None:
        raise ValidationError("date", "se requiere date o start")

    calendar = await retry_on_deadlock(lambda: use_case.calendar(resource_id, start, end))
    days = sorted(calendar)
    return CalendarResponse(
        resource_id=resource_id,
        start=days[0],
        end=days[-1],
        days=[CalendarDay(day=d, free_slots=calendar[d]) for d in days],
    )


def _unit_from_query(
    check_in: date | None,
    check_out: date | None,
    day: date | None,
    end_date: date | None,
    time_slot: TimeSlot | None,
    start_time: datetime | None,
) -> BookingUnit:
    if start_time is not None:
        return BookingUnit.for_session(start_time, start_time + timedelta(hours=PHOTOSHOOT_DURATION_HOURS))
    if check_in is not None and check_out is not None:
        if check_out <= check_in:
            raise ValidationError("check_out", "debe ser posterior a check_in")
        return BookingUnit.for_stay(check_in, check_out)
    if day is not None and time_slot is not None:
        return BookingUnit.for_slot(day, time_slot, end_date)
    raise ValidationError(
        "query", "indique check_in/check_out, date/time_slot o start_time"
    )


@router.get(
    "/resources/{resource_id}/conflicts",
    response_model=ConflictResponse,
    status_code=status.HTTP_200_OK,
)
async def check_conflicts(
    resource_id: int,
    use_cases: Annotated[dict, Depends(get_use_cases)],
    check_in: date | None = Query(default=None),
    check_out: date | None = Query(default=None),
    day: date | None = Query(default=None, alias="date"),
    end_date: date | None = Query(default=None),
    time_slot: TimeSlot | None = Query(default=None),
    start_time: datetime | None = Query(default=None),
    exclude_booking_id: int | None = Query(default=None),
) -> ConflictResponse:
    unit = _unit_from_query(check_in, check_out, day, end_date, time_slot, start_time)
    result = await retry_on_deadlock(
        lambda: use_cases["get_availability"].check_conflict(resource_id, unit, exclude_booking_id)
    )
    return ConflictResponse(
        resource_id=resource_id,
        conflict=result.conflict,
        kind=result.kind,
        day=result.day,
        slot=result.slot,
        message=result.message,
    )
