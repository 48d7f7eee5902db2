"""Tests de disponibilidad, calendario y verificación de conflictos."""

from datetime import date, timedelta

import pytest

from club_booking.domain.entities.reservation import Reservation
from club_booking.domain.entities.resource import OutOfServiceWindow, ResourceType
from club_booking.domain.errors import ConflictError, ResourceNotFoundError, ValidationError
from club_booking.domain.reservable import BookingUnit, ConflictKind
from club_booking.domain.value_objects.time_slot import TimeSlot
from conftest import HALL, NOW, ROOM_101, ROOM_102, ROOM_201, room_booking, slot_booking

JUNE_1 = date(2026, 6, 1)
JULY_4 = date(2026, 7, 4)


class TestFreeSlots:
    async def test_room_without_bookings_is_fully_free(self, use_cases):
        free = await use_cases["get_availability"].free_slots(ROOM_101, JUNE_1)
        assert free == [TimeSlot.MORNING, TimeSlot.EVENING, TimeSlot.NIGHT]

    async def test_room_answers_all_or_nothing(self, use_cases, bundle):
        await bundle["booking_repo"].add(room_booking(ROOM_101, JUNE_1, JUNE_1 + timedelta(days=1)))
        assert await use_cases["get_availability"].free_slots(ROOM_101, JUNE_1) == []

    async def test_hall_slot_taken(self, use_cases, bundle):
        await bundle["booking_repo"].add(slot_booking(HALL, JULY_4, TimeSlot.EVENING))
        free = await use_cases["get_availability"].free_slots(HALL, JULY_4)
        assert free == [TimeSlot.MORNING, TimeSlot.NIGHT]

    async def test_unknown_resource_has_nothing_free(self, use_cases):
        assert await use_cases["get_availability"].free_slots(999, JUNE_1) == []

    async def test_hold_state_reports_active_hold(self, use_cases, bundle):
        await bundle["resource_repo"].try_place_hold(ROOM_101, "M-1", NOW + timedelta(minutes=3), NOW)

        state = await use_cases["get_availability"].hold_state(ROOM_101)

        assert state.active
        assert state.holder_id == "M-1"
        assert not (await use_cases["get_availability"].hold_state(ROOM_102)).active
        assert not (await use_cases["get_availability"].hold_state(999)).active


class TestCalendar:
    async def test_calendar_maps_each_day(self, use_cases, bundle):
        await bundle["booking_repo"].add(slot_booking(HALL, JULY_4, TimeSlot.MORNING))

        calendar = await use_cases["get_availability"].calendar(HALL, JULY_4, JULY_4 + timedelta(days=2))

        assert list(calendar) == [JULY_4, JULY_4 + timedelta(days=1), JULY_4 + timedelta(days=2)]
        assert calendar[JULY_4] == [TimeSlot.EVENING, TimeSlot.NIGHT]
        assert len(calendar[JULY_4 + timedelta(days=1)]) == 3

    async def test_default_window(self, use_cases, settings):
        calendar = await use_cases["get_availability"].calendar(HALL, JULY_4)
        assert len(calendar) == settings.calendar_window_days

    async def test_window_too_large(self, use_cases, settings):
        with pytest.raises(ValidationError):
            await use_cases["get_availability"].calendar(
                HALL, JULY_4, JULY_4 + timedelta(days=settings.calendar_window_days)
            )

    async def test_end_before_start(self, use_cases):
        with pytest.raises(ValidationError):
            await use_cases["get_availability"].calendar(HALL, JULY_4, JULY_4 - timedelta(days=1))


class TestConflictChecker:
    async def test_free_room_has_no_conflict(self, use_cases):
        """Habitación sin reservas: dos noches sin conflicto."""
        result = await use_cases["get_availability"].check_conflict(
            ROOM_101, BookingUnit.for_stay(JUNE_1, JUNE_1 + timedelta(days=2))
        )
        assert not result.conflict

    async def test_hall_evening_booked_morning_free(self, use_cases, bundle):
        await bundle["booking_repo"].add(slot_booking(HALL, JULY_4, TimeSlot.EVENING))
        checker = use_cases["get_availability"]

        evening = await checker.check_conflict(HALL, BookingUnit.for_slot(JULY_4, TimeSlot.EVENING))
        morning = await checker.check_conflict(HALL, BookingUnit.for_slot(JULY_4, TimeSlot.MORNING))

        assert evening.conflict
        assert evening.kind is ConflictKind.BOOKED
        assert evening.slot is TimeSlot.EVENING
        assert not morning.conflict

    async def test_first_conflicting_day_is_reported(self, use_cases, bundle):
        await bundle["reservation_repo"].add(
            Reservation(
                id=None,
                resource_id=ROOM_101,
                reserved_from=JUNE_1 + timedelta(days=2),
                reserved_to=JUNE_1 + timedelta(days=5),
            )
        )
        result = await use_cases["get_availability"].check_conflict(
            ROOM_101, BookingUnit.for_stay(JUNE_1, JUNE_1 + timedelta(days=4))
        )
        assert result.kind is ConflictKind.RESERVED
        assert result.day == JUNE_1 + timedelta(days=2)

    async def test_out_of_service_precedes_booking(self, use_cases, bundle):
        hall = await bundle["resource_repo"].get(HALL)
        hall.out_of_service = OutOfServiceWindow(starts_on=JULY_4, ends_on=JULY_4)
        await bundle["resource_repo"].add(hall)
        await bundle["booking_repo"].add(slot_booking(HALL, JULY_4, TimeSlot.EVENING))

        result = await use_cases["get_availability"].check_conflict(
            HALL, BookingUnit.for_slot(JULY_4, TimeSlot.EVENING)
        )

        assert result.kind is ConflictKind.OUT_OF_SERVICE

    async def test_exclude_booking_for_edit(self, use_cases, bundle):
        booking = await bundle["booking_repo"].add(slot_booking(HALL, JULY_4, TimeSlot.EVENING))
        result = await use_cases["get_availability"].check_conflict(
            HALL, BookingUnit.for_slot(JULY_4, TimeSlot.EVENING), exclude_booking_id=booking.id
        )
        assert not result.conflict

    async def test_unknown_resource_raises(self, use_cases):
        with pytest.raises(ResourceNotFoundError):
            await use_cases["get_availability"].check_conflict(999, BookingUnit.for_slot(JULY_4, TimeSlot.MORNING))

    async def test_raise_for_conflict_carries_kind_day_and_slot(self, use_cases, bundle):
        await bundle["booking_repo"].add(slot_booking(HALL, JULY_4, TimeSlot.NIGHT))
        checker = use_cases["request_booking"]._conflict_checker

        with pytest.raises(ConflictError) as exc_info:
            await checker.raise_for_conflict(HALL, BookingUnit.for_slot(JULY_4, TimeSlot.NIGHT))

        assert exc_info.value.kind == "BOOKED"
        assert exc_info.value.day == JULY_4
        assert exc_info.value.slot == "NIGHT"
        assert exc_info.value.code == "CONFLICT_BOOKED"


class TestRangeQueries:
    async def test_is_range_free(self, use_cases, bundle):
        availability = use_cases["request_booking"]._availability
        await bundle["booking_repo"].add(room_booking(ROOM_101, JUNE_1 + timedelta(days=1), JUNE_1 + timedelta(days=2)))

        assert await availability.is_range_free(ROOM_101, JUNE_1, JUNE_1 + timedelta(days=1))
        assert not await availability.is_range_free(ROOM_101, JUNE_1, JUNE_1 + timedelta(days=3))
        assert not await availability.is_range_free(999, JUNE_1, JUNE_1 + timedelta(days=1))

    async def test_available_resources_skips_booked_and_held(self, use_cases, bundle):
        availability = use_cases["request_booking"]._availability
        await bundle["booking_repo"].add(room_booking(ROOM_101, JUNE_1, JUNE_1 + timedelta(days=1)))
        await bundle["resource_repo"].try_place_hold(ROOM_102, "M-OTHER", NOW + timedelta(minutes=3), NOW)

        deluxe = await availability.available_resources(
            ResourceType.ROOM, "Deluxe", JUNE_1, JUNE_1 + timedelta(days=1), "M-1", NOW
        )
        own_hold = await availability.available_resources(
            ResourceType.ROOM, "Deluxe", JUNE_1, JUNE_1 + timedelta(days=1), "M-OTHER", NOW
        )
        standard = await availability.available_resources(
            ResourceType.ROOM, "Standard", JUNE_1, JUNE_1 + timedelta(days=1), "M-1", NOW
        )

        assert deluxe == []
        assert [r.id for r in own_hold] == [ROOM_102]
        assert [r.id for r in standard] == [ROOM_201]
