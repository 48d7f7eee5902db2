from copy import deepcopy
from datetime import date

from club_booking.application.interfaces.booking_repo import BookingRepo
from club_booking.domain.entities.booking import Booking
from club_booking.domain.entities.resource import ResourceType


class InMemoryBookingRepo(BookingRepo):
    def __init__(self) -> None:
        self._bookings: dict[int, Booking] = {}
        self._next_id = 1

    async def list_overlapping(self, resource_id: int, first_day: date, last_day: date) -> list[Booking]:
        result = []
        for booking in self._bookings.values():
            if booking.resource_id != resource_id:
                continue
            days = booking.covered_days()
            if days and days[0] <= last_day and first_day <= days[-1]:
                result.append(deepcopy(booking))
        return result

    async def get(self, booking_id: int) -> Booking | None:
        booking = self._bookings.get(booking_id)
        return deepcopy(booking) if booking else None

    async def list_by_attempt(self, attempt_id: str) -> list[Booking]:
        return [deepcopy(b) for b in self._bookings.values() if b.attempt_id == attempt_id]

    async def list_by_member(self, member_id: str, resource_type: ResourceType | None = None) -> list[Booking]:
        return [
            deepcopy(b)
            for b in sorted(self._bookings.values(), key=lambda b: b.id)
            if b.member_id == member_id and (resource_type is None or b.resource_type is resource_type)
        ]

    async def add(self, booking: Booking) -> Booking:
        booking = deepcopy(booking)
        booking.id = self._next_id
        self._next_id += 1
        self._bookings[booking.id] = booking
        return deepcopy(booking)

    async def update(self, booking: Booking) -> bool:
        if booking.id not in self._bookings:
            return False
        self._bookings[booking.id] = deepcopy(booking)
        return True

    async def delete(self, booking_id: int) -> bool:
        return self._bookings.pop(booking_id, None) is not None

    async def resource_ids_covering(self, day: date) -> set[int]:
        return {b.resource_id for b in self._bookings.values() if b.covers_day(day)}
