from copy import deepcopy
from datetime import date

from club_booking.application.interfaces.reservation_repo import ReservationRepo
from club_booking.domain.entities.reservation import Reservation


class InMemoryReservationRepo(ReservationRepo):
    def __init__(self) -> None:
        self._reservations: dict[int, Reservation] = {}
        self._next_id = 1

    async def list_overlapping(self, resource_id: int, first_day: date, last_day: date) -> list[Reservation]:
        return [
            deepcopy(r)
            for r in self._reservations.values()
            if r.resource_id == resource_id and r.reserved_from <= last_day and first_day <= r.reserved_to
        ]

    async def add(self, reservation: Reservation) -> Reservation:
        reservation = deepcopy(reservation)
        reservation.id = self._next_id
        self._next_id += 1
        self._reservations[reservation.id] = reservation
        return deepcopy(reservation)

    async def resource_ids_covering(self, day: date) -> set[int]:
        return {r.resource_id for r in self._reservations.values() if r.covers(day)}
