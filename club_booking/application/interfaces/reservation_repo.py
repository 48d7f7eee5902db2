from datetime import date

from club_booking.domain.entities.reservation import Reservation


class ReservationRepo:
    async def list_overlapping(
        self,
        resource_id: int,
        first_day: date,
        last_day: date,
    ) -> list[Reservation]:
        raise NotImplementedError

    async def add(self, reservation: Reservation) -> Reservation:
        raise NotImplementedError

    async def resource_ids_covering(self, day: date) -> set[int]:
        """Recursos con un bloqueo administrativo que cubre `day`."""
        raise NotImplementedError
