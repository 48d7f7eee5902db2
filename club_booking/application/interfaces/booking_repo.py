from datetime import date

from club_booking.domain.entities.booking import Booking
from club_booking.domain.entities.resource import ResourceType


class BookingRepo:
    async def list_overlapping(
        self,
        resource_id: int,
        first_day: date,
        last_day: date,
    ) -> list[Booking]:
        """Reservas confirmadas del recurso que tocan algún día de `[first_day, last_day]`."""
        raise NotImplementedError

    async def get(self, booking_id: int) -> Booking | None:
        raise NotImplementedError

    async def list_by_attempt(self, attempt_id: str) -> list[Booking]:
        raise NotImplementedError

    async def list_by_member(self, member_id: str, resource_type: ResourceType | None = None) -> list[Booking]:
        """Reservas del socio por id ascendente, opcionalmente de un solo tipo de recurso."""
        raise NotImplementedError

    async def add(self, booking: Booking) -> Booking:
        raise NotImplementedError

    async def update(self, booking: Booking) -> bool:
        """Reescribe extensión, precio y pago de una reserva existente; False si ya no existe."""
        raise NotImplementedError

    async def delete(self, booking_id: int) -> bool:
        raise NotImplementedError

    async def resource_ids_covering(self, day: date) -> set[int]:
        """Recursos con alguna reserva confirmada que cubre `day`."""
        raise NotImplementedError
