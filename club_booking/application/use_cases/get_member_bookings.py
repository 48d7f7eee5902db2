from club_booking.application.interfaces.booking_repo import BookingRepo
from club_booking.domain.entities.booking import Booking
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.errors import ValidationError


class GetMemberBookingsUseCase:
    """Reservas confirmadas de un socio, opcionalmente de un solo tipo de recurso."""

    def __init__(self, booking_repo: BookingRepo) -> None:
        self._booking_repo = booking_repo

    async def execute(self, member_id: str, resource_type: ResourceType | None = None) -> list[Booking]:
        if not member_id:
            raise ValidationError("member_id", "es requerido")
        return await self._booking_repo.list_by_member(member_id, resource_type)
