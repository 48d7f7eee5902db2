import logging

from club_booking.application.interfaces.booking_repo import BookingRepo
from club_booking.application.interfaces.resource_repo import ResourceRepo
from club_booking.application.interfaces.transaction_manager import TransactionManager
from club_booking.domain.errors import BookingNotFoundError, InconsistentStateError


class CancelBookingUseCase:
    """
    Elimina una reserva confirmada y apaga `is_booked` del recurso en la misma unidad.

    Si el flag no puede revertirse, la operación falla con InconsistentStateError
    en lugar de reportar éxito.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        resource_repo: ResourceRepo,
        transaction_manager: TransactionManager,
    ) -> None:
        self._booking_repo = booking_repo
        self._resource_repo = resource_repo
        self._transaction_manager = transaction_manager
        self._logger = logging.getLogger(__name__)

    async def execute(self, booking_id: int) -> None:
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get(booking_id)
            if booking is None:
                raise BookingNotFoundError(booking_id)

            resource = await self._resource_repo.get(booking.resource_id)
            if resource is None:
                raise InconsistentStateError(
                    f"La reserva {booking_id} apunta al recurso inexistente {booking.resource_id}"
                )

            deleted = await self._booking_repo.delete(booking_id)
            if not deleted:
                raise BookingNotFoundError(booking_id)

            cleared = await self._resource_repo.set_booked({booking.resource_id}, False)
            if cleared != 1:
                raise InconsistentStateError(
                    f"Reserva {booking_id} eliminada pero el recurso {booking.resource_id} "
                    "sigue marcado como reservado"
                )

        self._logger.info(
            "Reserva cancelada",
            extra={"booking_id": booking_id, "resource_id": booking.resource_id},
        )
