from club_booking.application.interfaces.booking_repo import BookingRepo
from club_booking.application.interfaces.voucher_repo import VoucherRepo
from club_booking.domain.entities.voucher import PaymentVoucher
from club_booking.domain.errors import BookingNotFoundError


class GetBookingVouchersUseCase:
    def __init__(self, booking_repo: BookingRepo, voucher_repo: VoucherRepo) -> None:
        self._booking_repo = booking_repo
        self._voucher_repo = voucher_repo

    async def execute(self, booking_id: int) -> list[PaymentVoucher]:
        """
        Comprobantes de una reserva, anulados incluidos, en orden de emisión.

        Raises:
            BookingNotFoundError: Si la reserva no existe.
        """
        if await self._booking_repo.get(booking_id) is None:
            raise BookingNotFoundError(booking_id)
        return await self._voucher_repo.list_by_booking(booking_id)
