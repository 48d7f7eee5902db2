from club_booking.domain.entities.voucher import PaymentVoucher


class VoucherRepo:
    async def add(self, voucher: PaymentVoucher) -> PaymentVoucher:
        raise NotImplementedError

    async def list_by_booking(self, booking_id: int) -> list[PaymentVoucher]:
        raise NotImplementedError

    async def cancel_confirmed(self, booking_id: int) -> int:
        """Pasa a CANCELLED los comprobantes CONFIRMED de la reserva; retorna cuántos cambió."""
        raise NotImplementedError
