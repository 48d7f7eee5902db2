from copy import deepcopy

from club_booking.application.interfaces.voucher_repo import VoucherRepo
from club_booking.domain.entities.voucher import PaymentVoucher, VoucherStatus


class InMemoryVoucherRepo(VoucherRepo):
    def __init__(self) -> None:
        self._vouchers: dict[int, PaymentVoucher] = {}
        self._next_id = 1

    async def add(self, voucher: PaymentVoucher) -> PaymentVoucher:
        voucher = deepcopy(voucher)
        voucher.id = self._next_id
        self._next_id += 1
        self._vouchers[voucher.id] = voucher
        return deepcopy(voucher)

    async def list_by_booking(self, booking_id: int) -> list[PaymentVoucher]:
        return [deepcopy(v) for v in self._vouchers.values() if v.booking_id == booking_id]

    async def cancel_confirmed(self, booking_id: int) -> int:
        cancelled = 0
        for voucher in self._vouchers.values():
            if voucher.booking_id == booking_id and voucher.status is VoucherStatus.CONFIRMED:
                voucher.status = VoucherStatus.CANCELLED
                cancelled += 1
        return cancelled
