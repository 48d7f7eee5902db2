from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from club_booking.application.interfaces.voucher_repo import VoucherRepo
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.entities.voucher import PaymentMode, PaymentVoucher, VoucherStatus, VoucherType
from club_booking.infrastructure.db.converters import from_db_datetime, to_db_datetime
from club_booking.infrastructure.db.tables import payment_vouchers


class VoucherRepoSQL(VoucherRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, voucher: PaymentVoucher) -> PaymentVoucher:
        stmt = insert(payment_vouchers).values(
            booking_id=voucher.booking_id,
            resource_type=voucher.resource_type.value,
            member_id=voucher.member_id,
            amount=voucher.amount,
            voucher_type=voucher.voucher_type.value,
            payment_mode=voucher.payment_mode.value,
            status=voucher.status.value,
            invoice_id=voucher.invoice_id,
            remarks=voucher.remarks,
            issued_at=to_db_datetime(voucher.issued_at),
        )
        result = await self._session.execute(stmt)
        voucher.id = result.inserted_primary_key[0]
        return voucher

    async def list_by_booking(self, booking_id: int) -> list[PaymentVoucher]:
        stmt = (
            select(payment_vouchers)
            .where(payment_vouchers.c.booking_id == booking_id)
            .order_by(payment_vouchers.c.id)
        )
        result = await self._session.execute(stmt)
        return [
            PaymentVoucher(
                id=row["id"],
                booking_id=row["booking_id"],
                resource_type=ResourceType(row["resource_type"]),
                member_id=row["member_id"],
                amount=row["amount"],
                voucher_type=VoucherType(row["voucher_type"]),
                payment_mode=PaymentMode(row["payment_mode"]),
                status=VoucherStatus(row["status"]),
                invoice_id=row["invoice_id"],
                remarks=row["remarks"],
                issued_at=from_db_datetime(row["issued_at"]),
            )
            for row in result.mappings().all()
        ]

    async def cancel_confirmed(self, booking_id: int) -> int:
        stmt = (
            update(payment_vouchers)
            .where(
                payment_vouchers.c.booking_id == booking_id,
                payment_vouchers.c.status == VoucherStatus.CONFIRMED.value,
            )
            .values(status=VoucherStatus.CANCELLED.value)
        )
        result = await self._session.execute(stmt)
        return result.rowcount
