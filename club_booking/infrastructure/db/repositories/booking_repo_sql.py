from datetime import date
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from club_booking.application.interfaces.booking_repo import BookingRepo
from club_booking.domain.entities.booking import Booking, PaymentStatus, PricingTier
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.value_objects.time_slot import TimeSlot
from club_booking.infrastructure.db.converters import from_db_datetime, to_db_datetime
from club_booking.infrastructure.db.tables import bookings


def _row_to_booking(row: Any) -> Booking:
    return Booking(
        id=row["id"],
        resource_id=row["resource_id"],
        member_id=row["member_id"],
        resource_type=ResourceType(row["resource_type"]),
        check_in=row["check_in"],
        check_out=row["check_out"],
        booking_date=row["booking_date"],
        end_date=row["end_date"],
        time_slot=TimeSlot(row["time_slot"]) if row["time_slot"] else None,
        start_time=from_db_datetime(row["start_time"]),
        end_time=from_db_datetime(row["end_time"]),
        total_price=row["total_price"],
        pricing_tier=PricingTier(row["pricing_tier"]),
        payment_status=PaymentStatus(row["payment_status"]),
        paid_amount=row["paid_amount"],
        pending_amount=row["pending_amount"],
        number_of_guests=row["number_of_guests"],
        number_of_adults=row["number_of_adults"],
        number_of_children=row["number_of_children"],
        event_type=row["event_type"],
        special_requests=row["special_requests"],
        attempt_id=row["attempt_id"],
        created_at=from_db_datetime(row["created_at"]),
    )


def _booking_values(booking: Booking) -> dict[str, Any]:
    days = booking.covered_days()
    return dict(
        resource_id=booking.resource_id,
        member_id=booking.member_id,
        resource_type=booking.resource_type.value,
        check_in=booking.check_in,
        check_out=booking.check_out,
        booking_date=booking.booking_date,
        end_date=booking.end_date,
        time_slot=booking.time_slot.value if booking.time_slot else None,
        start_time=to_db_datetime(booking.start_time),
        end_time=to_db_datetime(booking.end_time),
        first_day=days[0],
        last_day=days[-1],
        total_price=booking.total_price,
        pricing_tier=booking.pricing_tier.value,
        payment_status=booking.payment_status.value,
        paid_amount=booking.paid_amount,
        pending_amount=booking.pending_amount,
        number_of_guests=booking.number_of_guests,
        number_of_adults=booking.number_of_adults,
        number_of_children=booking.number_of_children,
        event_type=booking.event_type,
        special_requests=booking.special_requests,
        attempt_id=booking.attempt_id,
        created_at=to_db_datetime(booking.created_at),
    )


class BookingRepoSQL(BookingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _select(self, *conditions) -> list[Booking]:
        stmt = select(bookings).where(*conditions).order_by(bookings.c.id)
        result = await self._session.execute(stmt)
        return [_row_to_booking(row) for row in result.mappings().all()]

    async def list_overlapping(self, resource_id: int, first_day: date, last_day: date) -> list[Booking]:
        return await self._select(
            bookings.c.resource_id == resource_id,
            bookings.c.first_day <= last_day,
            bookings.c.last_day >= first_day,
        )

    async def get(self, booking_id: int) -> Booking | None:
        found = await self._select(bookings.c.id == booking_id)
        return found[0] if found else None

    async def list_by_attempt(self, attempt_id: str) -> list[Booking]:
        return await self._select(bookings.c.attempt_id == attempt_id)

    async def list_by_member(self, member_id: str, resource_type: ResourceType | None = None) -> list[Booking]:
        conditions = [bookings.c.member_id == member_id]
        if resource_type is not None:
            conditions.append(bookings.c.resource_type == resource_type.value)
        return await self._select(*conditions)

    async def add(self, booking: Booking) -> Booking:
        stmt = insert(bookings).values(**_booking_values(booking))
        result = await self._session.execute(stmt)
        booking.id = result.inserted_primary_key[0]
        return booking

    async def update(self, booking: Booking) -> bool:
        values = _booking_values(booking)
        values.pop("attempt_id")
        values.pop("created_at")
        stmt = update(bookings).where(bookings.c.id == booking.id).values(**values)
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def delete(self, booking_id: int) -> bool:
        result = await self._session.execute(delete(bookings).where(bookings.c.id == booking_id))
        return result.rowcount == 1

    async def resource_ids_covering(self, day: date) -> set[int]:
        stmt = select(bookings.c.resource_id).where(
            bookings.c.first_day <= day,
            bookings.c.last_day >= day,
        )
        result = await self._session.execute(stmt)
        return set(result.scalars().all())
