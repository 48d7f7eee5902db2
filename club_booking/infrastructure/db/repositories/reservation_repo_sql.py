from datetime import date

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from club_booking.application.interfaces.reservation_repo import ReservationRepo
from club_booking.domain.entities.reservation import Reservation
from club_booking.domain.value_objects.time_slot import TimeSlot
from club_booking.infrastructure.db.tables import reservations


class ReservationRepoSQL(ReservationRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_overlapping(self, resource_id: int, first_day: date, last_day: date) -> list[Reservation]:
        stmt = (
            select(reservations)
            .where(
                reservations.c.resource_id == resource_id,
                reservations.c.reserved_from <= last_day,
                reservations.c.reserved_to >= first_day,
            )
            .order_by(reservations.c.id)
        )
        result = await self._session.execute(stmt)
        return [
            Reservation(
                id=row["id"],
                resource_id=row["resource_id"],
                reserved_from=row["reserved_from"],
                reserved_to=row["reserved_to"],
                time_slot=TimeSlot(row["time_slot"]) if row["time_slot"] else None,
                remarks=row["remarks"],
            )
            for row in result.mappings().all()
        ]

    async def add(self, reservation: Reservation) -> Reservation:
        stmt = insert(reservations).values(
            resource_id=reservation.resource_id,
            reserved_from=reservation.reserved_from,
            reserved_to=reservation.reserved_to,
            time_slot=reservation.time_slot.value if reservation.time_slot else None,
            remarks=reservation.remarks,
        )
        result = await self._session.execute(stmt)
        reservation.id = result.inserted_primary_key[0]
        return reservation

    async def resource_ids_covering(self, day: date) -> set[int]:
        stmt = select(reservations.c.resource_id).where(
            reservations.c.reserved_from <= day,
            reservations.c.reserved_to >= day,
        )
        result = await self._session.execute(stmt)
        return set(result.scalars().all())
