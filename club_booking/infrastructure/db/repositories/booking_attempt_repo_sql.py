from datetime import datetime
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from club_booking.application.interfaces.booking_attempt_repo import BookingAttemptRepo
from club_booking.domain.entities.booking_attempt import AttemptState, BookingAttempt
from club_booking.domain.entities.resource import ResourceType
from club_booking.infrastructure.db.converters import from_db_datetime, to_db_datetime
from club_booking.infrastructure.db.tables import booking_attempts

OPEN_STATES = (AttemptState.HELD.value, AttemptState.INVOICED.value)


def _row_to_attempt(row: Any) -> BookingAttempt:
    return BookingAttempt(
        attempt_id=row["attempt_id"],
        member_id=row["member_id"],
        resource_type=ResourceType(row["resource_type"]),
        resource_ids=list(row["resource_ids"] or []),
        draft=dict(row["draft"] or {}),
        state=AttemptState(row["state"]),
        hold_expires_at=from_db_datetime(row["hold_expires_at"]),
        invoice_id=row["invoice_id"],
        total_price=row["total_price"],
        booking_ids=list(row["booking_ids"] or []),
        failure_code=row["failure_code"],
        created_at=from_db_datetime(row["created_at"]),
        updated_at=from_db_datetime(row["updated_at"]),
    )


def _values(attempt: BookingAttempt) -> dict[str, Any]:
    return {
        "member_id": attempt.member_id,
        "resource_type": attempt.resource_type.value,
        "resource_ids": list(attempt.resource_ids),
        "draft": attempt.draft,
        "state": attempt.state.value,
        "hold_expires_at": to_db_datetime(attempt.hold_expires_at),
        "invoice_id": attempt.invoice_id,
        "total_price": attempt.total_price,
        "booking_ids": list(attempt.booking_ids),
        "failure_code": attempt.failure_code,
        "created_at": to_db_datetime(attempt.created_at),
        "updated_at": to_db_datetime(attempt.updated_at),
    }


class BookingAttemptRepoSQL(BookingAttemptRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, attempt: BookingAttempt) -> None:
        stmt = insert(booking_attempts).values(attempt_id=attempt.attempt_id, **_values(attempt))
        await self._session.execute(stmt)

    async def get(self, attempt_id: str) -> BookingAttempt | None:
        stmt = select(booking_attempts).where(booking_attempts.c.attempt_id == attempt_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        return _row_to_attempt(row)

    async def save(self, attempt: BookingAttempt) -> None:
        stmt = (
            update(booking_attempts)
            .where(booking_attempts.c.attempt_id == attempt.attempt_id)
            .values(**_values(attempt))
        )
        await self._session.execute(stmt)

    async def list_expired_open(self, now: datetime) -> list[BookingAttempt]:
        stmt = (
            select(booking_attempts)
            .where(
                booking_attempts.c.state.in_(OPEN_STATES),
                booking_attempts.c.hold_expires_at <= to_db_datetime(now),
            )
            .order_by(booking_attempts.c.hold_expires_at)
        )
        result = await self._session.execute(stmt)
        return [_row_to_attempt(row) for row in result.mappings().all()]
