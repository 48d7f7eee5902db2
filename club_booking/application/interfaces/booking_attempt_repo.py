from datetime import datetime

from club_booking.domain.entities.booking_attempt import BookingAttempt


class BookingAttemptRepo:
    async def add(self, attempt: BookingAttempt) -> None:
        raise NotImplementedError

    async def get(self, attempt_id: str) -> BookingAttempt | None:
        raise NotImplementedError

    async def save(self, attempt: BookingAttempt) -> None:
        raise NotImplementedError

    async def list_expired_open(self, now: datetime) -> list[BookingAttempt]:
        """Intentos HELD/INVOICED cuya retención venció (`hold_expires_at <= now`)."""
        raise NotImplementedError
