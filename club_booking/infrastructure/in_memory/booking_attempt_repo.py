from copy import deepcopy
from datetime import datetime

from club_booking.application.interfaces.booking_attempt_repo import BookingAttemptRepo
from club_booking.domain.entities.booking_attempt import AttemptState, BookingAttempt


class InMemoryBookingAttemptRepo(BookingAttemptRepo):
    def __init__(self) -> None:
        self._attempts: dict[str, BookingAttempt] = {}

    async def add(self, attempt: BookingAttempt) -> None:
        self._attempts[attempt.attempt_id] = deepcopy(attempt)

    async def get(self, attempt_id: str) -> BookingAttempt | None:
        attempt = self._attempts.get(attempt_id)
        return deepcopy(attempt) if attempt else None

    async def save(self, attempt: BookingAttempt) -> None:
        self._attempts[attempt.attempt_id] = deepcopy(attempt)

    async def list_expired_open(self, now: datetime) -> list[BookingAttempt]:
        return [
            deepcopy(a)
            for a in self._attempts.values()
            if a.state in (AttemptState.HELD, AttemptState.INVOICED) and a.hold_expired(now)
        ]
