import logging

from club_booking.application.dtos import AttemptReleaseDTO
from club_booking.application.hold_manager import HoldManager
from club_booking.application.interfaces.booking_attempt_repo import BookingAttemptRepo
from club_booking.application.interfaces.clock import Clock
from club_booking.domain.errors import AttemptNotFoundError, ValidationError


class ReleaseBookingAttemptUseCase:
    """
    Cancelación por el usuario o por timeout de un intento aún abierto.

    Solo el socio dueño del intento puede liberarlo. Libera las retenciones del
    intento y lo cierra como EXPIRED (si la retención ya venció) o FAILED. Sobre un intento terminal no hace nada.
    """

    def __init__(
        self,
        attempt_repo: BookingAttemptRepo,
        hold_manager: HoldManager,
        clock: Clock,
    ) -> None:
        self._attempt_repo = attempt_repo
        self._hold_manager = hold_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        attempt_id: str,
        member_id: str,
        reason: str = "USER_CANCELLED",
    ) -> AttemptReleaseDTO:
        attempt = await self._attempt_repo.get(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(attempt_id)
        if attempt.member_id != member_id:
            raise ValidationError("member_id", f"el intento {attempt_id} pertenece a otro socio")

        if attempt.is_terminal:
            return AttemptReleaseDTO(attempt_id=attempt_id, state=attempt.state.value, released_holds=0)

        released = await self._hold_manager.release_holds(attempt.resource_ids, attempt.attempt_id)
        now = self._clock.now()
        if attempt.hold_expired(now):
            attempt.mark_expired(now)
        else:
            attempt.mark_failed(reason, now)
        await self._attempt_repo.save(attempt)

        self._logger.info(
            "Intento liberado",
            extra={"attempt_id": attempt_id, "state": attempt.state.value, "released": released},
        )
        return AttemptReleaseDTO(attempt_id=attempt_id, state=attempt.state.value, released_holds=released)
