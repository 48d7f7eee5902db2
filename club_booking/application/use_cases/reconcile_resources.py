import logging
from datetime import date, datetime
from typing import Callable

from club_booking.application.dtos import SweepReportDTO
from club_booking.application.interfaces.booking_attempt_repo import BookingAttemptRepo
from club_booking.application.interfaces.booking_repo import BookingRepo
from club_booking.application.interfaces.clock import Clock
from club_booking.application.interfaces.reservation_repo import ReservationRepo
from club_booking.application.interfaces.resource_repo import ResourceRepo
from club_booking.application.interfaces.transaction_manager import TransactionManager
from club_booking.domain.entities.resource import Resource
from club_booking.domain.errors import OptimisticLockError

MAX_CAS_ATTEMPTS = 3


def _never_transient(error: Exception) -> bool:
    return False


class ReconcileResourcesUseCase:
    """
    Pasada de reconciliación de estado dependiente del tiempo.

    Cada barrido es independiente: la falla de uno (o de una fila) se registra y
    no aborta los demás; el siguiente intervalo vuelve a intentarlo. Cada escritura
    de fila corre en su propia unidad (`start()`, un savepoint si la pasada ya abrió
    transacción), así una fila fallida no arrastra a las demás.

    Los errores que `is_transient_error` reconoce (deadlocks, esperas de lock) no se
    cuentan: se propagan para que quien llama reintente la pasada completa.

    Barridos:
    1. Retenciones vencidas e intentos abiertos cuyo plazo pasó.
    2. Ventanas fuera de servicio que empiezan o terminan (granularidad de día local).
    3. Proyección `is_reserved` desde bloqueos administrativos que cubren hoy.
    4. Proyección `is_booked` desde reservas confirmadas que cubren hoy.
    """

    def __init__(
        self,
        resource_repo: ResourceRepo,
        booking_repo: BookingRepo,
        reservation_repo: ReservationRepo,
        attempt_repo: BookingAttemptRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        is_transient_error: Callable[[Exception], bool] = _never_transient,
    ) -> None:
        self._resource_repo = resource_repo
        self._booking_repo = booking_repo
        self._reservation_repo = reservation_repo
        self._attempt_repo = attempt_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._is_transient_error = is_transient_error
        self._logger = logging.getLogger(__name__)

    async def execute(self) -> SweepReportDTO:
        now = self._clock.now()
        today = self._clock.today()
        report = SweepReportDTO()

        sweeps = (
            ("holds", self._sweep_holds),
            ("out_of_service", self._sweep_out_of_service),
            ("reserved", self._sweep_reserved),
            ("booked", self._sweep_booked),
        )
        for name, sweep in sweeps:
            try:
                await sweep(now, today, report)
            except Exception as exc:
                self._raise_if_transient(exc)
                report.failures += 1
                self._logger.exception("Barrido fallido", extra={"sweep": name})

        self._logger.info(
            "Reconciliación completada",
            extra={"today": today.isoformat(), **report.__dict__},
        )
        return report

    def _raise_if_transient(self, exc: Exception) -> None:
        if self._is_transient_error(exc):
            self._logger.warning("Error transitorio, se reintenta la pasada", extra={"error": str(exc)})
            raise exc

    # === Retenciones ===

    async def _sweep_holds(self, now: datetime, today: date, report: SweepReportDTO) -> None:
        async with self._transaction_manager.start():
            cleared = await self._resource_repo.clear_expired_holds(now)
        report.holds_cleared += len(cleared)

        for attempt in await self._attempt_repo.list_expired_open(now):
            try:
                async with self._transaction_manager.start():
                    attempt.mark_expired(now)
                    await self._attempt_repo.save(attempt)
                report.attempts_expired += 1
            except Exception as exc:
                self._raise_if_transient(exc)
                report.failures += 1
                self._logger.exception("No se pudo expirar el intento", extra={"attempt_id": attempt.attempt_id})

    # === Mantenimiento ===

    async def _sweep_out_of_service(self, now: datetime, today: date, report: SweepReportDTO) -> None:
        for resource in await self._resource_repo.list_out_of_service_due(today):
            if await self._transition(resource.id, today, activate=True, report=report):
                report.out_of_service_activated += 1

        for resource in await self._resource_repo.list_out_of_service_lapsed(today):
            if await self._transition(resource.id, today, activate=False, report=report):
                report.out_of_service_lifted += 1

    @staticmethod
    def _still_due(resource: Resource, today: date, activate: bool) -> bool:
        window = resource.out_of_service
        if activate:
            return window.is_scheduled and not window.is_out_of_service and window.covers(today)
        return window.is_out_of_service and window.ends_on is not None and window.ends_on < today

    async def _transition(self, resource_id: int, today: date, activate: bool, report: SweepReportDTO) -> bool:
        """Compare-and-swap por versión; ante un conflicto relee y reevalúa."""
        for _ in range(MAX_CAS_ATTEMPTS):
            try:
                async with self._transaction_manager.start():
                    resource = await self._resource_repo.get(resource_id)
                    if resource is None or not self._still_due(resource, today, activate):
                        return False
                    await self._resource_repo.apply_out_of_service(resource_id, resource.version, activate)
            except OptimisticLockError:
                self._logger.warning("Versión desactualizada, reintentando", extra={"resource_id": resource_id})
                continue
            except Exception as exc:
                self._raise_if_transient(exc)
                report.failures += 1
                self._logger.exception("Transición de mantenimiento fallida", extra={"resource_id": resource_id})
                return False
            self._logger.info(
                "Recurso fuera de servicio" if activate else "Recurso reactivado",
                extra={"resource_id": resource_id, "today": today.isoformat()},
            )
            return True
        report.failures += 1
        self._logger.error("Transición abandonada tras reintentos", extra={"resource_id": resource_id})
        return False

    # === Proyecciones derivadas ===

    async def _sweep_reserved(self, now: datetime, today: date, report: SweepReportDTO) -> None:
        covering = await self._reservation_repo.resource_ids_covering(today)
        flagged = await self._resource_repo.list_flagged_reserved()
        report.reserved_set += await self._apply_flags(covering - flagged, True, self._resource_repo.set_reserved, report)
        report.reserved_cleared += await self._apply_flags(flagged - covering, False, self._resource_repo.set_reserved, report)

    async def _sweep_booked(self, now: datetime, today: date, report: SweepReportDTO) -> None:
        covering = await self._booking_repo.resource_ids_covering(today)
        flagged = await self._resource_repo.list_flagged_booked()
        report.booked_set += await self._apply_flags(covering - flagged, True, self._resource_repo.set_booked, report)
        report.booked_cleared += await self._apply_flags(flagged - covering, False, self._resource_repo.set_booked, report)

    async def _apply_flags(self, resource_ids: set[int], value: bool, setter, report: SweepReportDTO) -> int:
        applied = 0
        for resource_id in sorted(resource_ids):
            try:
                async with self._transaction_manager.start():
                    changed = await setter({resource_id}, value)
                applied += changed
            except Exception as exc:
                self._raise_if_transient(exc)
                report.failures += 1
                self._logger.exception(
                    "No se pudo actualizar la proyección",
                    extra={"resource_id": resource_id, "value": value},
                )
        return applied
