from datetime import date, timedelta

from club_booking.application.availability import AvailabilityEvaluator
from club_booking.application.catalog_reader import CatalogReader, HoldState
from club_booking.application.conflict_checker import ConflictChecker
from club_booking.application.interfaces.clock import Clock
from club_booking.domain.constants import CALENDAR_WINDOW_DAYS
from club_booking.domain.errors import ValidationError
from club_booking.domain.reservable import BookingUnit, ConflictResult
from club_booking.domain.value_objects.time_slot import TimeSlot


class GetAvailabilityUseCase:
    """Consultas de solo lectura: franjas libres, calendario y verificación de conflictos."""

    def __init__(
        self,
        availability: AvailabilityEvaluator,
        conflict_checker: ConflictChecker,
        catalog: CatalogReader,
        clock: Clock,
        max_window_days: int = CALENDAR_WINDOW_DAYS,
    ) -> None:
        self._availability = availability
        self._conflict_checker = conflict_checker
        self._catalog = catalog
        self._clock = clock
        self._max_window_days = max_window_days

    async def free_slots(self, resource_id: int, day: date) -> list[TimeSlot]:
        free = await self._availability.free_slots(resource_id, day)
        return [slot for slot in TimeSlot if slot in free]

    async def calendar(self, resource_id: int, start: date, end: date | None = None) -> dict[date, list[TimeSlot]]:
        """
        Calendario día → franjas libres.

        Args:
            resource_id: Id del recurso.
            start: Primer día.
            end: Último día (inclusive); por defecto la ventana configurada.

        Raises:
            ValidationError: Si la ventana es inválida o excede el máximo.
        """
        end = end or start + timedelta(days=self._max_window_days - 1)
        if end < start:
            raise ValidationError("end", "debe ser igual o posterior a start")
        if (end - start).days + 1 > self._max_window_days:
            raise ValidationError("end", f"la ventana no puede exceder {self._max_window_days} días")
        calendar = await self._availability.calendar(resource_id, start, end)
        return {day: [slot for slot in TimeSlot if slot in free] for day, free in calendar.items()}

    async def check_conflict(
        self,
        resource_id: int,
        unit: BookingUnit,
        exclude_booking_id: int | None = None,
    ) -> ConflictResult:
        return await self._conflict_checker.check(resource_id, unit, exclude_booking_id)

    async def hold_state(self, resource_id: int) -> HoldState:
        """Retención vigente del recurso; un id desconocido se informa como sin retención."""
        resource = await self._catalog.get(resource_id)
        if resource is None:
            return HoldState(active=False)
        return self._catalog.hold_state(resource, self._clock.now())
