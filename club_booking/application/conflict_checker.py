"""Verificador de conflictos: recorre cada día cubierto por una reserva propuesta."""

import logging

from club_booking.application.availability import AvailabilityEvaluator
from club_booking.application.catalog_reader import CatalogReader
from club_booking.domain.errors import ConflictError
from club_booking.domain.reservable import BookingUnit, ConflictResult

logger = logging.getLogger(__name__)


class ConflictChecker:
    def __init__(self, catalog: CatalogReader, availability: AvailabilityEvaluator) -> None:
        self._catalog = catalog
        self._availability = availability

    async def check(
        self,
        resource_id: int,
        unit: BookingUnit,
        exclude_booking_id: int | None = None,
    ) -> ConflictResult:
        """
        Busca el primer conflicto de una reserva propuesta.

        Recorre los días en orden y corta en el primer conflicto. Por día la
        precedencia es: fuera de servicio > reserva confirmada > bloqueo.

        Args:
            resource_id: Id del recurso.
            unit: Extensión propuesta (noches, días + franja o ventana de sesión).
            exclude_booking_id: Reserva a ignorar al editar.

        Returns:
            ConflictResult sin conflicto, o con `kind`, `day`, `slot` y mensaje.

        Raises:
            ResourceNotFoundError: Si el recurso no existe.
        """
        resource = await self._catalog.require(resource_id)
        reservable = await self._availability.load(
            resource, unit.first_day, unit.last_day, exclude_booking_id
        )
        for day in reservable.day_keys_of(unit):
            result = reservable.conflict_on(day, unit)
            if result.conflict:
                logger.info(
                    "Conflicto detectado",
                    extra={
                        "resource_id": resource_id,
                        "kind": result.kind.value,
                        "day": day.isoformat(),
                        "slot": result.slot.value if result.slot else None,
                    },
                )
                return result
        return ConflictResult.clear()

    async def raise_for_conflict(
        self,
        resource_id: int,
        unit: BookingUnit,
        exclude_booking_id: int | None = None,
    ) -> None:
        """Igual que `check`, pero convierte un conflicto en `ConflictError`."""
        result = await self.check(resource_id, unit, exclude_booking_id)
        if result.conflict:
            raise ConflictError(
                kind=result.kind.value,
                message=result.message or result.kind.value,
                resource_id=resource_id,
                day=result.day,
                slot=result.slot.value if result.slot else None,
            )
