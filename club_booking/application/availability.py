"""Evaluador de disponibilidad: franjas libres por día y rangos libres por recurso."""

import logging
from datetime import date, datetime

from club_booking.application.catalog_reader import CatalogReader
from club_booking.application.interfaces.booking_repo import BookingRepo
from club_booking.application.interfaces.reservation_repo import ReservationRepo
from club_booking.domain.calendar import iter_days
from club_booking.domain.entities.resource import Resource, ResourceType
from club_booking.domain.reservable import BookingUnit, Reservable, reservable_for
from club_booking.domain.value_objects.time_slot import ALL_SLOTS, TimeSlot

logger = logging.getLogger(__name__)


class AvailabilityEvaluator:
    """
    Calcula la ocupación de un recurso a partir de reservas confirmadas,
    bloqueos administrativos y ventanas de mantenimiento.

    Un id desconocido no es un error: se trata como "nada disponible".
    """

    def __init__(
        self,
        catalog: CatalogReader,
        booking_repo: BookingRepo,
        reservation_repo: ReservationRepo,
    ) -> None:
        self._catalog = catalog
        self._booking_repo = booking_repo
        self._reservation_repo = reservation_repo

    async def load(
        self,
        resource: Resource,
        first_day: date,
        last_day: date,
        exclude_booking_id: int | None = None,
    ) -> Reservable:
        """Carga reservas y bloqueos del periodo y arma la vista de ocupación."""
        bookings = await self._booking_repo.list_overlapping(resource.id, first_day, last_day)
        reservations = await self._reservation_repo.list_overlapping(resource.id, first_day, last_day)
        return reservable_for(resource, bookings, reservations, exclude_booking_id)

    async def free_slots(self, resource_id: int, day: date) -> frozenset[TimeSlot]:
        """
        Franjas libres de un recurso en un día.

        Args:
            resource_id: Id del recurso.
            day: Día calendario local.

        Returns:
            Conjunto de franjas libres; vacío si el recurso no existe o el día está
            completamente ocupado. Una habitación responde todas o ninguna.
        """
        resource = await self._catalog.get(resource_id)
        if resource is None:
            logger.info("Recurso desconocido en consulta de disponibilidad", extra={"resource_id": resource_id})
            return frozenset()
        reservable = await self.load(resource, day, day)
        return ALL_SLOTS - reservable.occupied_slots(day)

    async def is_range_free(self, resource_id: int, check_in: date, check_out: date) -> bool:
        """Indica si todas las noches de `[check_in, check_out)` están libres."""
        resource = await self._catalog.get(resource_id)
        if resource is None or check_in >= check_out:
            return False
        unit = BookingUnit.for_stay(check_in, check_out)
        reservable = await self.load(resource, unit.first_day, unit.last_day)
        return all(not reservable.occupied_slots(day) for day in unit.days())

    async def calendar(
        self,
        resource_id: int,
        start: date,
        end: date,
    ) -> dict[date, frozenset[TimeSlot]]:
        """Mapa día → franjas libres para una ventana de días (ambos inclusive)."""
        resource = await self._catalog.get(resource_id)
        if resource is None:
            return {day: frozenset() for day in iter_days(start, end)}
        reservable = await self.load(resource, start, end)
        return {day: ALL_SLOTS - reservable.occupied_slots(day) for day in iter_days(start, end)}

    async def available_resources(
        self,
        resource_type: ResourceType,
        category: str | None,
        check_in: date,
        check_out: date,
        holder_id: str,
        now: datetime,
    ) -> list[Resource]:
        """
        Recursos activos, sin retención vigente de otro titular y con el rango libre.

        Returns:
            Lista en orden ascendente de id.
        """
        available = []
        unit = BookingUnit.for_stay(check_in, check_out)
        for resource in await self._catalog.list_by_type(resource_type, category, active_only=True):
            if resource.is_held_by_other(holder_id, now):
                continue
            reservable = await self.load(resource, unit.first_day, unit.last_day)
            if all(not reservable.occupied_slots(day) for day in unit.days()):
                available.append(resource)
        return available
