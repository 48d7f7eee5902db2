"""Entidad Reservation - bloqueo administrativo permanente, sin estado de pago."""

from dataclasses import dataclass
from datetime import date

from club_booking.domain.value_objects.time_slot import ALL_SLOTS, TimeSlot


@dataclass
class Reservation:
    """
    Bloqueo creado por administración (mantenimiento, VIP) sobre un recurso.

    Habitaciones bloquean el día completo; salones y jardines pueden limitarse a
    una franja (`time_slot=None` equivale al día completo).
    """

    id: int | None
    resource_id: int
    reserved_from: date
    reserved_to: date
    time_slot: TimeSlot | None = None
    remarks: str | None = None

    def covers(self, day: date) -> bool:
        return self.reserved_from <= day <= self.reserved_to

    def slots(self) -> frozenset[TimeSlot]:
        if self.time_slot is None:
            return ALL_SLOTS
        return frozenset({self.time_slot})
