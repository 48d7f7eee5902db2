"""
Capacidad polimórfica "recurso reservable".

Unifica el recorrido día a día que comparten habitaciones, salones, jardines y
sesiones de fotos: cada variante responde a `day_keys_of(unit)`,
`occupied_slots(day)` e `is_out_of_service(day)`. Las habitaciones usan una
variante por rango (una noche ocupa el día completo) y el resto una variante por
franjas.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from club_booking.domain.calendar import day_key, get_zone, iter_days, start_of_local_day, to_local
from club_booking.domain.entities.booking import Booking
from club_booking.domain.entities.reservation import Reservation
from club_booking.domain.entities.resource import Resource, ResourceType
from club_booking.domain.value_objects.time_slot import ALL_SLOTS, TimeSlot


class ConflictKind(str, Enum):
    """Motivo de conflicto, en orden de precedencia."""

    OUT_OF_SERVICE = "OUT_OF_SERVICE"
    BOOKED = "BOOKED"
    RESERVED = "RESERVED"
    ALREADY_HELD = "ALREADY_HELD"


@dataclass(frozen=True)
class ConflictResult:
    """Resultado de una verificación de conflicto; `kind` es la señal autoritativa."""

    conflict: bool
    kind: ConflictKind | None = None
    day: date | None = None
    slot: TimeSlot | None = None
    message: str | None = None

    @classmethod
    def clear(cls) -> "ConflictResult":
        return cls(conflict=False)


@dataclass(frozen=True)
class BookingUnit:
    """
    Extensión solicitada para una reserva.

    Attributes:
        first_day: Primer día calendario cubierto.
        last_day: Último día calendario cubierto (inclusive).
        time_slot: Franja de salón/jardín; None ocupa el día completo.
        window: Instantes `[inicio, fin)` de una sesión de fotos.
    """

    first_day: date
    last_day: date
    time_slot: TimeSlot | None = None
    window: tuple[datetime, datetime] | None = None

    @classmethod
    def for_stay(cls, check_in: date, check_out: date) -> "BookingUnit":
        """Estancia de habitación `[check_in, check_out)`."""
        return cls(first_day=check_in, last_day=check_out - timedelta(days=1))

    @classmethod
    def for_slot(cls, day: date, slot: TimeSlot, end_day: date | None = None) -> "BookingUnit":
        return cls(first_day=day, last_day=end_day or day, time_slot=slot)

    @classmethod
    def for_session(cls, start_time: datetime, end_time: datetime) -> "BookingUnit":
        day = day_key(start_time)
        return cls(first_day=day, last_day=day, window=(start_time, end_time))

    def days(self) -> list[date]:
        return list(iter_days(self.first_day, self.last_day))

    def requested_slots(self, day: date) -> frozenset[TimeSlot]:
        if self.window is not None:
            return slots_for_window(day, *self.window)
        if self.time_slot is not None:
            return frozenset({self.time_slot})
        return ALL_SLOTS


def _slot_interval(day: date, slot: TimeSlot) -> tuple[datetime, datetime]:
    zone = get_zone()
    start = to_local(datetime.combine(day, slot.starts_at), zone)
    if slot.ends_at is None:
        end = start_of_local_day(day + timedelta(days=1), zone)
    else:
        end = to_local(datetime.combine(day, slot.ends_at), zone)
    return start, end


def slots_for_window(day: date, start: datetime, end: datetime) -> frozenset[TimeSlot]:
    """Proyecta un intervalo de instantes sobre las franjas del día local que intersecta."""
    start_local, end_local = to_local(start), to_local(end)
    hits = set()
    for slot in TimeSlot:
        slot_start, slot_end = _slot_interval(day, slot)
        if start_local < slot_end and slot_start < end_local:
            hits.add(slot)
    return frozenset(hits)


def _ordered(slots: Iterable[TimeSlot]) -> TimeSlot | None:
    for slot in TimeSlot:
        if slot in slots:
            return slot
    return None


class Reservable(ABC):
    """
    Vista de ocupación de un recurso sobre las reservas y bloqueos cargados.

    Args:
        resource: Recurso a evaluar.
        bookings: Reservas confirmadas que se solapan con el periodo consultado.
        reservations: Bloqueos administrativos que se solapan con el periodo.
        exclude_booking_id: Reserva a ignorar (flujo de edición).
    """

    def __init__(
        self,
        resource: Resource,
        bookings: Iterable[Booking],
        reservations: Iterable[Reservation],
        exclude_booking_id: int | None = None,
    ) -> None:
        self.resource = resource
        self._bookings = [
            b for b in bookings if exclude_booking_id is None or b.id != exclude_booking_id
        ]
        self._reservations = list(reservations)

    def day_keys_of(self, unit: BookingUnit) -> list[date]:
        return unit.days()

    def is_out_of_service(self, day: date) -> bool:
        """Un recurso inactivo o dentro de su ventana de mantenimiento no es reservable."""
        return not self.resource.is_bookable_on(day)

    def occupied_slots(self, day: date) -> frozenset[TimeSlot]:
        """Unión de franjas ocupadas por reservas, bloqueos y mantenimiento."""
        if self.is_out_of_service(day):
            return ALL_SLOTS
        return self.booked_slots(day) | self.reserved_slots(day)

    def reserved_slots(self, day: date) -> frozenset[TimeSlot]:
        slots: set[TimeSlot] = set()
        for reservation in self._reservations:
            if reservation.covers(day):
                slots |= self._reservation_slots(reservation)
        return frozenset(slots)

    def conflict_on(self, day: date, unit: BookingUnit) -> ConflictResult:
        """Primer conflicto del día, con precedencia mantenimiento > reserva > bloqueo."""
        if self.is_out_of_service(day):
            return ConflictResult(
                conflict=True,
                kind=ConflictKind.OUT_OF_SERVICE,
                day=day,
                message=self._out_of_service_message(day),
            )

        requested = unit.requested_slots(day)
        booked = self._booking_clash(day, unit)
        if booked:
            slot = _ordered(booked)
            return ConflictResult(
                conflict=True,
                kind=ConflictKind.BOOKED,
                day=day,
                slot=slot,
                message=self._describe("ya está reservado", day, slot),
            )

        reserved = self.reserved_slots(day) & requested
        if reserved:
            slot = _ordered(reserved)
            return ConflictResult(
                conflict=True,
                kind=ConflictKind.RESERVED,
                day=day,
                slot=slot,
                message=self._describe("está bloqueado por administración", day, slot),
            )
        return ConflictResult.clear()

    def _out_of_service_message(self, day: date) -> str:
        window = self.resource.out_of_service
        if not self.resource.is_active and not window.covers(day):
            return f"{self._label()} no está activo"
        reason = f": {window.reason}" if window.reason else ""
        return f"{self._label()} está fuera de servicio el {day.isoformat()}{reason}"

    def _describe(self, what: str, day: date, slot: TimeSlot | None) -> str:
        when = f" ({slot.label})" if slot is not None and self.resource.resource_type.is_slot_based else ""
        return f"{self._label()} {what} el {day.isoformat()}{when}"

    def _label(self) -> str:
        return f"{self.resource.resource_type.value.title()} '{self.resource.name or self.resource.id}'"

    @abstractmethod
    def booked_slots(self, day: date) -> frozenset[TimeSlot]:
        raise NotImplementedError

    @abstractmethod
    def _booking_clash(self, day: date, unit: BookingUnit) -> frozenset[TimeSlot]:
        raise NotImplementedError

    @abstractmethod
    def _reservation_slots(self, reservation: Reservation) -> frozenset[TimeSlot]:
        raise NotImplementedError


class RangeReservable(Reservable):
    """Habitaciones: cada noche ocupada bloquea el día completo."""

    def booked_slots(self, day: date) -> frozenset[TimeSlot]:
        for booking in self._bookings:
            if booking.check_in <= day < booking.check_out:
                return ALL_SLOTS
        return frozenset()

    def _booking_clash(self, day: date, unit: BookingUnit) -> frozenset[TimeSlot]:
        return self.booked_slots(day)

    def _reservation_slots(self, reservation: Reservation) -> frozenset[TimeSlot]:
        return ALL_SLOTS


class SlotReservable(Reservable):
    """
    Salones, jardines y sesiones de fotos: ocupación por franja.

    Dos sesiones de fotos chocan solo si sus instantes se solapan; para la vista
    de disponibilidad una sesión ocupa las franjas que intersecta.
    """

    def _booking_slots(self, booking: Booking, day: date) -> frozenset[TimeSlot]:
        if booking.start_time is not None and booking.end_time is not None:
            return slots_for_window(day, booking.start_time, booking.end_time)
        if booking.time_slot is None:
            return ALL_SLOTS
        return frozenset({booking.time_slot})

    def booked_slots(self, day: date) -> frozenset[TimeSlot]:
        slots: set[TimeSlot] = set()
        for booking in self._bookings:
            if booking.covers_day(day):
                slots |= self._booking_slots(booking, day)
        return frozenset(slots)

    def _booking_clash(self, day: date, unit: BookingUnit) -> frozenset[TimeSlot]:
        requested = unit.requested_slots(day)
        clash: set[TimeSlot] = set()
        for booking in self._bookings:
            if not booking.covers_day(day):
                continue
            booking_slots = self._booking_slots(booking, day)
            if unit.window is not None and booking.start_time is not None:
                start, end = unit.window
                if start < booking.end_time and booking.start_time < end:
                    clash |= (booking_slots & requested) or booking_slots
                continue
            clash |= booking_slots & requested
        return frozenset(clash)

    def _reservation_slots(self, reservation: Reservation) -> frozenset[TimeSlot]:
        return reservation.slots()


def reservable_for(
    resource: Resource,
    bookings: Iterable[Booking],
    reservations: Iterable[Reservation],
    exclude_booking_id: int | None = None,
) -> Reservable:
    """Selecciona la variante de ocupación según el tipo de recurso."""
    if resource.resource_type is ResourceType.ROOM:
        return RangeReservable(resource, bookings, reservations, exclude_booking_id)
    return SlotReservable(resource, bookings, reservations, exclude_booking_id)
