"""Entidad Booking - asignación confirmada de un recurso."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from club_booking.domain.calendar import day_key, days_between, iter_days
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.value_objects.time_slot import TimeSlot


class PaymentStatus(str, Enum):
    """Estados de pago de una reserva."""

    UNPAID = "UNPAID"
    HALF_PAID = "HALF_PAID"
    PAID = "PAID"


class PricingTier(str, Enum):
    """Tarifa aplicada: socio o invitado."""

    MEMBER = "MEMBER"
    GUEST = "GUEST"


@dataclass
class Booking:
    """
    Reserva confirmada.

    La extensión temporal depende del tipo:
    - Habitación: `[check_in, check_out)` en días.
    - Salón/Jardín: `booking_date`..`end_date` (inclusive) + una franja.
    - Sesión de fotos: `[start_time, end_time)`, dos horas fijas.

    Invariante financiera: una vez fuera de UNPAID, `paid + pending == total`;
    PAID implica `pending == 0`.
    """

    id: int | None
    resource_id: int
    member_id: str
    resource_type: ResourceType

    # Extensión
    check_in: date | None = None
    check_out: date | None = None
    booking_date: date | None = None
    end_date: date | None = None
    time_slot: TimeSlot | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None

    # Financieros
    total_price: Decimal = Decimal("0")
    pricing_tier: PricingTier = PricingTier.MEMBER
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    paid_amount: Decimal = Decimal("0")
    pending_amount: Decimal = Decimal("0")

    # Descriptivos
    number_of_guests: int | None = None
    number_of_adults: int | None = None
    number_of_children: int | None = None
    event_type: str | None = None
    special_requests: str | None = None
    attempt_id: str | None = None
    created_at: datetime | None = None

    def covered_days(self) -> list[date]:
        """Días calendario locales que ocupa la reserva."""
        if self.resource_type is ResourceType.ROOM:
            return days_between(self.check_in, self.check_out)
        if self.resource_type is ResourceType.PHOTOSHOOT:
            return [self.booking_date or day_key(self.start_time)]
        return list(iter_days(self.booking_date, self.end_date or self.booking_date))

    def covers_day(self, day: date) -> bool:
        return day in self.covered_days()

    def check_financials(self) -> bool:
        """Verifica la invariante contable."""
        if self.payment_status is PaymentStatus.UNPAID:
            return self.paid_amount == 0
        if self.paid_amount + self.pending_amount != self.total_price:
            return False
        if self.payment_status is PaymentStatus.PAID:
            return self.pending_amount == 0
        return self.paid_amount > 0 and self.pending_amount > 0
