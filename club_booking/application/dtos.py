"""DTOs de la capa de aplicación."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from club_booking.domain.entities.booking import Booking, PaymentStatus, PricingTier
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.entities.voucher import PaymentMode
from club_booking.domain.value_objects.time_slot import TimeSlot


@dataclass
class BookingRequestDTO:
    """
    Solicitud de reserva de un socio.

    Habitaciones: `check_in`/`check_out` y `resource_id` o `category` +
    `number_of_units`. Salones y jardines: `resource_id`, `booking_date`
    (`end_date` opcional para eventos de varios días) y `time_slot`. Sesiones de
    fotos: `resource_id` y `start_time`.
    """

    member_id: str
    resource_type: ResourceType
    pricing_tier: PricingTier = PricingTier.MEMBER
    resource_id: int | None = None
    category: str | None = None
    number_of_units: int = 1

    check_in: date | None = None
    check_out: date | None = None
    booking_date: date | None = None
    end_date: date | None = None
    time_slot: TimeSlot | None = None
    start_time: datetime | None = None

    number_of_guests: int | None = None
    number_of_adults: int = 1
    number_of_children: int = 0
    guest_name: str | None = None
    guest_contact: str | None = None
    event_type: str | None = None
    special_requests: str | None = None


@dataclass
class InvoiceResultDTO:
    """Resultado de una solicitud: factura emitida y retención vigente."""

    attempt_id: str
    invoice_id: str
    amount: Decimal
    currency_code: str
    due_at: datetime
    hold_expires_at: datetime
    resource_ids: list[int]
    payment_channels: list[str] = field(default_factory=list)
    consumer_number: str | None = None
    booking_draft: dict[str, Any] = field(default_factory=dict)


@dataclass
class PaymentConfirmationDTO:
    """Callback del gateway: trae el mismo borrador opaco enviado al facturar."""

    booking_draft: dict[str, Any]
    invoice_id: str | None = None
    payment_status: PaymentStatus = PaymentStatus.PAID
    paid_amount: Decimal | None = None
    payment_mode: PaymentMode = PaymentMode.ONLINE
    transaction_ref: str | None = None


@dataclass
class ConfirmationResultDTO:
    attempt_id: str
    booking_ids: list[int]
    payment_status: PaymentStatus
    paid_amount: Decimal
    pending_amount: Decimal
    voucher_ids: list[int] = field(default_factory=list)
    already_confirmed: bool = False


@dataclass
class AttemptReleaseDTO:
    attempt_id: str
    state: str
    released_holds: int


@dataclass
class SweepReportDTO:
    """Conteos de una pasada de reconciliación."""

    holds_cleared: int = 0
    attempts_expired: int = 0
    out_of_service_activated: int = 0
    out_of_service_lifted: int = 0
    reserved_set: int = 0
    reserved_cleared: int = 0
    booked_set: int = 0
    booked_cleared: int = 0
    failures: int = 0
    skipped: bool = False


@dataclass
class BookingUpdateDTO:
    """
    Edición de una reserva confirmada.

    Los campos en None conservan el valor actual. El recurso no cambia; para
    cambiar de recurso se cancela y se reserva de nuevo.
    """

    booking_id: int
    member_id: str | None = None

    check_in: date | None = None
    check_out: date | None = None
    booking_date: date | None = None
    end_date: date | None = None
    time_slot: TimeSlot | None = None
    start_time: datetime | None = None

    pricing_tier: PricingTier | None = None
    number_of_guests: int | None = None
    number_of_adults: int | None = None
    number_of_children: int | None = None
    guest_name: str | None = None
    guest_contact: str | None = None
    event_type: str | None = None
    special_requests: str | None = None

    payment_status: PaymentStatus | None = None
    paid_amount: Decimal | None = None
    payment_mode: PaymentMode = PaymentMode.CASH
    remarks: str | None = None


@dataclass
class BookingUpdateResultDTO:
    booking: Booking
    voucher_ids: list[int] = field(default_factory=list)
    cancelled_vouchers: int = 0
