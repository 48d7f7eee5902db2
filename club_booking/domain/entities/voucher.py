"""Entidad PaymentVoucher - comprobante del monto pagado al confirmar una reserva."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from club_booking.domain.entities.resource import ResourceType


class VoucherType(str, Enum):
    FULL_PAYMENT = "FULL_PAYMENT"
    HALF_PAYMENT = "HALF_PAYMENT"


class VoucherStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class PaymentMode(str, Enum):
    CASH = "CASH"
    ONLINE = "ONLINE"
    CARD = "CARD"
    CHEQUE = "CHEQUE"


@dataclass
class PaymentVoucher:
    id: int | None
    booking_id: int
    resource_type: ResourceType
    member_id: str
    amount: Decimal
    voucher_type: VoucherType
    payment_mode: PaymentMode = PaymentMode.ONLINE
    status: VoucherStatus = VoucherStatus.CONFIRMED
    invoice_id: str | None = None
    remarks: str | None = None
    issued_at: datetime | None = None
