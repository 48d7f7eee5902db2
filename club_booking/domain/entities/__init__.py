"""Entidades del dominio."""

from club_booking.domain.entities.booking import Booking, PaymentStatus, PricingTier
from club_booking.domain.entities.booking_attempt import AttemptState, BookingAttempt
from club_booking.domain.entities.reservation import Reservation
from club_booking.domain.entities.resource import OutOfServiceWindow, Resource, ResourceType
from club_booking.domain.entities.voucher import (
    PaymentMode,
    PaymentVoucher,
    VoucherStatus,
    VoucherType,
)

__all__ = [
    "AttemptState",
    "Booking",
    "BookingAttempt",
    "OutOfServiceWindow",
    "PaymentMode",
    "PaymentStatus",
    "PaymentVoucher",
    "PricingTier",
    "Reservation",
    "Resource",
    "ResourceType",
    "VoucherStatus",
    "VoucherType",
]
