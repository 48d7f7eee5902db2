from club_booking.infrastructure.in_memory.booking_attempt_repo import InMemoryBookingAttemptRepo
from club_booking.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from club_booking.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from club_booking.infrastructure.in_memory.reservation_repo import InMemoryReservationRepo
from club_booking.infrastructure.in_memory.resource_repo import InMemoryResourceRepo
from club_booking.infrastructure.in_memory.transaction_manager import NoopTransactionManager
from club_booking.infrastructure.in_memory.voucher_repo import InMemoryVoucherRepo

__all__ = [
    "InMemoryBookingAttemptRepo",
    "InMemoryBookingRepo",
    "InMemoryReservationRepo",
    "InMemoryResourceRepo",
    "InMemoryVoucherRepo",
    "NoopTransactionManager",
    "StubPaymentGateway",
]
