"""
Tests de la edición de reservas confirmadas y de las consultas por socio y por
comprobantes.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from club_booking.application.dtos import BookingRequestDTO, BookingUpdateDTO, PaymentConfirmationDTO
from club_booking.application.use_cases.update_booking import settle_payment
from club_booking.domain.entities.booking import PaymentStatus, PricingTier
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.entities.voucher import VoucherStatus, VoucherType
from club_booking.domain.errors import (
    AlreadyHeldError,
    BookingNotFoundError,
    CapacityError,
    ConflictError,
    ValidationError,
)
from club_booking.domain.value_objects.time_slot import TimeSlot
from conftest import HALL, ROOM_101, TODAY, room_booking, slot_booking

APRIL_1 = date(2026, 4, 1)


async def _confirmed_room(use_cases, **overrides) -> int:
    """Habitación 101 de socio, dos noches desde el 1 de abril, pagada (10000)."""
    values = dict(
        member_id="M-1",
        resource_type=ResourceType.ROOM,
        resource_id=ROOM_101,
        check_in=APRIL_1,
        check_out=APRIL_1 + timedelta(days=2),
    )
    values.update(overrides)
    invoice = await use_cases["request_booking"].execute(BookingRequestDTO(**values))
    result = await use_cases["confirm_booking"].execute(
        PaymentConfirmationDTO(booking_draft=invoice.booking_draft, invoice_id=invoice.invoice_id)
    )
    return result.booking_ids[0]


class TestUpdateStay:
    async def test_longer_stay_is_requoted(self, use_cases, bundle):
        booking_id = await _confirmed_room(use_cases)

        result = await use_cases["update_booking"].execute(
            BookingUpdateDTO(booking_id=booking_id, check_out=APRIL_1 + timedelta(days=3))
        )

        booking = result.booking
        assert booking.total_price == Decimal("15000.00")
        assert booking.paid_amount == Decimal("10000.00")
        assert booking.pending_amount == Decimal("5000.00")
        assert booking.payment_status is PaymentStatus.HALF_PAID
        assert booking.check_financials()
        assert result.voucher_ids == []

        stored = await bundle["booking_repo"].get(booking_id)
        assert stored.check_out == APRIL_1 + timedelta(days=3)
        assert stored.total_price == Decimal("15000.00")

    async def test_overlap_with_its_own_dates_is_not_a_conflict(self, use_cases):
        booking_id = await _confirmed_room(use_cases)

        result = await use_cases["update_booking"].execute(
            BookingUpdateDTO(
                booking_id=booking_id,
                check_in=APRIL_1 + timedelta(days=1),
                check_out=APRIL_1 + timedelta(days=3),
            )
        )

        assert result.booking.check_in == APRIL_1 + timedelta(days=1)
        assert result.booking.total_price == Decimal("10000.00")
        assert result.booking.payment_status is PaymentStatus.PAID

    async def test_overlap_with_another_booking_is_a_conflict(self, use_cases, bundle):
        booking_id = await _confirmed_room(use_cases)
        await bundle["booking_repo"].add(
            room_booking(ROOM_101, APRIL_1 + timedelta(days=3), APRIL_1 + timedelta(days=5))
        )

        with pytest.raises(ConflictError) as exc_info:
            await use_cases["update_booking"].execute(
                BookingUpdateDTO(booking_id=booking_id, check_out=APRIL_1 + timedelta(days=4))
            )

        assert exc_info.value.day == APRIL_1 + timedelta(days=3)
        assert (await bundle["booking_repo"].get(booking_id)).check_out == APRIL_1 + timedelta(days=2)
        assert not (await bundle["resource_repo"].get(ROOM_101)).on_hold

    async def test_live_attempt_hold_blocks_the_edit(self, use_cases, bundle):
        booking_id = await _confirmed_room(use_cases)
        await use_cases["request_booking"].execute(
            BookingRequestDTO(
                member_id="M-2",
                resource_type=ResourceType.ROOM,
                resource_id=ROOM_101,
                check_in=date(2026, 5, 1),
                check_out=date(2026, 5, 2),
            )
        )

        with pytest.raises(AlreadyHeldError):
            await use_cases["update_booking"].execute(
                BookingUpdateDTO(booking_id=booking_id, special_requests="Late check-in")
            )

    async def test_hold_is_released_after_the_edit(self, use_cases, bundle):
        booking_id = await _confirmed_room(use_cases)

        await use_cases["update_booking"].execute(
            BookingUpdateDTO(booking_id=booking_id, special_requests="Late check-in")
        )

        resource = await bundle["resource_repo"].get(ROOM_101)
        assert not resource.on_hold
        assert resource.hold_by is None
        assert (await bundle["booking_repo"].get(booking_id)).special_requests == "Late check-in"

    async def test_dates_in_the_past_are_rejected(self, use_cases):
        booking_id = await _confirmed_room(use_cases)

        with pytest.raises(ValidationError):
            await use_cases["update_booking"].execute(
                BookingUpdateDTO(booking_id=booking_id, check_in=TODAY - timedelta(days=1))
            )

    async def test_moving_onto_today_marks_resource_booked(self, use_cases, bundle):
        booking_id = await _confirmed_room(use_cases)

        await use_cases["update_booking"].execute(
            BookingUpdateDTO(booking_id=booking_id, check_in=TODAY, check_out=TODAY + timedelta(days=2))
        )
        assert (await bundle["resource_repo"].get(ROOM_101)).is_booked

        await use_cases["update_booking"].execute(
            BookingUpdateDTO(booking_id=booking_id, check_in=APRIL_1, check_out=APRIL_1 + timedelta(days=2))
        )
        assert not (await bundle["resource_repo"].get(ROOM_101)).is_booked

    async def test_guest_tier_requires_guest_details(self, use_cases):
        booking_id = await _confirmed_room(use_cases)

        with pytest.raises(ValidationError):
            await use_cases["update_booking"].execute(
                BookingUpdateDTO(booking_id=booking_id, pricing_tier=PricingTier.GUEST)
            )

        result = await use_cases["update_booking"].execute(
            BookingUpdateDTO(
                booking_id=booking_id,
                pricing_tier=PricingTier.GUEST,
                guest_name="Ali Raza",
                guest_contact="03001234567",
            )
        )
        assert result.booking.total_price == Decimal("14000.00")
        assert result.booking.payment_status is PaymentStatus.HALF_PAID

    async def test_other_member_cannot_edit(self, use_cases):
        booking_id = await _confirmed_room(use_cases)

        with pytest.raises(ValidationError):
            await use_cases["update_booking"].execute(
                BookingUpdateDTO(booking_id=booking_id, member_id="M-2", special_requests="x")
            )

    async def test_unknown_booking(self, use_cases):
        with pytest.raises(BookingNotFoundError):
            await use_cases["update_booking"].execute(BookingUpdateDTO(booking_id=999))


class TestUpdateEvent:
    async def test_change_slot(self, use_cases, bundle):
        booking = await bundle["booking_repo"].add(slot_booking(HALL, APRIL_1, TimeSlot.MORNING, member_id="M-1"))

        result = await use_cases["update_booking"].execute(
            BookingUpdateDTO(booking_id=booking.id, time_slot=TimeSlot.NIGHT, number_of_guests=120)
        )

        assert result.booking.time_slot is TimeSlot.NIGHT
        assert result.booking.number_of_guests == 120
        assert result.booking.total_price == Decimal("80000.00")
        assert result.booking.booking_date == APRIL_1
        assert result.booking.end_date == APRIL_1

    async def test_slot_taken_by_another_event(self, use_cases, bundle):
        booking = await bundle["booking_repo"].add(slot_booking(HALL, APRIL_1, TimeSlot.MORNING, member_id="M-1"))
        await bundle["booking_repo"].add(slot_booking(HALL, APRIL_1, TimeSlot.NIGHT))

        with pytest.raises(ConflictError):
            await use_cases["update_booking"].execute(
                BookingUpdateDTO(booking_id=booking.id, time_slot=TimeSlot.NIGHT)
            )

    async def test_guest_count_over_capacity(self, use_cases, bundle):
        booking = await bundle["booking_repo"].add(slot_booking(HALL, APRIL_1, TimeSlot.MORNING, member_id="M-1"))

        with pytest.raises(CapacityError):
            await use_cases["update_booking"].execute(
                BookingUpdateDTO(booking_id=booking.id, number_of_guests=500)
            )


class TestUpdatePayment:
    async def test_payment_increase_issues_voucher_for_the_difference(self, use_cases, bundle):
        booking_id = await _confirmed_room(use_cases)

        result = await use_cases["update_booking"].execute(
            BookingUpdateDTO(
                booking_id=booking_id,
                check_out=APRIL_1 + timedelta(days=3),
                payment_status=PaymentStatus.PAID,
            )
        )

        assert result.booking.paid_amount == Decimal("15000.00")
        assert result.booking.pending_amount == Decimal("0")
        assert result.cancelled_vouchers == 0
        vouchers = await bundle["voucher_repo"].list_by_booking(booking_id)
        assert [v.amount for v in vouchers] == [Decimal("10000.00"), Decimal("5000.00")]
        assert vouchers[1].id == result.voucher_ids[0]
        assert vouchers[1].voucher_type is VoucherType.FULL_PAYMENT

    async def test_payment_decrease_reissues_vouchers(self, use_cases, bundle):
        booking_id = await _confirmed_room(use_cases)

        result = await use_cases["update_booking"].execute(
            BookingUpdateDTO(
                booking_id=booking_id,
                payment_status=PaymentStatus.HALF_PAID,
                paid_amount=Decimal("4000.00"),
            )
        )

        assert result.cancelled_vouchers == 1
        vouchers = await bundle["voucher_repo"].list_by_booking(booking_id)
        assert [(v.amount, v.status) for v in vouchers] == [
            (Decimal("10000.00"), VoucherStatus.CANCELLED),
            (Decimal("4000.00"), VoucherStatus.CONFIRMED),
        ]
        assert vouchers[1].voucher_type is VoucherType.HALF_PAYMENT

    async def test_shorter_stay_cannot_leave_an_overpayment(self, use_cases, bundle):
        booking_id = await _confirmed_room(use_cases)

        with pytest.raises(ValidationError):
            await use_cases["update_booking"].execute(
                BookingUpdateDTO(booking_id=booking_id, check_out=APRIL_1 + timedelta(days=1))
            )

        stored = await bundle["booking_repo"].get(booking_id)
        assert stored.total_price == Decimal("10000.00")
        assert not (await bundle["resource_repo"].get(ROOM_101)).on_hold

    async def test_shorter_stay_settled_as_paid(self, use_cases, bundle):
        booking_id = await _confirmed_room(use_cases)

        result = await use_cases["update_booking"].execute(
            BookingUpdateDTO(
                booking_id=booking_id,
                check_out=APRIL_1 + timedelta(days=1),
                payment_status=PaymentStatus.PAID,
            )
        )

        assert result.booking.total_price == Decimal("5000.00")
        assert result.booking.paid_amount == Decimal("5000.00")
        confirmed = [
            v for v in await bundle["voucher_repo"].list_by_booking(booking_id)
            if v.status is VoucherStatus.CONFIRMED
        ]
        assert [v.amount for v in confirmed] == [Decimal("5000.00")]

    async def test_clearing_the_payment_cancels_vouchers(self, use_cases, bundle):
        booking_id = await _confirmed_room(use_cases)

        result = await use_cases["update_booking"].execute(
            BookingUpdateDTO(booking_id=booking_id, payment_status=PaymentStatus.UNPAID)
        )

        assert result.voucher_ids == []
        assert result.cancelled_vouchers == 1
        assert result.booking.pending_amount == Decimal("10000.00")


class TestSettlePayment:
    @pytest.mark.parametrize(
        "paid, expected",
        [
            (Decimal("100"), PaymentStatus.PAID),
            (Decimal("0"), PaymentStatus.UNPAID),
            (Decimal("40"), PaymentStatus.HALF_PAID),
        ],
    )
    def test_status_is_derived_from_paid(self, paid, expected):
        status, settled_paid, pending = settle_payment(Decimal("100"), paid, None, None)

        assert status is expected
        assert settled_paid + pending == Decimal("100")

    def test_explicit_status_must_match_amount(self):
        with pytest.raises(ValidationError):
            settle_payment(Decimal("100"), Decimal("0"), PaymentStatus.PAID, Decimal("60"))

    def test_negative_amount(self):
        with pytest.raises(ValidationError):
            settle_payment(Decimal("100"), Decimal("0"), None, Decimal("-1"))


class TestBookingQueries:
    async def test_member_bookings_by_type(self, use_cases, bundle):
        room_id = await _confirmed_room(use_cases)
        hall = await bundle["booking_repo"].add(slot_booking(HALL, APRIL_1, TimeSlot.MORNING, member_id="M-1"))
        await bundle["booking_repo"].add(slot_booking(HALL, APRIL_1, TimeSlot.NIGHT))

        everything = await use_cases["member_bookings"].execute("M-1")
        halls = await use_cases["member_bookings"].execute("M-1", ResourceType.HALL)

        assert [b.id for b in everything] == [room_id, hall.id]
        assert [b.id for b in halls] == [hall.id]
        assert await use_cases["member_bookings"].execute("M-NOBODY") == []

    async def test_member_id_is_required(self, use_cases):
        with pytest.raises(ValidationError):
            await use_cases["member_bookings"].execute("")

    async def test_booking_vouchers(self, use_cases):
        booking_id = await _confirmed_room(use_cases)

        [voucher] = await use_cases["booking_vouchers"].execute(booking_id)

        assert voucher.amount == Decimal("10000.00")
        assert voucher.member_id == "M-1"

    async def test_vouchers_of_unknown_booking(self, use_cases):
        with pytest.raises(BookingNotFoundError):
            await use_cases["booking_vouchers"].execute(999)
