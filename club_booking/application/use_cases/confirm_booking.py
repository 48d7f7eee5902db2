import logging
from datetime import date, datetime
from decimal import Decimal

from club_booking.application.dtos import ConfirmationResultDTO, PaymentConfirmationDTO
from club_booking.application.hold_manager import HoldManager
from club_booking.application.interfaces.booking_attempt_repo import BookingAttemptRepo
from club_booking.application.interfaces.booking_repo import BookingRepo
from club_booking.application.interfaces.clock import Clock
from club_booking.application.interfaces.resource_repo import ResourceRepo
from club_booking.application.interfaces.transaction_manager import TransactionManager
from club_booking.application.interfaces.voucher_repo import VoucherRepo
from club_booking.domain.entities.booking import Booking, PaymentStatus, PricingTier
from club_booking.domain.entities.booking_attempt import AttemptState, BookingAttempt
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.entities.voucher import PaymentVoucher, VoucherStatus, VoucherType
from club_booking.domain.errors import (
    AttemptNotFoundError,
    HoldExpiredError,
    InvalidAttemptStateError,
    ValidationError,
)
from club_booking.domain.pricing import allocate, split_payment
from club_booking.domain.value_objects.time_slot import TimeSlot


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class ConfirmBookingUseCase:
    """
    Transición INVOICED → CONFIRMED disparada por el callback del gateway.

    Crea las reservas, enciende las proyecciones del recurso y consume las
    retenciones en una sola unidad lógica. Si el callback llega con la retención
    vencida, no se crea ninguna reserva.
    """

    def __init__(
        self,
        attempt_repo: BookingAttemptRepo,
        booking_repo: BookingRepo,
        resource_repo: ResourceRepo,
        voucher_repo: VoucherRepo,
        hold_manager: HoldManager,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._attempt_repo = attempt_repo
        self._booking_repo = booking_repo
        self._resource_repo = resource_repo
        self._voucher_repo = voucher_repo
        self._hold_manager = hold_manager
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, confirmation: PaymentConfirmationDTO) -> ConfirmationResultDTO:
        attempt_id = (confirmation.booking_draft or {}).get("attempt_id")
        if not attempt_id:
            raise ValidationError("booking_draft", "el borrador no trae attempt_id")

        attempt = await self._attempt_repo.get(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(attempt_id)
        if confirmation.invoice_id and attempt.invoice_id and confirmation.invoice_id != attempt.invoice_id:
            raise ValidationError("invoice_id", f"no corresponde al intento {attempt_id}")

        if attempt.state is AttemptState.CONFIRMED:
            return await self._already_confirmed(attempt)
        if attempt.state is AttemptState.EXPIRED:
            raise HoldExpiredError(attempt_id, attempt.hold_expires_at)
        if attempt.state is not AttemptState.INVOICED:
            raise InvalidAttemptStateError(attempt_id, attempt.state.value, AttemptState.CONFIRMED.value)

        now = self._clock.now()
        if attempt.hold_expired(now):
            await self._expire(attempt, now)
            raise HoldExpiredError(attempt_id, attempt.hold_expires_at)

        # Montos incoherentes con el estado de pago se rechazan
        paid, pending = split_payment(
            attempt.total_price, confirmation.payment_status, confirmation.paid_amount
        )

        draft = attempt.draft
        totals = [Decimal(value) for value in draft["unit_totals"]]
        shares = allocate(paid, totals)
        first_day = date.fromisoformat(draft["booking_date"])
        last_day = date.fromisoformat(draft["end_date"])
        today = self._clock.today()
        mark_booked = first_day <= today <= last_day

        booking_ids: list[int] = []
        voucher_ids: list[int] = []
        try:
            async with self._transaction_manager.start():
                consumed = await self._resource_repo.consume_holds(
                    attempt.resource_ids, attempt.attempt_id, now, mark_booked
                )
                if not consumed:
                    raise HoldExpiredError(attempt_id, attempt.hold_expires_at)

                for resource_id, total, share in zip(attempt.resource_ids, totals, shares):
                    booking = await self._booking_repo.add(
                        self._build_booking(attempt, resource_id, total, share, now)
                    )
                    booking_ids.append(booking.id)
                    if share > 0:
                        voucher = await self._voucher_repo.add(
                            self._build_voucher(attempt, booking, confirmation, now)
                        )
                        voucher_ids.append(voucher.id)

                attempt.mark_confirmed(booking_ids, now)
                await self._attempt_repo.save(attempt)
        except HoldExpiredError:
            # La unidad se deshizo; el intento se cierra fuera de la transacción.
            attempt = await self._attempt_repo.get(attempt_id) or attempt
            await self._expire(attempt, now)
            raise

        self._logger.info(
            "Reserva confirmada",
            extra={
                "attempt_id": attempt_id,
                "booking_ids": booking_ids,
                "payment_status": confirmation.payment_status.value,
                "paid": str(paid),
            },
        )
        return ConfirmationResultDTO(
            attempt_id=attempt_id,
            booking_ids=booking_ids,
            payment_status=confirmation.payment_status,
            paid_amount=paid,
            pending_amount=pending,
            voucher_ids=voucher_ids,
        )

    async def _expire(self, attempt: BookingAttempt, now: datetime) -> None:
        released = await self._hold_manager.release_holds(attempt.resource_ids, attempt.attempt_id)
        if not attempt.is_terminal:
            attempt.mark_expired(now)
            await self._attempt_repo.save(attempt)
        self._logger.warning(
            "Pago confirmado con la retención vencida, no se crea reserva",
            extra={"attempt_id": attempt.attempt_id, "released": released},
        )

    async def _already_confirmed(self, attempt: BookingAttempt) -> ConfirmationResultDTO:
        bookings = await self._booking_repo.list_by_attempt(attempt.attempt_id)
        paid = sum((b.paid_amount for b in bookings), Decimal("0"))
        pending = sum((b.pending_amount for b in bookings), Decimal("0"))
        if pending == 0:
            status = PaymentStatus.PAID
        elif paid == 0:
            status = PaymentStatus.UNPAID
        else:
            status = PaymentStatus.HALF_PAID
        return ConfirmationResultDTO(
            attempt_id=attempt.attempt_id,
            booking_ids=[b.id for b in bookings],
            payment_status=status,
            paid_amount=paid,
            pending_amount=pending,
            already_confirmed=True,
        )

    @staticmethod
    def _build_booking(
        attempt: BookingAttempt,
        resource_id: int,
        total: Decimal,
        paid: Decimal,
        now: datetime,
    ) -> Booking:
        draft = attempt.draft
        if paid == total:
            status = PaymentStatus.PAID
        elif paid == 0:
            status = PaymentStatus.UNPAID
        else:
            status = PaymentStatus.HALF_PAID
        resource_type = ResourceType(draft["resource_type"])
        end_date = _parse_date(draft.get("end_date"))
        return Booking(
            id=None,
            resource_id=resource_id,
            member_id=attempt.member_id,
            resource_type=resource_type,
            check_in=_parse_date(draft.get("check_in")),
            check_out=_parse_date(draft.get("check_out")),
            booking_date=_parse_date(draft.get("booking_date")),
            end_date=end_date if resource_type in (ResourceType.HALL, ResourceType.LAWN) else None,
            time_slot=TimeSlot(draft["time_slot"]) if draft.get("time_slot") else None,
            start_time=_parse_datetime(draft.get("start_time")),
            end_time=_parse_datetime(draft.get("end_time")),
            total_price=total,
            pricing_tier=PricingTier(draft["pricing_tier"]),
            payment_status=status,
            paid_amount=paid,
            pending_amount=total - paid,
            number_of_guests=draft.get("number_of_guests"),
            number_of_adults=draft.get("number_of_adults"),
            number_of_children=draft.get("number_of_children"),
            event_type=draft.get("event_type"),
            special_requests=draft.get("special_requests"),
            attempt_id=attempt.attempt_id,
            created_at=now,
        )

    @staticmethod
    def _build_voucher(
        attempt: BookingAttempt,
        booking: Booking,
        confirmation: PaymentConfirmationDTO,
        now: datetime,
    ) -> PaymentVoucher:
        voucher_type = (
            VoucherType.HALF_PAYMENT
            if booking.payment_status is PaymentStatus.HALF_PAID
            else VoucherType.FULL_PAYMENT
        )
        return PaymentVoucher(
            id=None,
            booking_id=booking.id,
            resource_type=booking.resource_type,
            member_id=attempt.member_id,
            amount=booking.paid_amount,
            voucher_type=voucher_type,
            payment_mode=confirmation.payment_mode,
            status=VoucherStatus.CONFIRMED,
            invoice_id=attempt.invoice_id,
            remarks=confirmation.transaction_ref,
            issued_at=now,
        )
