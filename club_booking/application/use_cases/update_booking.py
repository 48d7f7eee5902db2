import logging
from dataclasses import replace
from decimal import Decimal

from club_booking.application.catalog_reader import CatalogReader
from club_booking.application.conflict_checker import ConflictChecker
from club_booking.application.dtos import BookingRequestDTO, BookingUpdateDTO, BookingUpdateResultDTO
from club_booking.application.hold_manager import HoldManager
from club_booking.application.interfaces.booking_repo import BookingRepo
from club_booking.application.interfaces.clock import Clock
from club_booking.application.interfaces.resource_repo import ResourceRepo
from club_booking.application.interfaces.transaction_manager import TransactionManager
from club_booking.application.interfaces.voucher_repo import VoucherRepo
from club_booking.application.use_cases.request_booking import (
    billable_units,
    booking_unit_for,
    check_capacity,
    validate_extent,
)
from club_booking.domain.calendar import to_local
from club_booking.domain.entities.booking import Booking, PaymentStatus, PricingTier
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.entities.voucher import PaymentVoucher, VoucherStatus, VoucherType
from club_booking.domain.errors import BookingNotFoundError, InconsistentStateError, ValidationError
from club_booking.domain.pricing import PricingCalculator, split_payment

EXTENT_FIELDS = ("check_in", "check_out", "booking_date", "end_date", "time_slot", "start_time")


def settle_payment(
    total: Decimal,
    current_paid: Decimal,
    status: PaymentStatus | None,
    paid_amount: Decimal | None,
) -> tuple[PaymentStatus, Decimal, Decimal]:
    """
    Estado, pagado y pendiente tras recalcular el total.

    Con `status` explícito se aplica `split_payment`. Sin él, el estado se deriva
    del monto pagado (nuevo o actual). No hay reembolsos: un pagado mayor que el
    total es un error.
    """
    if status is not None:
        paid, pending = split_payment(total, status, paid_amount)
        return status, paid, pending

    paid = Decimal(str(paid_amount)) if paid_amount is not None else current_paid
    if paid < 0:
        raise ValidationError("paid_amount", "no puede ser negativo")
    if paid > total:
        raise ValidationError("paid_amount", f"el monto pagado {paid} supera el nuevo total {total}")
    if paid == total:
        return PaymentStatus.PAID, paid, Decimal("0")
    if paid == 0:
        return PaymentStatus.UNPAID, paid, total
    return PaymentStatus.HALF_PAID, paid, total - paid


class UpdateBookingUseCase:
    """
    Edita una reserva confirmada: fechas o franja, tarifa, huéspedes y pago.

    El recurso queda retenido a nombre de la reserva mientras dura la edición,
    la nueva extensión se verifica ignorando la propia reserva y el total se
    recalcula. Los cambios de pago se reflejan en comprobantes: un aumento emite
    uno por la diferencia; una disminución anula los confirmados y emite uno por
    el nuevo monto pagado.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        voucher_repo: VoucherRepo,
        resource_repo: ResourceRepo,
        catalog: CatalogReader,
        conflict_checker: ConflictChecker,
        hold_manager: HoldManager,
        pricing: PricingCalculator,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._voucher_repo = voucher_repo
        self._resource_repo = resource_repo
        self._catalog = catalog
        self._conflict_checker = conflict_checker
        self._hold_manager = hold_manager
        self._pricing = pricing
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, update: BookingUpdateDTO) -> BookingUpdateResultDTO:
        booking = await self._booking_repo.get(update.booking_id)
        if booking is None:
            raise BookingNotFoundError(update.booking_id)
        if update.member_id is not None and update.member_id != booking.member_id:
            raise ValidationError("member_id", f"la reserva {booking.id} pertenece a otro socio")

        if update.start_time is not None:
            update.start_time = to_local(update.start_time)
        request = self._merged_request(booking, update)
        tier_changed = request.pricing_tier is not booking.pricing_tier
        if tier_changed and request.pricing_tier is PricingTier.GUEST and not (
            request.guest_name and request.guest_contact
        ):
            raise ValidationError("guest_name", "nombre y contacto del invitado son requeridos para tarifa de invitado")

        extent_changed = any(getattr(update, name) is not None for name in EXTENT_FIELDS)
        if extent_changed:
            validate_extent(request, self._clock.now(), self._clock.today())
        unit = booking_unit_for(request)

        resource = await self._catalog.require(booking.resource_id)
        if update.number_of_guests is not None:
            check_capacity(resource, request)

        holder_id = f"BOOKING-{booking.id}"
        await self._hold_manager.place_hold(resource.id, holder_id)
        try:
            async with self._transaction_manager.start():
                if extent_changed:
                    await self._conflict_checker.raise_for_conflict(
                        resource.id, unit, exclude_booking_id=booking.id
                    )

                total = booking.total_price
                if extent_changed or tier_changed:
                    units = billable_units(request, unit)
                    total = self._pricing.quote(resource, request.pricing_tier, units, request.time_slot).amount
                status, paid, pending = settle_payment(
                    total, booking.paid_amount, update.payment_status, update.paid_amount
                )

                old_paid = booking.paid_amount
                updated = self._apply(booking, request, unit, total, status, paid, pending)
                if not await self._booking_repo.update(updated):
                    raise BookingNotFoundError(booking.id)

                voucher_ids, cancelled = await self._sync_vouchers(updated, old_paid, update)
                await self._sync_booked_flag(resource.id)
        finally:
            await self._hold_manager.release_hold(resource.id, holder_id)

        self._logger.info(
            "Reserva actualizada",
            extra={
                "booking_id": updated.id,
                "resource_id": updated.resource_id,
                "total": str(updated.total_price),
                "paid": str(updated.paid_amount),
                "payment_status": updated.payment_status.value,
                "vouchers_issued": voucher_ids,
                "vouchers_cancelled": cancelled,
            },
        )
        return BookingUpdateResultDTO(booking=updated, voucher_ids=voucher_ids, cancelled_vouchers=cancelled)

    @staticmethod
    def _merged_request(booking: Booking, update: BookingUpdateDTO) -> BookingRequestDTO:
        def pick(name: str, current):
            value = getattr(update, name)
            return current if value is None else value

        return BookingRequestDTO(
            member_id=booking.member_id,
            resource_type=booking.resource_type,
            pricing_tier=pick("pricing_tier", booking.pricing_tier),
            resource_id=booking.resource_id,
            check_in=pick("check_in", booking.check_in),
            check_out=pick("check_out", booking.check_out),
            booking_date=pick("booking_date", booking.booking_date),
            end_date=pick("end_date", booking.end_date),
            time_slot=pick("time_slot", booking.time_slot),
            start_time=pick("start_time", booking.start_time),
            number_of_guests=pick("number_of_guests", booking.number_of_guests),
            number_of_adults=pick("number_of_adults", booking.number_of_adults or 1),
            number_of_children=pick("number_of_children", booking.number_of_children or 0),
            guest_name=update.guest_name,
            guest_contact=update.guest_contact,
            event_type=pick("event_type", booking.event_type),
            special_requests=pick("special_requests", booking.special_requests),
        )

    @staticmethod
    def _apply(
        booking: Booking,
        request: BookingRequestDTO,
        unit,
        total: Decimal,
        status: PaymentStatus,
        paid: Decimal,
        pending: Decimal,
    ) -> Booking:
        window = unit.window
        is_event = booking.resource_type in (ResourceType.HALL, ResourceType.LAWN)
        return replace(
            booking,
            check_in=request.check_in,
            check_out=request.check_out,
            booking_date=unit.first_day,
            end_date=unit.last_day if is_event else None,
            time_slot=request.time_slot,
            start_time=window[0] if window else None,
            end_time=window[1] if window else None,
            total_price=total,
            pricing_tier=request.pricing_tier,
            payment_status=status,
            paid_amount=paid,
            pending_amount=pending,
            number_of_guests=request.number_of_guests,
            number_of_adults=request.number_of_adults,
            number_of_children=request.number_of_children,
            event_type=request.event_type,
            special_requests=request.special_requests,
        )

    async def _sync_vouchers(
        self,
        booking: Booking,
        old_paid: Decimal,
        update: BookingUpdateDTO,
    ) -> tuple[list[int], int]:
        if booking.paid_amount == old_paid:
            return [], 0

        cancelled = 0
        amount = booking.paid_amount - old_paid
        if amount < 0:
            cancelled = await self._voucher_repo.cancel_confirmed(booking.id)
            amount = booking.paid_amount
            if amount == 0:
                return [], cancelled

        voucher = await self._voucher_repo.add(
            PaymentVoucher(
                id=None,
                booking_id=booking.id,
                resource_type=booking.resource_type,
                member_id=booking.member_id,
                amount=amount,
                voucher_type=(
                    VoucherType.FULL_PAYMENT
                    if booking.payment_status is PaymentStatus.PAID
                    else VoucherType.HALF_PAYMENT
                ),
                payment_mode=update.payment_mode,
                status=VoucherStatus.CONFIRMED,
                remarks=update.remarks,
                issued_at=self._clock.now(),
            )
        )
        return [voucher.id], cancelled

    async def _sync_booked_flag(self, resource_id: int) -> None:
        """Alinea `is_booked` con las reservas que cubren hoy tras mover la extensión."""
        covering = await self._booking_repo.resource_ids_covering(self._clock.today())
        should_be_booked = resource_id in covering
        resource = await self._resource_repo.get(resource_id)
        if resource is None:
            raise InconsistentStateError(f"El recurso {resource_id} desapareció durante la edición")
        if resource.is_booked != should_be_booked:
            await self._resource_repo.set_booked({resource_id}, should_be_booked)