import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable

from club_booking.application.availability import AvailabilityEvaluator
from club_booking.application.catalog_reader import CatalogReader
from club_booking.application.conflict_checker import ConflictChecker
from club_booking.application.dtos import BookingRequestDTO, InvoiceResultDTO
from club_booking.application.hold_manager import HoldManager
from club_booking.application.interfaces.booking_attempt_repo import BookingAttemptRepo
from club_booking.application.interfaces.clock import Clock
from club_booking.application.interfaces.payment_gateway import InvoiceRequest, PaymentGateway
from club_booking.application.interfaces.transaction_manager import TransactionManager
from club_booking.domain.calendar import nights, to_local
from club_booking.domain.constants import (
    INVOICE_PREFIXES,
    PHOTOSHOOT_DURATION_HOURS,
    PHOTOSHOOT_FIRST_START_HOUR,
    PHOTOSHOOT_LAST_START_HOUR,
)
from club_booking.domain.entities.booking import PricingTier
from club_booking.domain.entities.booking_attempt import BookingAttempt
from club_booking.domain.entities.resource import Resource, ResourceType
from club_booking.domain.errors import (
    CapacityError,
    ConflictError,
    DomainError,
    GatewayError,
    ValidationError,
)
from club_booking.domain.pricing import PricingCalculator
from club_booking.domain.reservable import BookingUnit, ConflictKind


def booking_unit_for(request: BookingRequestDTO) -> BookingUnit:
    """Extensión de la solicitud según el tipo de recurso."""
    if request.resource_type is ResourceType.ROOM:
        return BookingUnit.for_stay(request.check_in, request.check_out)
    if request.resource_type is ResourceType.PHOTOSHOOT:
        end_time = request.start_time + timedelta(hours=PHOTOSHOOT_DURATION_HOURS)
        return BookingUnit.for_session(request.start_time, end_time)
    return BookingUnit.for_slot(request.booking_date, request.time_slot, request.end_date)


def validate_extent(request: BookingRequestDTO, now: datetime, today: date) -> None:
    """Valida la extensión temporal de la solicitud según el tipo de recurso."""
    kind = request.resource_type
    if kind is ResourceType.ROOM:
        if not request.check_in or not request.check_out:
            raise ValidationError("check_in", "check_in y check_out son requeridos")
        if request.check_in >= request.check_out:
            raise ValidationError("check_out", "check-in debe ser anterior a check-out")
        if request.check_in < today:
            raise ValidationError("check_in", "la fecha de check-in no puede estar en el pasado")
        if request.number_of_adults < 1:
            raise ValidationError("number_of_adults", "se requiere al menos un adulto")
        if request.number_of_units < 1:
            raise ValidationError("number_of_units", "debe ser al menos 1")
        if request.resource_id is None and not request.category:
            raise ValidationError("category", "se requiere resource_id o categoría de habitación")
        if request.resource_id is not None and request.number_of_units != 1:
            raise ValidationError("number_of_units", "una habitación explícita solo admite 1 unidad")
        return

    if request.resource_id is None:
        raise ValidationError("resource_id", "es requerido")

    if kind is ResourceType.PHOTOSHOOT:
        if request.start_time is None:
            raise ValidationError("start_time", "es requerido")
        start_local = to_local(request.start_time)
        if start_local < now:
            raise ValidationError("start_time", "la sesión no puede estar en el pasado")
        minutes = start_local.hour * 60 + start_local.minute
        if not PHOTOSHOOT_FIRST_START_HOUR * 60 <= minutes <= PHOTOSHOOT_LAST_START_HOUR * 60:
            raise ValidationError(
                "start_time",
                "las sesiones de fotos solo están disponibles entre 9:00 AM y 6:00 PM",
            )
        return

    if request.booking_date is None:
        raise ValidationError("booking_date", "es requerido")
    if request.time_slot is None:
        raise ValidationError("time_slot", "es requerido")
    if request.booking_date < today:
        raise ValidationError("booking_date", "la fecha no puede estar en el pasado")
    if request.end_date is not None and request.end_date < request.booking_date:
        raise ValidationError("end_date", "debe ser igual o posterior a booking_date")


def check_capacity(resource: Resource, request: BookingRequestDTO) -> None:
    guests = request.number_of_guests
    if guests is None:
        if resource.resource_type is ResourceType.LAWN and resource.min_capacity:
            raise ValidationError("number_of_guests", "es requerido para jardines")
        return
    if guests < 0:
        raise ValidationError("number_of_guests", "no puede ser negativo")
    too_few = resource.min_capacity is not None and guests < resource.min_capacity
    too_many = resource.max_capacity is not None and guests > resource.max_capacity
    if too_few or too_many:
        raise CapacityError(resource.id, guests, resource.min_capacity, resource.max_capacity)


def billable_units(request: BookingRequestDTO, unit: BookingUnit) -> int:
    """Noches (habitación), días (salón/jardín) o una sesión (fotos)."""
    if request.resource_type is ResourceType.PHOTOSHOOT:
        return 1
    if request.resource_type is ResourceType.ROOM:
        return nights(request.check_in, request.check_out)
    return len(unit.days())


class RequestBookingUseCase:
    """
    Primera mitad del ciclo de reserva.

    REQUESTED → CONFLICT_CHECKED → HELD → INVOICED. Cualquier error es terminal
    para el intento; si el gateway falla se liberan las retenciones.
    """

    def __init__(
        self,
        catalog: CatalogReader,
        availability: AvailabilityEvaluator,
        conflict_checker: ConflictChecker,
        hold_manager: HoldManager,
        pricing: PricingCalculator,
        payment_gateway: PaymentGateway,
        attempt_repo: BookingAttemptRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        attempt_id_factory: Callable[[], str],
    ) -> None:
        self._catalog = catalog
        self._availability = availability
        self._conflict_checker = conflict_checker
        self._hold_manager = hold_manager
        self._pricing = pricing
        self._payment_gateway = payment_gateway
        self._attempt_repo = attempt_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._attempt_id_factory = attempt_id_factory
        self._logger = logging.getLogger(__name__)

    async def execute(self, request: BookingRequestDTO) -> InvoiceResultDTO:
        now = self._clock.now()
        if request.start_time is not None:
            request.start_time = to_local(request.start_time)
        self._validate(request)
        unit = booking_unit_for(request)

        # El intento es el titular de sus retenciones
        attempt_id = self._attempt_id_factory()
        resources = await self._resolve_resources(request, attempt_id, now)
        for resource in resources:
            check_capacity(resource, request)

        attempt = BookingAttempt(
            attempt_id=attempt_id,
            member_id=request.member_id,
            resource_type=request.resource_type,
            resource_ids=[r.id for r in resources],
            created_at=now,
            updated_at=now,
        )
        await self._attempt_repo.add(attempt)

        try:
            for resource in resources:
                await self._conflict_checker.raise_for_conflict(resource.id, unit)
            attempt.mark_conflict_checked(now)

            grants = await self._hold_manager.place_holds(attempt.resource_ids, attempt.attempt_id)
        except DomainError as exc:
            attempt.mark_failed(exc.code, self._clock.now())
            await self._attempt_repo.save(attempt)
            raise

        hold_expires_at = min(grant.expires_at for grant in grants)
        attempt.mark_held(attempt.resource_ids, hold_expires_at, now)

        units = billable_units(request, unit)
        quotes = self._pricing.quote_many(resources, request.pricing_tier, units, request.time_slot)
        total = sum((q.amount for q in quotes), Decimal("0"))
        currency = quotes[0].currency_code
        attempt.draft = self._build_draft(request, attempt, unit, quotes, total, units)
        await self._attempt_repo.save(attempt)
        # Retenciones e intento HELD quedan confirmados antes de la llamada al gateway
        await self._transaction_manager.commit()

        try:
            invoice = await self._payment_gateway.create_invoice(
                InvoiceRequest(
                    amount=total,
                    consumer_reference=request.member_id,
                    booking_draft=attempt.draft,
                    due_at=hold_expires_at,
                    invoice_prefix=INVOICE_PREFIXES[request.resource_type.value],
                )
            )
        except GatewayError:
            released = await self._hold_manager.release_holds(attempt.resource_ids, attempt.attempt_id)
            attempt.mark_failed("GATEWAY_ERROR", self._clock.now())
            await self._attempt_repo.save(attempt)
            await self._transaction_manager.commit()
            self._logger.error(
                "Fallo del gateway de pagos, retenciones liberadas",
                extra={"attempt_id": attempt.attempt_id, "released": released},
            )
            raise

        attempt.mark_invoiced(invoice.invoice_id, total, self._clock.now())
        await self._attempt_repo.save(attempt)
        await self._transaction_manager.commit()
        self._logger.info(
            "Factura emitida",
            extra={
                "attempt_id": attempt.attempt_id,
                "invoice_id": invoice.invoice_id,
                "resource_ids": attempt.resource_ids,
                "amount": str(total),
            },
        )
        return InvoiceResultDTO(
            attempt_id=attempt.attempt_id,
            invoice_id=invoice.invoice_id,
            amount=total,
            currency_code=currency,
            due_at=invoice.due_at,
            hold_expires_at=hold_expires_at,
            resource_ids=list(attempt.resource_ids),
            payment_channels=list(invoice.payment_channels),
            consumer_number=invoice.consumer_number,
            booking_draft=attempt.draft,
        )

    def _validate(self, request: BookingRequestDTO) -> None:
        """Rechaza solicitudes malformadas antes de cualquier cambio de estado."""
        if not request.member_id:
            raise ValidationError("member_id", "es requerido")
        if request.pricing_tier is PricingTier.GUEST and not (request.guest_name and request.guest_contact):
            raise ValidationError("guest_name", "nombre y contacto del invitado son requeridos para tarifa de invitado")

        validate_extent(request, self._clock.now(), self._clock.today())

    async def _resolve_resources(self, request: BookingRequestDTO, holder_id: str, now) -> list[Resource]:
        if request.resource_id is not None:
            resource = await self._catalog.require(request.resource_id)
            if resource.resource_type is not request.resource_type:
                raise ValidationError(
                    "resource_id",
                    f"el recurso {resource.id} es de tipo {resource.resource_type.value}",
                )
            return [resource]

        # Primeras N habitaciones disponibles de la categoría, por id ascendente.
        available = await self._availability.available_resources(
            ResourceType.ROOM,
            request.category,
            request.check_in,
            request.check_out,
            holder_id,
            now,
        )
        if len(available) < request.number_of_units:
            raise ConflictError(
                kind=ConflictKind.BOOKED.value,
                message=(
                    f"Solo hay {len(available)} habitaciones '{request.category}' disponibles "
                    f"para {request.check_in.isoformat()} - {request.check_out.isoformat()}, "
                    f"se solicitaron {request.number_of_units}"
                ),
                day=request.check_in,
            )
        return available[: request.number_of_units]

    @staticmethod
    def _build_draft(
        request: BookingRequestDTO,
        attempt: BookingAttempt,
        unit: BookingUnit,
        quotes,
        total: Decimal,
        units: int,
    ) -> dict[str, Any]:
        """Borrador opaco (serializable a JSON) que el gateway devuelve al confirmar."""
        window = unit.window
        return {
            "attempt_id": attempt.attempt_id,
            "member_id": request.member_id,
            "resource_type": request.resource_type.value,
            "resource_ids": list(attempt.resource_ids),
            "pricing_tier": request.pricing_tier.value,
            "check_in": request.check_in.isoformat() if request.check_in else None,
            "check_out": request.check_out.isoformat() if request.check_out else None,
            "booking_date": unit.first_day.isoformat(),
            "end_date": unit.last_day.isoformat(),
            "time_slot": request.time_slot.value if request.time_slot else None,
            "start_time": window[0].isoformat() if window else None,
            "end_time": window[1].isoformat() if window else None,
            "units": units,
            "unit_totals": [str(q.amount) for q in quotes],
            "total_price": str(total),
            "currency_code": quotes[0].currency_code,
            "number_of_guests": request.number_of_guests,
            "number_of_adults": request.number_of_adults,
            "number_of_children": request.number_of_children,
            "guest_name": request.guest_name,
            "guest_contact": request.guest_contact,
            "event_type": request.event_type,
            "special_requests": request.special_requests,
        }
