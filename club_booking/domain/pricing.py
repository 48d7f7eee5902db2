"""Calculadora de precios - funciones puras sobre los atributos de catálogo."""

from decimal import ROUND_DOWN, Decimal

from club_booking.domain.constants import CURRENCY_CODE, DEFAULT_SLOT_MULTIPLIERS
from club_booking.domain.entities.booking import PaymentStatus, PricingTier
from club_booking.domain.entities.resource import Resource
from club_booking.domain.errors import ValidationError
from club_booking.domain.value_objects.money import TWO_PLACES, Money
from club_booking.domain.value_objects.time_slot import TimeSlot


class PricingCalculator:
    """
    Calcula el total de una reserva.

    `total = precio_unitario(tarifa) × multiplicador(franja) × unidades`, donde las
    unidades son noches (habitación), días (salón/jardín) o una sesión (fotos).
    """

    def __init__(
        self,
        slot_multipliers: dict[str, Decimal] | None = None,
        currency_code: str = CURRENCY_CODE,
    ) -> None:
        self._multipliers = {
            TimeSlot(key): Decimal(str(value))
            for key, value in (slot_multipliers or DEFAULT_SLOT_MULTIPLIERS).items()
        }
        self._currency = currency_code

    def unit_price(self, resource: Resource, tier: PricingTier) -> Money:
        return Money(resource.price_for(tier is PricingTier.MEMBER), self._currency)

    def multiplier(self, time_slot: TimeSlot | None) -> Decimal:
        if time_slot is None:
            return Decimal("1")
        return self._multipliers.get(time_slot, Decimal("1"))

    def quote(
        self,
        resource: Resource,
        tier: PricingTier,
        units: int,
        time_slot: TimeSlot | None = None,
    ) -> Money:
        """
        Precio total para un recurso.

        Args:
            resource: Recurso con precios de socio e invitado.
            tier: Tarifa a aplicar.
            units: Noches, días o sesiones (>= 1).
            time_slot: Franja, para aplicar su multiplicador.

        Returns:
            Total redondeado a 2 decimales.
        """
        if units < 1:
            raise ValidationError("units", f"debe ser al menos 1, recibido {units}")
        return self.unit_price(resource, tier).multiply(self.multiplier(time_slot) * units)

    def quote_many(
        self,
        resources: list[Resource],
        tier: PricingTier,
        units: int,
        time_slot: TimeSlot | None = None,
    ) -> list[Money]:
        return [self.quote(resource, tier, units, time_slot) for resource in resources]


def split_payment(
    total: Decimal,
    status: PaymentStatus,
    paid_amount: Decimal | None = None,
) -> tuple[Decimal, Decimal]:
    """
    Calcula (pagado, pendiente) respetando la invariante contable.

    Raises:
        ValidationError: Si el monto pagado no es coherente con el estado.
    """
    total = Decimal(str(total))
    if status is PaymentStatus.PAID:
        if paid_amount is not None and Decimal(str(paid_amount)) != total:
            raise ValidationError(
                "paid_amount", f"un pago PAID debe cubrir el total {total}, recibido {paid_amount}"
            )
        return total, Decimal("0")
    if status is PaymentStatus.HALF_PAID:
        paid = Decimal(str(paid_amount or 0))
        if paid <= 0:
            raise ValidationError("paid_amount", "debe ser mayor que 0 para HALF_PAID")
        if paid >= total:
            raise ValidationError("paid_amount", "debe ser menor que el total para HALF_PAID")
        return paid, total - paid
    if paid_amount:
        raise ValidationError("paid_amount", "una reserva UNPAID no puede tener monto pagado")
    return Decimal("0"), total


def allocate(paid: Decimal, totals: list[Decimal]) -> list[Decimal]:
    """
    Reparte un pago entre varias reservas en proporción a sus totales.

    Cada parte se trunca al centavo; el sobrante se suma desde la última reserva
    hacia atrás sin pasar del total de cada una. Ninguna parte queda negativa.
    """
    grand_total = sum(totals, Decimal("0"))
    if not totals:
        return []
    if grand_total == 0:
        return [Decimal("0") for _ in totals]
    shares = [(paid * total / grand_total).quantize(TWO_PLACES, rounding=ROUND_DOWN) for total in totals]
    remainder = paid - sum(shares, Decimal("0"))
    for index in reversed(range(len(totals))):
        if remainder <= 0:
            break
        step = min(remainder, totals[index] - shares[index])
        shares[index] += step
        remainder -= step
    return shares
