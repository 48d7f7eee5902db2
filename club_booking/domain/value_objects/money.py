"""Value Object Money - representa un valor monetario con su moneda."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from club_booking.domain.constants import CURRENCY_CODE

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Value Object inmutable que representa un monto monetario.

    Attributes:
        amount: Monto decimal, redondeado a 2 decimales (ROUND_HALF_UP).
        currency_code: Código ISO 4217 de la moneda (por defecto PKR).
    """

    amount: Decimal
    currency_code: str = CURRENCY_CODE

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        object.__setattr__(self, "amount", self.amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))

        if len(self.currency_code) != 3:
            raise ValueError(f"currency_code debe ser de 3 caracteres: {self.currency_code}")

        if self.amount < 0:
            raise ValueError(f"amount no puede ser negativo: {self.amount}")

    def multiply(self, factor: Decimal | int) -> "Money":
        return Money(amount=self.amount * Decimal(str(factor)), currency_code=self.currency_code)

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency_code}"
