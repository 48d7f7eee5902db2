"""Constantes del dominio de reservas del club."""

from decimal import Decimal

LOCAL_TIMEZONE = "Asia/Karachi"
CURRENCY_CODE = "PKR"

# La retención dura lo mismo que el vencimiento de la factura.
HOLD_TTL_SECONDS = 180

PHOTOSHOOT_DURATION_HOURS = 2
PHOTOSHOOT_FIRST_START_HOUR = 9
PHOTOSHOOT_LAST_START_HOUR = 18

CALENDAR_WINDOW_DAYS = 60

PAYMENT_CHANNELS = (
    "JazzCash",
    "Easypaisa",
    "HBL",
    "Meezan",
    "UBL",
    "ATM",
    "Internet Banking",
)

INVOICE_PREFIXES = {
    "ROOM": "INV-",
    "HALL": "INV-HALL-",
    "LAWN": "INV-LAWN-",
    "PHOTOSHOOT": "INV-PHOTO-",
}

DEFAULT_SLOT_MULTIPLIERS = {
    "MORNING": Decimal("1"),
    "EVENING": Decimal("1"),
    "NIGHT": Decimal("1"),
}
