"""
Utilidades de calendario.

Toda identidad de día se calcula en una única zona horaria local (no UTC),
aplicada igual a las fechas almacenadas y a las fechas consultadas.
"""

from collections.abc import Iterator
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from club_booking.domain.constants import LOCAL_TIMEZONE


_zone_name = LOCAL_TIMEZONE


@lru_cache(maxsize=8)
def _load_zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def configure_zone(name: str) -> ZoneInfo:
    """Fija la zona horaria local del club (se llama una vez al arrancar)."""
    global _zone_name
    zone = _load_zone(name)
    _zone_name = name
    return zone


def get_zone(name: str | None = None) -> ZoneInfo:
    return _load_zone(name or _zone_name)


def day_key(value: date | datetime, tz: ZoneInfo | None = None) -> date:
    """
    Convierte una fecha o instante en la clave de día calendario local.

    Args:
        value: `date` (se usa tal cual), `datetime` naive (hora local de pared)
            o `datetime` aware (se convierte a la zona local).
        tz: Zona horaria local; por defecto la del club.

    Returns:
        La fecha calendario local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz or get_zone()).date()
    return value


def local_today(now: datetime, tz: ZoneInfo | None = None) -> date:
    """Día calendario local correspondiente al instante `now`."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return day_key(now, tz)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Enumera los días de `start` a `end`, ambos inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_between(start: date, end_exclusive: date) -> list[date]:
    """Días del rango semiabierto `[start, end_exclusive)`."""
    return list(iter_days(start, end_exclusive - timedelta(days=1)))


def nights(check_in: date, check_out: date) -> int:
    """Número de noches entre check-in y check-out."""
    return (check_out - check_in).days


def start_of_local_day(day: date, tz: ZoneInfo | None = None) -> datetime:
    """Instante aware del inicio del día local."""
    return datetime.combine(day, time.min, tzinfo=tz or get_zone())


def to_local(value: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Lleva un instante a hora local; los naive se interpretan como hora local."""
    zone = tz or get_zone()
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def ensure_utc(value: datetime) -> datetime:
    """Normaliza un instante a UTC aware (naive se asume UTC, como en base de datos)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
