"""Conversión entre valores de dominio y columnas (datetimes UTC sin zona)."""

from datetime import datetime, timezone

from club_booking.domain.calendar import ensure_utc


def to_db_datetime(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return ensure_utc(value).replace(tzinfo=None)


def from_db_datetime(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
