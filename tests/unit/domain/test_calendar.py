"""Tests de utilidades de calendario en la zona horaria local del club."""

from datetime import date, datetime, timezone

from club_booking.domain.calendar import (
    day_key,
    days_between,
    ensure_utc,
    get_zone,
    iter_days,
    local_today,
    nights,
    to_local,
)


class TestDayKey:
    def test_aware_datetime_uses_local_zone(self):
        """21:30 UTC ya es el día siguiente en Karachi (UTC+5)."""
        instant = datetime(2026, 3, 10, 21, 30, tzinfo=timezone.utc)
        assert day_key(instant) == date(2026, 3, 11)

    def test_naive_datetime_is_local_wall_time(self):
        assert day_key(datetime(2026, 3, 10, 23, 59)) == date(2026, 3, 10)

    def test_date_is_returned_as_is(self):
        assert day_key(date(2026, 3, 10)) == date(2026, 3, 10)

    def test_local_today_treats_naive_now_as_utc(self):
        assert local_today(datetime(2026, 3, 10, 20, 0)) == date(2026, 3, 11)


class TestDayRanges:
    def test_iter_days_is_inclusive(self):
        days = list(iter_days(date(2026, 3, 10), date(2026, 3, 12)))
        assert days == [date(2026, 3, 10), date(2026, 3, 11), date(2026, 3, 12)]

    def test_days_between_excludes_end(self):
        assert days_between(date(2026, 3, 10), date(2026, 3, 12)) == [date(2026, 3, 10), date(2026, 3, 11)]

    def test_days_between_empty_range(self):
        assert days_between(date(2026, 3, 10), date(2026, 3, 10)) == []

    def test_nights(self):
        assert nights(date(2026, 3, 10), date(2026, 3, 13)) == 3


class TestConversions:
    def test_to_local_on_naive_attaches_zone(self):
        local = to_local(datetime(2026, 3, 10, 9, 0))
        assert local.tzinfo == get_zone()
        assert local.hour == 9

    def test_to_local_converts_aware(self):
        local = to_local(datetime(2026, 3, 10, 4, 0, tzinfo=timezone.utc))
        assert local.hour == 9

    def test_ensure_utc(self):
        assert ensure_utc(datetime(2026, 3, 10, 4, 0)).tzinfo == timezone.utc
        assert ensure_utc(to_local(datetime(2026, 3, 10, 9, 0))).hour == 4
