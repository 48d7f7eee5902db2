"""Value Objects del dominio."""

from club_booking.domain.value_objects.money import Money
from club_booking.domain.value_objects.time_slot import ALL_SLOTS, TimeSlot

__all__ = ["ALL_SLOTS", "Money", "TimeSlot"]
