"""Value Object TimeSlot - franjas horarias diarias de salones, jardines y sesiones de fotos."""

from datetime import time
from enum import Enum


class TimeSlot(str, Enum):
    """Franja horaria fija de un día."""

    MORNING = "MORNING"
    EVENING = "EVENING"
    NIGHT = "NIGHT"

    @property
    def label(self) -> str:
        return SLOT_LABELS[self]

    @property
    def starts_at(self) -> time:
        return SLOT_BOUNDS[self][0]

    @property
    def ends_at(self) -> time | None:
        """Hora de fin; None para NIGHT, que termina a medianoche."""
        return SLOT_BOUNDS[self][1]


SLOT_LABELS = {
    TimeSlot.MORNING: "8:00 AM - 2:00 PM",
    TimeSlot.EVENING: "2:00 PM - 8:00 PM",
    TimeSlot.NIGHT: "8:00 PM - 12:00 AM",
}

SLOT_BOUNDS: dict[TimeSlot, tuple[time, time | None]] = {
    TimeSlot.MORNING: (time(8, 0), time(14, 0)),
    TimeSlot.EVENING: (time(14, 0), time(20, 0)),
    TimeSlot.NIGHT: (time(20, 0), None),
}

ALL_SLOTS: frozenset[TimeSlot] = frozenset(TimeSlot)
