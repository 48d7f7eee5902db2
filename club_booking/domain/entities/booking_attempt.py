"""Entidad BookingAttempt - máquina de estados de un intento de reserva."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from club_booking.domain.calendar import ensure_utc
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.errors import InvalidAttemptStateError


class AttemptState(str, Enum):
    """Estados del intento: REQUESTED → CONFLICT_CHECKED → HELD → INVOICED → terminal."""

    REQUESTED = "REQUESTED"
    CONFLICT_CHECKED = "CONFLICT_CHECKED"
    HELD = "HELD"
    INVOICED = "INVOICED"
    CONFIRMED = "CONFIRMED"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"


TERMINAL_STATES = frozenset({AttemptState.CONFIRMED, AttemptState.EXPIRED, AttemptState.FAILED})

ALLOWED_TRANSITIONS: dict[AttemptState, frozenset[AttemptState]] = {
    AttemptState.REQUESTED: frozenset({AttemptState.CONFLICT_CHECKED, AttemptState.FAILED}),
    AttemptState.CONFLICT_CHECKED: frozenset({AttemptState.HELD, AttemptState.FAILED}),
    AttemptState.HELD: frozenset({AttemptState.INVOICED, AttemptState.FAILED, AttemptState.EXPIRED}),
    AttemptState.INVOICED: frozenset(
        {AttemptState.CONFIRMED, AttemptState.EXPIRED, AttemptState.FAILED}
    ),
    AttemptState.CONFIRMED: frozenset(),
    AttemptState.EXPIRED: frozenset(),
    AttemptState.FAILED: frozenset(),
}


@dataclass
class BookingAttempt:
    """
    Intento de reserva que vive entre la solicitud y la confirmación del pago.

    El `draft` es el borrador opaco que viaja al gateway y regresa en el callback.
    """

    attempt_id: str
    member_id: str
    resource_type: ResourceType
    resource_ids: list[int] = field(default_factory=list)
    draft: dict[str, Any] = field(default_factory=dict)
    state: AttemptState = AttemptState.REQUESTED
    hold_expires_at: datetime | None = None
    invoice_id: str | None = None
    total_price: Decimal = Decimal("0")
    booking_ids: list[int] = field(default_factory=list)
    failure_code: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def hold_expired(self, now: datetime) -> bool:
        if self.hold_expires_at is None:
            return False
        return ensure_utc(now) >= ensure_utc(self.hold_expires_at)

    def transition_to(self, target: AttemptState, now: datetime | None = None) -> None:
        """
        Aplica una transición validada.

        Raises:
            InvalidAttemptStateError: Si la transición no está permitida.
        """
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidAttemptStateError(self.attempt_id, self.state.value, target.value)
        self.state = target
        self.updated_at = now

    # === Métodos de negocio ===

    def mark_conflict_checked(self, now: datetime | None = None) -> None:
        self.transition_to(AttemptState.CONFLICT_CHECKED, now)

    def mark_held(self, resource_ids: list[int], hold_expires_at: datetime, now: datetime | None = None) -> None:
        self.transition_to(AttemptState.HELD, now)
        self.resource_ids = list(resource_ids)
        self.hold_expires_at = hold_expires_at

    def mark_invoiced(self, invoice_id: str, total_price: Decimal, now: datetime | None = None) -> None:
        self.transition_to(AttemptState.INVOICED, now)
        self.invoice_id = invoice_id
        self.total_price = total_price

    def mark_confirmed(self, booking_ids: list[int], now: datetime | None = None) -> None:
        self.transition_to(AttemptState.CONFIRMED, now)
        self.booking_ids = list(booking_ids)

    def mark_expired(self, now: datetime | None = None) -> None:
        self.transition_to(AttemptState.EXPIRED, now)
        self.failure_code = "HOLD_EXPIRED"

    def mark_failed(self, failure_code: str, now: datetime | None = None) -> None:
        self.transition_to(AttemptState.FAILED, now)
        self.failure_code = failure_code
