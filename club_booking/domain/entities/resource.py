"""Entidad Resource - unidad reservable del club (habitación, salón, jardín, sesión de fotos)."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from club_booking.domain.calendar import ensure_utc


class ResourceType(str, Enum):
    """Tipos de recurso reservable."""

    ROOM = "ROOM"
    HALL = "HALL"
    LAWN = "LAWN"
    PHOTOSHOOT = "PHOTOSHOOT"

    @property
    def is_slot_based(self) -> bool:
        return self is not ResourceType.ROOM


@dataclass
class OutOfServiceWindow:
    """
    Ventana fuera de servicio (mantenimiento) de un recurso.

    `is_out_of_service` es el flag activo; `starts_on`/`ends_on` describen la
    ventana programada (días calendario locales, inclusive).
    """

    is_out_of_service: bool = False
    starts_on: date | None = None
    ends_on: date | None = None
    reason: str | None = None

    @property
    def is_scheduled(self) -> bool:
        return self.starts_on is not None and self.ends_on is not None

    def covers(self, day: date) -> bool:
        """
        Indica si el día cae dentro de la ventana.

        Una ventana con fechas cubre sus días esté activa o solo programada.
        Un flag activo sin fechas es un bloqueo manual indefinido.
        """
        if self.is_scheduled:
            return self.starts_on <= day <= self.ends_on
        return self.is_out_of_service


@dataclass
class Resource:
    """
    Recurso reservable con atributos estáticos de catálogo y estado dinámico.

    `is_booked` e `is_reserved` son proyecciones derivadas, no autoritativas.
    La retención (`on_hold`, `hold_expiry`, `hold_by`) se considera ausente en
    cuanto `hold_expiry <= now`, aunque el flag siga almacenado.
    """

    id: int
    resource_type: ResourceType
    name: str = ""
    category: str | None = None

    # Atributos estáticos
    min_capacity: int | None = None
    max_capacity: int | None = None
    member_price: Decimal = Decimal("0")
    guest_price: Decimal = Decimal("0")
    is_active: bool = True

    # Estado dinámico
    is_booked: bool = False
    is_reserved: bool = False
    on_hold: bool = False
    hold_expiry: datetime | None = None
    hold_by: str | None = None
    out_of_service: OutOfServiceWindow = field(default_factory=OutOfServiceWindow)

    # Control de concurrencia
    version: int = 0

    def hold_active(self, now: datetime) -> bool:
        """Retención vigente en `now` (chequeo de expiración en lectura)."""
        if not self.on_hold or self.hold_expiry is None:
            return False
        return ensure_utc(self.hold_expiry) > ensure_utc(now)

    def is_held_by_other(self, holder_id: str, now: datetime) -> bool:
        return self.hold_active(now) and self.hold_by != holder_id

    def is_out_of_service_on(self, day: date) -> bool:
        return self.out_of_service.covers(day)

    def is_bookable_on(self, day: date) -> bool:
        """Activo y fuera de toda ventana de mantenimiento."""
        return self.is_active and not self.is_out_of_service_on(day)

    def price_for(self, is_member: bool) -> Decimal:
        return self.member_price if is_member else self.guest_price
