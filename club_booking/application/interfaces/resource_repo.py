from datetime import date, datetime

from club_booking.domain.entities.resource import Resource, ResourceType


class ResourceRepo:
    """
    Acceso al catálogo de recursos y a su estado dinámico.

    Toda mutación es una única escritura atómica (condicional donde se indica) e
    incrementa `version`; nunca un leer-modificar-escribir en dos viajes.
    """

    async def get(self, resource_id: int) -> Resource | None:
        raise NotImplementedError

    async def list_by_type(
        self,
        resource_type: ResourceType,
        category: str | None = None,
    ) -> list[Resource]:
        """Recursos del tipo (y categoría) en orden ascendente de id."""
        raise NotImplementedError

    async def add(self, resource: Resource) -> Resource:
        raise NotImplementedError

    # === Retenciones ===

    async def try_place_hold(
        self,
        resource_id: int,
        holder_id: str,
        expires_at: datetime,
        now: datetime,
    ) -> bool:
        """
        Coloca la retención solo si `on_hold` es falso, la retención venció o ya es del titular.

        Returns:
            True si la escritura condicional aplicó.
        """
        raise NotImplementedError

    async def release_hold(self, resource_id: int, holder_id: str) -> bool:
        """Libera la retención solo si pertenece a `holder_id`."""
        raise NotImplementedError

    async def consume_holds(
        self,
        resource_ids: list[int],
        holder_id: str,
        now: datetime,
        mark_booked: bool,
    ) -> bool:
        """
        Convierte retenciones vigentes del titular en reserva (todo o nada).

        Libera la retención y, si `mark_booked`, enciende `is_booked`. Si alguna
        retención ya no es del titular o venció, no modifica nada y retorna False.
        """
        raise NotImplementedError

    async def clear_expired_holds(self, now: datetime) -> list[int]:
        """Limpia físicamente retenciones con `hold_expiry <= now`."""
        raise NotImplementedError

    # === Mantenimiento ===

    async def list_out_of_service_due(self, today: date) -> list[Resource]:
        """Recursos cuya ventana programada contiene `today` y aún no están marcados."""
        raise NotImplementedError

    async def list_out_of_service_lapsed(self, today: date) -> list[Resource]:
        """Recursos marcados fuera de servicio cuya ventana terminó antes de `today`."""
        raise NotImplementedError

    async def apply_out_of_service(
        self,
        resource_id: int,
        expected_version: int,
        activate: bool,
    ) -> Resource:
        """
        Activa (`is_out_of_service=True, is_active=False`) o levanta la ventana
        (reactiva y limpia ventana y motivo), condicionado a `expected_version`.

        Raises:
            OptimisticLockError: Si la versión almacenada difiere.
            ResourceNotFoundError: Si el recurso no existe.
        """
        raise NotImplementedError

    # === Proyecciones derivadas ===

    async def list_flagged_reserved(self) -> set[int]:
        raise NotImplementedError

    async def set_reserved(self, resource_ids: set[int], value: bool) -> int:
        raise NotImplementedError

    async def list_flagged_booked(self) -> set[int]:
        raise NotImplementedError

    async def set_booked(self, resource_ids: set[int], value: bool) -> int:
        raise NotImplementedError
