"""Lector de catálogo: atributos estáticos y estado dinámico de los recursos."""

from dataclasses import dataclass
from datetime import datetime

from club_booking.application.interfaces.resource_repo import ResourceRepo
from club_booking.domain.entities.resource import Resource, ResourceType
from club_booking.domain.errors import ResourceNotFoundError


@dataclass(frozen=True)
class HoldState:
    """Retención efectiva de un recurso tras el chequeo de expiración en lectura."""

    active: bool
    holder_id: str | None = None
    expires_at: datetime | None = None


class CatalogReader:
    def __init__(self, resource_repo: ResourceRepo) -> None:
        self._resource_repo = resource_repo

    async def get(self, resource_id: int) -> Resource | None:
        return await self._resource_repo.get(resource_id)

    async def require(self, resource_id: int) -> Resource:
        """
        Obtiene un recurso existente.

        Raises:
            ResourceNotFoundError: Si el id no existe.
        """
        resource = await self._resource_repo.get(resource_id)
        if resource is None:
            raise ResourceNotFoundError(resource_id)
        return resource

    async def list_by_type(
        self,
        resource_type: ResourceType,
        category: str | None = None,
        active_only: bool = False,
    ) -> list[Resource]:
        resources = await self._resource_repo.list_by_type(resource_type, category)
        if active_only:
            resources = [r for r in resources if r.is_active]
        return sorted(resources, key=lambda r: r.id)

    @staticmethod
    def hold_state(resource: Resource, now: datetime) -> HoldState:
        if not resource.hold_active(now):
            return HoldState(active=False)
        return HoldState(active=True, holder_id=resource.hold_by, expires_at=resource.hold_expiry)
