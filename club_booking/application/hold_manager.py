"""Administrador de retenciones: reclamos exclusivos y con vencimiento sobre un recurso."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from club_booking.application.interfaces.clock import Clock
from club_booking.application.interfaces.resource_repo import ResourceRepo
from club_booking.domain.constants import HOLD_TTL_SECONDS
from club_booking.domain.entities.resource import Resource
from club_booking.domain.errors import AlreadyHeldError, ResourceNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HoldGrant:
    resource_id: int
    holder_id: str
    expires_at: datetime


class HoldManager:
    """
    Coloca, consulta y libera retenciones.

    La colocación es el punto de serialización: una sola escritura condicional,
    nunca leer-y-luego-escribir. No verifica conflictos de reservas; quien llama
    debe correr el ConflictChecker antes.
    """

    def __init__(
        self,
        resource_repo: ResourceRepo,
        clock: Clock,
        ttl_seconds: int = HOLD_TTL_SECONDS,
    ) -> None:
        self._resource_repo = resource_repo
        self._clock = clock
        self._ttl = timedelta(seconds=ttl_seconds)

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    async def place_hold(
        self,
        resource_id: int,
        holder_id: str,
        ttl: timedelta | None = None,
    ) -> HoldGrant:
        """
        Coloca o renueva la retención de `holder_id` sobre un recurso.

        Idempotente para el mismo titular: volver a colocarla solo refresca el vencimiento.

        Raises:
            AlreadyHeldError: Si otro titular tiene una retención vigente.
            ResourceNotFoundError: Si el recurso no existe.
        """
        now = self._clock.now()
        expires_at = now + (ttl or self._ttl)
        placed = await self._resource_repo.try_place_hold(resource_id, holder_id, expires_at, now)
        if placed:
            logger.info(
                "Retención colocada",
                extra={"resource_id": resource_id, "holder_id": holder_id, "expires_at": expires_at.isoformat()},
            )
            return HoldGrant(resource_id=resource_id, holder_id=holder_id, expires_at=expires_at)

        resource = await self._resource_repo.get(resource_id)
        if resource is None:
            raise ResourceNotFoundError(resource_id)
        raise AlreadyHeldError(resource_id, holder_id=resource.hold_by)

    async def place_holds(
        self,
        resource_ids: list[int],
        holder_id: str,
        ttl: timedelta | None = None,
    ) -> list[HoldGrant]:
        """
        Retiene varios recursos como una unidad (todo o nada).

        Si alguna colocación falla, libera las retenciones obtenidas en esta llamada
        y relanza el error original.
        """
        grants: list[HoldGrant] = []
        try:
            for resource_id in resource_ids:
                grants.append(await self.place_hold(resource_id, holder_id, ttl))
        except Exception:
            released = await self.release_holds([g.resource_id for g in grants], holder_id)
            logger.warning(
                "Retención múltiple fallida, liberando retenciones parciales",
                extra={"holder_id": holder_id, "released": released, "requested": resource_ids},
            )
            raise
        return grants

    async def release_hold(self, resource_id: int, holder_id: str) -> bool:
        """
        Libera la retención si pertenece al titular.

        Returns:
            False (no fatal) si la retención no existía o era de otro titular.
        """
        released = await self._resource_repo.release_hold(resource_id, holder_id)
        if not released:
            logger.debug(
                "Liberación ignorada: retención ajena o inexistente",
                extra={"resource_id": resource_id, "holder_id": holder_id},
            )
        return released

    async def release_holds(self, resource_ids: list[int], holder_id: str) -> int:
        released = 0
        for resource_id in resource_ids:
            if await self.release_hold(resource_id, holder_id):
                released += 1
        return released

    async def is_held_by_other(self, resource: Resource | int, holder_id: str) -> bool:
        """Retención vigente de otro titular; una retención vencida cuenta como ausente."""
        if not isinstance(resource, Resource):
            resource = await self._resource_repo.get(resource)
            if resource is None:
                return False
        return resource.is_held_by_other(holder_id, self._clock.now())
