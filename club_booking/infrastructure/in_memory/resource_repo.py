import asyncio
from copy import deepcopy
from datetime import date, datetime

from club_booking.application.interfaces.resource_repo import ResourceRepo
from club_booking.domain.calendar import ensure_utc
from club_booking.domain.entities.resource import OutOfServiceWindow, Resource, ResourceType
from club_booking.domain.errors import OptimisticLockError, ResourceNotFoundError


class InMemoryResourceRepo(ResourceRepo):
    """
    Catálogo en memoria.

    Las escrituras condicionales se evalúan y aplican bajo un `asyncio.Lock`, de modo
    que ningún otro coroutine observa un estado intermedio. Las lecturas retornan copias.
    """

    def __init__(self, resources: list[Resource] | None = None) -> None:
        self._resources: dict[int, Resource] = {}
        self._lock = asyncio.Lock()
        self._next_id = 1
        for resource in resources or []:
            self._store(resource)

    def _store(self, resource: Resource) -> Resource:
        if resource.id is None:
            resource.id = self._next_id
        self._next_id = max(self._next_id, resource.id + 1)
        self._resources[resource.id] = deepcopy(resource)
        return deepcopy(resource)

    @staticmethod
    def _touch(resource: Resource) -> None:
        resource.version += 1

    async def get(self, resource_id: int) -> Resource | None:
        resource = self._resources.get(resource_id)
        return deepcopy(resource) if resource else None

    async def list_by_type(self, resource_type: ResourceType, category: str | None = None) -> list[Resource]:
        return [
            deepcopy(r)
            for _, r in sorted(self._resources.items())
            if r.resource_type is resource_type and (category is None or r.category == category)
        ]

    async def add(self, resource: Resource) -> Resource:
        async with self._lock:
            return self._store(resource)

    async def try_place_hold(self, resource_id: int, holder_id: str, expires_at: datetime, now: datetime) -> bool:
        async with self._lock:
            resource = self._resources.get(resource_id)
            if resource is None:
                return False
            available = (
                not resource.on_hold
                or resource.hold_expiry is None
                or ensure_utc(resource.hold_expiry) <= ensure_utc(now)
                or resource.hold_by == holder_id
            )
            if not available:
                return False
            resource.on_hold = True
            resource.hold_expiry = expires_at
            resource.hold_by = holder_id
            self._touch(resource)
            return True

    async def release_hold(self, resource_id: int, holder_id: str) -> bool:
        async with self._lock:
            resource = self._resources.get(resource_id)
            if resource is None or not resource.on_hold or resource.hold_by != holder_id:
                return False
            resource.on_hold = False
            resource.hold_expiry = None
            resource.hold_by = None
            self._touch(resource)
            return True

    async def consume_holds(self, resource_ids: list[int], holder_id: str, now: datetime, mark_booked: bool) -> bool:
        async with self._lock:
            targets = [self._resources.get(rid) for rid in resource_ids]
            if any(r is None or not r.hold_active(now) or r.hold_by != holder_id for r in targets):
                return False
            for resource in targets:
                resource.on_hold = False
                resource.hold_expiry = None
                resource.hold_by = None
                if mark_booked:
                    resource.is_booked = True
                self._touch(resource)
            return True

    async def clear_expired_holds(self, now: datetime) -> list[int]:
        cleared = []
        async with self._lock:
            for resource in self._resources.values():
                if resource.on_hold and not resource.hold_active(now):
                    resource.on_hold = False
                    resource.hold_expiry = None
                    resource.hold_by = None
                    self._touch(resource)
                    cleared.append(resource.id)
        return cleared

    async def list_out_of_service_due(self, today: date) -> list[Resource]:
        return [
            deepcopy(r)
            for r in self._resources.values()
            if r.out_of_service.is_scheduled
            and not r.out_of_service.is_out_of_service
            and r.out_of_service.covers(today)
        ]

    async def list_out_of_service_lapsed(self, today: date) -> list[Resource]:
        return [
            deepcopy(r)
            for r in self._resources.values()
            if r.out_of_service.is_out_of_service
            and r.out_of_service.ends_on is not None
            and r.out_of_service.ends_on < today
        ]

    async def apply_out_of_service(self, resource_id: int, expected_version: int, activate: bool) -> Resource:
        async with self._lock:
            resource = self._resources.get(resource_id)
            if resource is None:
                raise ResourceNotFoundError(resource_id)
            if resource.version != expected_version:
                raise OptimisticLockError(resource_id, expected_version, resource.version)
            if activate:
                resource.out_of_service.is_out_of_service = True
                resource.is_active = False
            else:
                resource.out_of_service = OutOfServiceWindow()
                resource.is_active = True
            self._touch(resource)
            return deepcopy(resource)

    async def list_flagged_reserved(self) -> set[int]:
        return {r.id for r in self._resources.values() if r.is_reserved}

    async def set_reserved(self, resource_ids: set[int], value: bool) -> int:
        return await self._set_flag(resource_ids, "is_reserved", value)

    async def list_flagged_booked(self) -> set[int]:
        return {r.id for r in self._resources.values() if r.is_booked}

    async def set_booked(self, resource_ids: set[int], value: bool) -> int:
        return await self._set_flag(resource_ids, "is_booked", value)

    async def _set_flag(self, resource_ids: set[int], attribute: str, value: bool) -> int:
        updated = 0
        async with self._lock:
            for resource_id in resource_ids:
                resource = self._resources.get(resource_id)
                if resource is None:
                    continue
                setattr(resource, attribute, value)
                self._touch(resource)
                updated += 1
        return updated
