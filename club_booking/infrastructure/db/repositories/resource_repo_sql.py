from datetime import date, datetime
from typing import Any

from sqlalchemy import and_, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from club_booking.application.interfaces.resource_repo import ResourceRepo
from club_booking.domain.entities.resource import OutOfServiceWindow, Resource, ResourceType
from club_booking.domain.errors import OptimisticLockError, ResourceNotFoundError
from club_booking.infrastructure.db.converters import from_db_datetime, to_db_datetime
from club_booking.infrastructure.db.tables import resources


def _row_to_resource(row: Any) -> Resource:
    return Resource(
        id=row["id"],
        resource_type=ResourceType(row["resource_type"]),
        name=row["name"] or "",
        category=row["category"],
        min_capacity=row["min_capacity"],
        max_capacity=row["max_capacity"],
        member_price=row["member_price"],
        guest_price=row["guest_price"],
        is_active=bool(row["is_active"]),
        is_booked=bool(row["is_booked"]),
        is_reserved=bool(row["is_reserved"]),
        on_hold=bool(row["on_hold"]),
        hold_expiry=from_db_datetime(row["hold_expiry"]),
        hold_by=row["hold_by"],
        out_of_service=OutOfServiceWindow(
            is_out_of_service=bool(row["is_out_of_service"]),
            starts_on=row["out_of_service_from"],
            ends_on=row["out_of_service_to"],
            reason=row["out_of_service_reason"],
        ),
        version=row["version"],
    )


_CLEARED_HOLD = {"on_hold": False, "hold_expiry": None, "hold_by": None}


class ResourceRepoSQL(ResourceRepo):
    """
    Catálogo de recursos sobre SQLAlchemy Core.

    Cada mutación es un único UPDATE condicional; el éxito se decide por `rowcount`.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _select(self, *conditions) -> list[Resource]:
        stmt = select(resources).where(*conditions).order_by(resources.c.id)
        result = await self._session.execute(stmt)
        return [_row_to_resource(row) for row in result.mappings().all()]

    async def get(self, resource_id: int) -> Resource | None:
        found = await self._select(resources.c.id == resource_id)
        return found[0] if found else None

    async def list_by_type(self, resource_type: ResourceType, category: str | None = None) -> list[Resource]:
        conditions = [resources.c.resource_type == resource_type.value]
        if category is not None:
            conditions.append(resources.c.category == category)
        return await self._select(*conditions)

    async def add(self, resource: Resource) -> Resource:
        window = resource.out_of_service
        values = {
            "resource_type": resource.resource_type.value,
            "name": resource.name,
            "category": resource.category,
            "min_capacity": resource.min_capacity,
            "max_capacity": resource.max_capacity,
            "member_price": resource.member_price,
            "guest_price": resource.guest_price,
            "is_active": resource.is_active,
            "is_booked": resource.is_booked,
            "is_reserved": resource.is_reserved,
            "on_hold": resource.on_hold,
            "hold_expiry": to_db_datetime(resource.hold_expiry),
            "hold_by": resource.hold_by,
            "is_out_of_service": window.is_out_of_service,
            "out_of_service_from": window.starts_on,
            "out_of_service_to": window.ends_on,
            "out_of_service_reason": window.reason,
            "version": resource.version,
        }
        if resource.id is not None:
            values["id"] = resource.id
        result = await self._session.execute(insert(resources).values(**values))
        resource.id = result.inserted_primary_key[0]
        return resource

    # === Retenciones ===

    async def try_place_hold(self, resource_id: int, holder_id: str, expires_at: datetime, now: datetime) -> bool:
        now_db = to_db_datetime(now)
        stmt = (
            update(resources)
            .where(
                resources.c.id == resource_id,
                or_(
                    resources.c.on_hold.is_(False),
                    resources.c.hold_expiry.is_(None),
                    resources.c.hold_expiry <= now_db,
                    resources.c.hold_by == holder_id,
                ),
            )
            .values(
                on_hold=True,
                hold_expiry=to_db_datetime(expires_at),
                hold_by=holder_id,
                version=resources.c.version + 1,
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def release_hold(self, resource_id: int, holder_id: str) -> bool:
        stmt = (
            update(resources)
            .where(
                resources.c.id == resource_id,
                resources.c.on_hold.is_(True),
                resources.c.hold_by == holder_id,
            )
            .values(**_CLEARED_HOLD, version=resources.c.version + 1)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def consume_holds(self, resource_ids: list[int], holder_id: str, now: datetime, mark_booked: bool) -> bool:
        wanted = set(resource_ids)
        held_by_holder = and_(
            resources.c.id.in_(wanted),
            resources.c.on_hold.is_(True),
            resources.c.hold_by == holder_id,
            resources.c.hold_expiry > to_db_datetime(now),
        )
        locked = await self._session.execute(
            select(resources.c.id).where(held_by_holder).with_for_update()
        )
        if set(locked.scalars().all()) != wanted:
            return False

        values: dict[str, Any] = {**_CLEARED_HOLD, "version": resources.c.version + 1}
        if mark_booked:
            values["is_booked"] = True
        result = await self._session.execute(update(resources).where(held_by_holder).values(**values))
        return result.rowcount == len(wanted)

    async def clear_expired_holds(self, now: datetime) -> list[int]:
        expired = and_(
            resources.c.on_hold.is_(True),
            or_(resources.c.hold_expiry.is_(None), resources.c.hold_expiry <= to_db_datetime(now)),
        )
        found = await self._session.execute(select(resources.c.id).where(expired).with_for_update())
        ids = list(found.scalars().all())
        if not ids:
            return []
        await self._session.execute(
            update(resources)
            .where(resources.c.id.in_(ids), expired)
            .values(**_CLEARED_HOLD, version=resources.c.version + 1)
        )
        return ids

    # === Mantenimiento ===

    async def list_out_of_service_due(self, today: date) -> list[Resource]:
        return await self._select(
            resources.c.is_out_of_service.is_(False),
            resources.c.out_of_service_from.is_not(None),
            resources.c.out_of_service_to.is_not(None),
            resources.c.out_of_service_from <= today,
            resources.c.out_of_service_to >= today,
        )

    async def list_out_of_service_lapsed(self, today: date) -> list[Resource]:
        return await self._select(
            resources.c.is_out_of_service.is_(True),
            resources.c.out_of_service_to.is_not(None),
            resources.c.out_of_service_to < today,
        )

    async def apply_out_of_service(self, resource_id: int, expected_version: int, activate: bool) -> Resource:
        if activate:
            values: dict[str, Any] = {"is_out_of_service": True, "is_active": False}
        else:
            values = {
                "is_out_of_service": False,
                "is_active": True,
                "out_of_service_from": None,
                "out_of_service_to": None,
                "out_of_service_reason": None,
            }
        stmt = (
            update(resources)
            .where(resources.c.id == resource_id, resources.c.version == expected_version)
            .values(**values, version=resources.c.version + 1)
        )
        result = await self._session.execute(stmt)
        current = await self.get(resource_id)
        if current is None:
            raise ResourceNotFoundError(resource_id)
        if result.rowcount != 1:
            raise OptimisticLockError(resource_id, expected_version, current.version)
        return current

    # === Proyecciones derivadas ===

    async def _flagged(self, column) -> set[int]:
        result = await self._session.execute(select(resources.c.id).where(column.is_(True)))
        return set(result.scalars().all())

    async def _set_flag(self, resource_ids: set[int], column_name: str, value: bool) -> int:
        if not resource_ids:
            return 0
        stmt = (
            update(resources)
            .where(resources.c.id.in_(resource_ids))
            .values({column_name: value, "version": resources.c.version + 1})
        )
        result = await self._session.execute(stmt)
        return result.rowcount

    async def list_flagged_reserved(self) -> set[int]:
        return await self._flagged(resources.c.is_reserved)

    async def set_reserved(self, resource_ids: set[int], value: bool) -> int:
        return await self._set_flag(resource_ids, "is_reserved", value)

    async def list_flagged_booked(self) -> set[int]:
        return await self._flagged(resources.c.is_booked)

    async def set_booked(self, resource_ids: set[int], value: bool) -> int:
        return await self._set_flag(resource_ids, "is_booked", value)
