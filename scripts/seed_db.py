import asyncio

from club_booking.api.deps import AsyncSessionLocal, engine
from club_booking.infrastructure.db.engine import session_scope
from club_booking.infrastructure.db.repositories.resource_repo_sql import ResourceRepoSQL
from club_booking.infrastructure.db.tables import metadata
from club_booking.infrastructure.seed import demo_catalog


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        print("Created all tables.")

    async with session_scope(AsyncSessionLocal) as session:
        repo = ResourceRepoSQL(session)
        for resource in demo_catalog():
            if await repo.get(resource.id) is None:
                await repo.add(resource)
                print(f"Seeded {resource.resource_type.value} {resource.id} ({resource.name})")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
