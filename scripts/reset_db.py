import asyncio

from club_booking.api.deps import engine
from club_booking.infrastructure.db.tables import metadata


async def reset():
    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        print("Dropped all tables.")
        await conn.run_sync(metadata.create_all)
        print("Recreated all tables.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(reset())
