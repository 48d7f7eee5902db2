from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from club_booking.application.interfaces.transaction_manager import TransactionManager


class NoopTransactionManager(TransactionManager):
    """Los repositorios en memoria aplican cada escritura atómicamente; no hay rollback."""

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield

    async def commit(self) -> None:
        return None
