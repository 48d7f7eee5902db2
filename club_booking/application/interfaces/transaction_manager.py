"""Interface TransactionManager - unidad de trabajo atómica sobre el almacenamiento."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol


class TransactionManager(Protocol):
    """
    Agrupa escrituras en una unidad lógica (p. ej. crear la reserva y marcar el recurso).

    Si el bloque lanza una excepción, ninguna de sus escrituras queda confirmada.
    Un `start()` anidado dentro de una transacción abierta es un punto de guardado.
    """

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield

    async def commit(self) -> None:
        """Confirma lo escrito hasta ahora; lo que siga corre en una unidad nueva."""
