"""Worker periódico que ejecuta la pasada de reconciliación de recursos."""

import asyncio
import logging
from typing import Awaitable, Callable
from uuid import uuid4

from club_booking.application.dtos import SweepReportDTO

logger = logging.getLogger(__name__)

SweepRunner = Callable[[], Awaitable[SweepReportDTO]]


class ReconciliationWorker:
    """
    Dispara la reconciliación a intervalo fijo.

    Características:
    - Intervalo configurable
    - No reentrante: si un tick encuentra una pasada en curso, se omite
    - Una pasada fallida no detiene el ciclo; el siguiente tick reintenta
    - Graceful shutdown
    """

    def __init__(
        self,
        run_sweep: SweepRunner,
        interval_seconds: float = 10.0,
        worker_id: str | None = None,
    ) -> None:
        """
        Inicializa el worker.

        Args:
            run_sweep: Función async que ejecuta una pasada completa (abre su
                propia unidad de trabajo).
            interval_seconds: Intervalo entre pasadas en segundos.
            worker_id: Identificador del worker (auto-generado si no se provee).
        """
        self._run_sweep = run_sweep
        self._interval = interval_seconds
        self._worker_id = worker_id or f"reconciler-{uuid4().hex[:8]}"
        self._lock = asyncio.Lock()
        self._running = False
        self._stopped = asyncio.Event()

    @property
    def worker_id(self) -> str:
        return self._worker_id

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def sweep_in_progress(self) -> bool:
        return self._lock.locked()

    async def start(self) -> None:
        """Inicia el ciclo de pasadas hasta que se invoque `stop`."""
        self._running = True
        self._stopped.clear()
        logger.info(f"ReconciliationWorker {self._worker_id} iniciado (intervalo={self._interval}s)")

        while self._running:
            try:
                await self.run_once()
            except Exception as e:
                logger.exception(f"Error en ciclo del worker: {e}")
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass

    async def stop(self) -> None:
        """Detiene el worker de forma graceful."""
        self._running = False
        self._stopped.set()
        logger.info(f"ReconciliationWorker {self._worker_id} detenido")

    async def run_once(self) -> SweepReportDTO:
        """
        Ejecuta una pasada si no hay otra en curso.

        Returns:
            Reporte de la pasada, o uno con `skipped=True` si se omitió.
        """
        if self._lock.locked():
            logger.warning(
                "Pasada de reconciliación omitida: la anterior sigue en curso",
                extra={"worker_id": self._worker_id},
            )
            return SweepReportDTO(skipped=True)

        async with self._lock:
            return await self._run_sweep()
