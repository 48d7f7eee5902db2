import asyncio
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from club_booking.api.dependencies import run_reconciliation_sweep
from club_booking.api.deps import engine
from club_booking.api.routers.availability import router as availability_router
from club_booking.api.routers.bookings import router as bookings_router
from club_booking.api.routers.health import router as health_router
from club_booking.api.routers.payments import router as payments_router
from club_booking.api.routers.worker import router as worker_router
from club_booking.config import get_settings
from club_booking.domain.calendar import configure_zone
from club_booking.domain.errors import (
    AttemptNotFoundError,
    BookingNotFoundError,
    CapacityError,
    ConflictError,
    DomainError,
    GatewayError,
    HoldExpiredError,
    InconsistentStateError,
    InvalidAttemptStateError,
    OptimisticLockError,
    ResourceNotFoundError,
    ValidationError,
)
from club_booking.infrastructure.db.tables import metadata
from club_booking.infrastructure.messaging.reconciliation_worker import ReconciliationWorker

settings = get_settings()

# Configure structured logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

configure_zone(settings.local_timezone)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.use_in_memory:
        # Initialize DB tables (for dev/demo purposes)
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    worker = ReconciliationWorker(
        run_sweep=run_reconciliation_sweep,
        interval_seconds=settings.reconciliation_interval_seconds,
    )
    app.state.reconciliation_worker = worker
    worker_task = None
    if settings.reconciliation_enabled:
        worker_task = asyncio.create_task(worker.start())

    yield

    # Cleanup
    if worker_task is not None:
        await worker.stop()
        await worker_task
    await engine.dispose()

app = FastAPI(
    title="Club Booking Engine",
    version="0.1.0",
    lifespan=lifespan
)


# Orden: subclases antes que sus bases
ERROR_STATUS: list[tuple[type[DomainError], int]] = [
    (ValidationError, 400),
    (CapacityError, 422),
    (ConflictError, 409),
    (InvalidAttemptStateError, 409),
    (OptimisticLockError, 409),
    (HoldExpiredError, 410),
    (GatewayError, 502),
    (ResourceNotFoundError, 404),
    (BookingNotFoundError, 404),
    (AttemptNotFoundError, 404),
    (InconsistentStateError, 500),
]


def status_for(exc: DomainError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 400


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Traduce errores de dominio a respuestas con `code`, `message` y, si aplica, `kind`/`day`/`slot`."""
    status_code = status_for(exc)
    content = {"code": exc.code, "message": exc.message}
    if isinstance(exc, ConflictError):
        content["kind"] = exc.kind
        content["day"] = exc.day.isoformat() if exc.day else None
        content["slot"] = exc.slot
    if isinstance(exc, GatewayError):
        content["gateway_error_code"] = exc.gateway_error_code

    log = logger.error if status_code >= 500 else logger.info
    log(
        "Domain error",
        extra={"code": exc.code, "path": request.url.path, "status_code": status_code},
    )
    return JSONResponse(status_code=status_code, content=content)


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    All unhandled exceptions are logged internally and return a generic error message.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists."
        }
    )


app.include_router(health_router, tags=["Health"])
app.include_router(availability_router, prefix="/api/v1", tags=["Availability"])
app.include_router(bookings_router, prefix="/api/v1", tags=["Bookings"])
app.include_router(payments_router, prefix="/api/v1", tags=["Payments"])
app.include_router(worker_router, prefix="/api/v1", tags=["Worker"])
