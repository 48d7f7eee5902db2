"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Reloj fijo (FakeClock) en un instante conocido
- Repositorios en memoria con el catálogo de demostración
- Casos de uso armados igual que en la API
- Motor SQLite in-memory para probar los repositorios SQL
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from club_booking.api.dependencies import build_use_cases
from club_booking.application.interfaces.clock import FakeClock
from club_booking.config import Settings
from club_booking.domain.calendar import configure_zone
from club_booking.domain.entities.booking import Booking, PaymentStatus, PricingTier
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.value_objects.time_slot import TimeSlot
from club_booking.infrastructure.circuit_breaker import payment_gateway_breaker
from club_booking.infrastructure.db.tables import metadata
from club_booking.infrastructure.in_memory import (
    InMemoryBookingAttemptRepo,
    InMemoryBookingRepo,
    InMemoryReservationRepo,
    InMemoryResourceRepo,
    InMemoryVoucherRepo,
    NoopTransactionManager,
    StubPaymentGateway,
)
from club_booking.infrastructure.seed import demo_catalog

# 2026-03-10 10:00 hora de Karachi (UTC+5)
NOW = datetime(2026, 3, 10, 5, 0, tzinfo=timezone.utc)
TODAY = date(2026, 3, 10)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ROOM_101 = 1
ROOM_102 = 2
ROOM_201 = 3
HALL = 10
LAWN = 20
PHOTOSHOOT = 30


configure_zone("Asia/Karachi")


# ============================================================================
# FIXTURES DE DOMINIO Y APLICACIÓN
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, use_in_memory=True, payment_gateway_base_url=None)


@pytest.fixture
def bundle(clock):
    """Repositorios en memoria sembrados con el catálogo de demostración."""
    return {
        "resource_repo": InMemoryResourceRepo(demo_catalog()),
        "booking_repo": InMemoryBookingRepo(),
        "reservation_repo": InMemoryReservationRepo(),
        "voucher_repo": InMemoryVoucherRepo(),
        "attempt_repo": InMemoryBookingAttemptRepo(),
        "payment_gateway": StubPaymentGateway(record_requests=True),
        "tx_manager": NoopTransactionManager(),
        "clock": clock,
    }


@pytest.fixture
def use_cases(bundle, settings):
    return build_use_cases(bundle, settings)


def make_booking(resource_id: int, resource_type: ResourceType, **extent) -> Booking:
    """Reserva confirmada pagada para sembrar escenarios."""
    return Booking(
        id=None,
        resource_id=resource_id,
        member_id=extent.pop("member_id", "M-OTHER"),
        resource_type=resource_type,
        total_price=Decimal("1000.00"),
        pricing_tier=PricingTier.MEMBER,
        payment_status=PaymentStatus.PAID,
        paid_amount=Decimal("1000.00"),
        pending_amount=Decimal("0"),
        **extent,
    )


def room_booking(resource_id: int, check_in: date, check_out: date, **kwargs) -> Booking:
    return make_booking(resource_id, ResourceType.ROOM, check_in=check_in, check_out=check_out, **kwargs)


def slot_booking(
    resource_id: int,
    day: date,
    slot: TimeSlot,
    resource_type: ResourceType = ResourceType.HALL,
    **kwargs,
) -> Booking:
    return make_booking(resource_id, resource_type, booking_date=day, time_slot=slot, **kwargs)


# ============================================================================
# FIXTURES DE BASE DE DATOS
# ============================================================================

@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """
    Create async engine for test database.
    SQLite in-memory compartido por una sola conexión (StaticPool).
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Sesión por test; se descarta sin commit al terminar."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# HOOKS DE PYTEST
# ============================================================================

@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """
    Reset circuit breakers antes de cada test.
    Evita que tests fallen por breakers abiertos de tests anteriores.
    """
    payment_gateway_breaker.close()
    yield
    payment_gateway_breaker.close()
