import logging
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from club_booking.api.deps import AsyncSessionLocal
from club_booking.application.availability import AvailabilityEvaluator
from club_booking.application.catalog_reader import CatalogReader
from club_booking.application.conflict_checker import ConflictChecker
from club_booking.application.dtos import SweepReportDTO
from club_booking.application.hold_manager import HoldManager
from club_booking.application.interfaces.clock import Clock, SystemClock
from club_booking.application.interfaces.payment_gateway import PaymentGateway
from club_booking.application.use_cases.cancel_booking import CancelBookingUseCase
from club_booking.application.use_cases.confirm_booking import ConfirmBookingUseCase
from club_booking.application.use_cases.get_availability import GetAvailabilityUseCase
from club_booking.application.use_cases.get_booking_vouchers import GetBookingVouchersUseCase
from club_booking.application.use_cases.get_member_bookings import GetMemberBookingsUseCase
from club_booking.application.use_cases.reconcile_resources import ReconcileResourcesUseCase
from club_booking.application.use_cases.release_booking_attempt import ReleaseBookingAttemptUseCase
from club_booking.application.use_cases.request_booking import RequestBookingUseCase
from club_booking.application.use_cases.update_booking import UpdateBookingUseCase
from club_booking.config import Settings, get_settings
from club_booking.domain.errors import DomainError
from club_booking.domain.pricing import PricingCalculator
from club_booking.infrastructure.db.repositories.booking_attempt_repo_sql import BookingAttemptRepoSQL
from club_booking.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from club_booking.infrastructure.db.repositories.reservation_repo_sql import ReservationRepoSQL
from club_booking.infrastructure.db.repositories.resource_repo_sql import ResourceRepoSQL
from club_booking.infrastructure.db.repositories.voucher_repo_sql import VoucherRepoSQL
from club_booking.infrastructure.db.retry import is_deadlock_error, with_deadlock_retry
from club_booking.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from club_booking.infrastructure.gateways.payment_gateway_http import PaymentGatewayHTTP
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
from club_booking.infrastructure.services import generate_attempt_id

logger = logging.getLogger(__name__)


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    """
    Sesión por request en modo SQL.

    Confirma al terminar, también cuando el caso de uso termina con un error de
    dominio: sus compensaciones (liberar retenciones, cerrar el intento) deben
    persistir. Cualquier otra excepción deshace el trabajo.
    """
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except DomainError:
            await session.commit()
            raise
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()


def _payment_gateway(settings: Settings) -> PaymentGateway:
    if settings.payment_gateway_base_url:
        return PaymentGatewayHTTP(
            base_url=settings.payment_gateway_base_url,
            timeout_seconds=settings.payment_gateway_timeout_seconds,
            payment_channels=settings.payment_channels,
        )
    logger.warning("PAYMENT_GATEWAY_BASE_URL no configurado; se usa el gateway stub")
    return StubPaymentGateway(payment_channels=settings.payment_channels)


@lru_cache(maxsize=1)
def _in_memory_bundle():
    settings = get_settings()
    return {
        "resource_repo": InMemoryResourceRepo(demo_catalog()),
        "booking_repo": InMemoryBookingRepo(),
        "reservation_repo": InMemoryReservationRepo(),
        "voucher_repo": InMemoryVoucherRepo(),
        "attempt_repo": InMemoryBookingAttemptRepo(),
        "payment_gateway": _payment_gateway(settings),
        "tx_manager": NoopTransactionManager(),
        "clock": SystemClock(),
    }


def _sql_bundle(session: AsyncSession, settings: Settings) -> dict:
    return {
        "resource_repo": ResourceRepoSQL(session),
        "booking_repo": BookingRepoSQL(session),
        "reservation_repo": ReservationRepoSQL(session),
        "voucher_repo": VoucherRepoSQL(session),
        "attempt_repo": BookingAttemptRepoSQL(session),
        "payment_gateway": _payment_gateway(settings),
        "tx_manager": SQLAlchemyTransactionManager(session),
        "clock": SystemClock(),
    }


def build_use_cases(bundle: dict, settings: Settings) -> dict:
    """Arma los casos de uso sobre un conjunto de repositorios."""
    clock: Clock = bundle["clock"]
    catalog = CatalogReader(bundle["resource_repo"])
    availability = AvailabilityEvaluator(
        catalog=catalog,
        booking_repo=bundle["booking_repo"],
        reservation_repo=bundle["reservation_repo"],
    )
    conflict_checker = ConflictChecker(catalog=catalog, availability=availability)
    hold_manager = HoldManager(
        resource_repo=bundle["resource_repo"],
        clock=clock,
        ttl_seconds=settings.hold_ttl_seconds,
    )
    pricing = PricingCalculator(currency_code=settings.currency_code)
    return {
        "get_availability": GetAvailabilityUseCase(
            availability=availability,
            conflict_checker=conflict_checker,
            catalog=catalog,
            clock=clock,
            max_window_days=settings.calendar_window_days,
        ),
        "request_booking": RequestBookingUseCase(
            catalog=catalog,
            availability=availability,
            conflict_checker=conflict_checker,
            hold_manager=hold_manager,
            pricing=pricing,
            payment_gateway=bundle["payment_gateway"],
            attempt_repo=bundle["attempt_repo"],
            transaction_manager=bundle["tx_manager"],
            clock=clock,
            attempt_id_factory=generate_attempt_id,
        ),
        "confirm_booking": ConfirmBookingUseCase(
            attempt_repo=bundle["attempt_repo"],
            booking_repo=bundle["booking_repo"],
            resource_repo=bundle["resource_repo"],
            voucher_repo=bundle["voucher_repo"],
            hold_manager=hold_manager,
            transaction_manager=bundle["tx_manager"],
            clock=clock,
        ),
        "release_attempt": ReleaseBookingAttemptUseCase(
            attempt_repo=bundle["attempt_repo"],
            hold_manager=hold_manager,
            clock=clock,
        ),
        "cancel_booking": CancelBookingUseCase(
            booking_repo=bundle["booking_repo"],
            resource_repo=bundle["resource_repo"],
            transaction_manager=bundle["tx_manager"],
        ),
        "update_booking": UpdateBookingUseCase(
            booking_repo=bundle["booking_repo"],
            voucher_repo=bundle["voucher_repo"],
            resource_repo=bundle["resource_repo"],
            catalog=catalog,
            conflict_checker=conflict_checker,
            hold_manager=hold_manager,
            pricing=pricing,
            transaction_manager=bundle["tx_manager"],
            clock=clock,
        ),
        "member_bookings": GetMemberBookingsUseCase(booking_repo=bundle["booking_repo"]),
        "booking_vouchers": GetBookingVouchersUseCase(
            booking_repo=bundle["booking_repo"],
            voucher_repo=bundle["voucher_repo"],
        ),
        "reconcile": ReconcileResourcesUseCase(
            resource_repo=bundle["resource_repo"],
            booking_repo=bundle["booking_repo"],
            reservation_repo=bundle["reservation_repo"],
            attempt_repo=bundle["attempt_repo"],
            transaction_manager=bundle["tx_manager"],
            clock=clock,
            is_transient_error=is_deadlock_error,
        ),
    }


def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
):
    if settings.use_in_memory:
        return build_use_cases(_in_memory_bundle(), settings)

    if not session:
        raise RuntimeError("DB session not available")
    return build_use_cases(_sql_bundle(session, settings), settings)


@with_deadlock_retry(max_attempts=3)
async def run_reconciliation_sweep() -> SweepReportDTO:
    """Una pasada completa del reconciliador en su propia unidad de trabajo."""
    settings = get_settings()
    if settings.use_in_memory:
        return await build_use_cases(_in_memory_bundle(), settings)["reconcile"].execute()

    async with AsyncSessionLocal() as session:
        report = await build_use_cases(_sql_bundle(session, settings), settings)["reconcile"].execute()
        await session.commit()
        return report
