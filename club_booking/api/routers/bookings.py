from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from club_booking.api.dependencies import get_use_cases
from club_booking.api.schemas.bookings import (
    AttemptReleaseRequest,
    AttemptReleaseResponse,
    BookingInvoiceRequest,
    BookingInvoiceResponse,
    BookingResponse,
    BookingUpdateRequest,
    BookingUpdateResponse,
    VoucherResponse,
)
from club_booking.domain.entities.resource import ResourceType
from club_booking.infrastructure.db.retry import retry_on_deadlock

router = APIRouter()


@router.post(
    "/bookings/invoice",
    response_model=BookingInvoiceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_booking_invoice(
    payload: BookingInvoiceRequest,
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> BookingInvoiceResponse:
    """
    Verifica conflictos, retiene los recursos y emite la factura.

    No se reintenta: un intento fallido es terminal y el socio vuelve a solicitar.
    """
    result = await use_cases["request_booking"].execute(payload.to_dto())
    return BookingInvoiceResponse(**result.__dict__)


@router.post(
    "/bookings/attempts/{attempt_id}/release",
    response_model=AttemptReleaseResponse,
    status_code=status.HTTP_200_OK,
)
async def release_booking_attempt(
    attempt_id: str,
    payload: AttemptReleaseRequest,
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> AttemptReleaseResponse:
    async def execute_release():
        return await use_cases["release_attempt"].execute(
            attempt_id=attempt_id, member_id=payload.member_id, reason=payload.reason
        )

    result = await retry_on_deadlock(execute_release, max_attempts=3, base_delay=0.1)
    return AttemptReleaseResponse(**result.__dict__)


@router.delete(
    "/bookings/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def cancel_booking(
    booking_id: int,
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> Response:
    """Elimina la reserva y apaga `is_booked` del recurso en una misma unidad."""

    async def execute_cancel():
        await use_cases["cancel_booking"].execute(booking_id)

    await retry_on_deadlock(execute_cancel, max_attempts=3, base_delay=0.1)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/bookings/{booking_id}",
    response_model=BookingUpdateResponse,
    status_code=status.HTTP_200_OK,
)
async def update_booking(
    booking_id: int,
    payload: BookingUpdateRequest,
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> BookingUpdateResponse:
    """Cambia fechas, tarifa, huéspedes o pago; recalcula el total y ajusta los comprobantes."""

    async def execute_update():
        return await use_cases["update_booking"].execute(payload.to_dto(booking_id))

    result = await retry_on_deadlock(execute_update, max_attempts=3, base_delay=0.1)
    return BookingUpdateResponse(
        booking=BookingResponse.model_validate(result.booking),
        voucher_ids=result.voucher_ids,
        cancelled_vouchers=result.cancelled_vouchers,
    )


@router.get("/members/{member_id}/bookings", response_model=list[BookingResponse])
async def list_member_bookings(
    member_id: str,
    use_cases: Annotated[dict, Depends(get_use_cases)],
    resource_type: ResourceType | None = Query(default=None),
) -> list[BookingResponse]:
    bookings = await use_cases["member_bookings"].execute(member_id, resource_type)
    return [BookingResponse.model_validate(booking) for booking in bookings]


@router.get("/bookings/{booking_id}/vouchers", response_model=list[VoucherResponse])
async def list_booking_vouchers(
    booking_id: int,
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> list[VoucherResponse]:
    vouchers = await use_cases["booking_vouchers"].execute(booking_id)
    return [VoucherResponse.model_validate(voucher) for voucher in vouchers]
