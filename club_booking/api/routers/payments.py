from typing import Annotated

from fastapi import APIRouter, Depends, status

from club_booking.api.dependencies import get_use_cases
from club_booking.api.schemas.bookings import PaymentCallbackRequest, PaymentCallbackResponse
from club_booking.infrastructure.db.retry import retry_on_deadlock

router = APIRouter()


@router.post(
    "/payments/callback",
    response_model=PaymentCallbackResponse,
    status_code=status.HTTP_200_OK,
)
async def payment_callback(
    payload: PaymentCallbackRequest,
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> PaymentCallbackResponse:
    """
    Confirmación del pago enviada por el gateway con el mismo borrador de la factura.

    Idempotente: un callback repetido para un intento confirmado retorna las mismas reservas.
    """

    async def execute_confirm():
        return await use_cases["confirm_booking"].execute(payload.to_dto())

    result = await retry_on_deadlock(execute_confirm, max_attempts=3, base_delay=0.1)
    return PaymentCallbackResponse(**result.__dict__)
