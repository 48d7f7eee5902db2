from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from club_booking.api.dependencies import get_use_cases
from club_booking.api.schemas.availability import SweepReportResponse

router = APIRouter()


@router.post(
    "/workers/reconcile",
    response_model=SweepReportResponse,
    status_code=status.HTTP_200_OK,
)
async def run_reconciliation(
    request: Request,
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> SweepReportResponse:
    """
    Ejecuta una pasada de reconciliación bajo demanda.

    Con el worker en marcha se pasa por él, de modo que nunca corren dos pasadas
    a la vez; una solicitud que coincide con una pasada en curso se omite.
    """
    worker = getattr(request.app.state, "reconciliation_worker", None)
    if worker is not None:
        report = await worker.run_once()
    else:
        report = await use_cases["reconcile"].execute()
    return SweepReportResponse(**report.__dict__)
