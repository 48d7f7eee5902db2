import secrets
import string

from club_booking.application.interfaces.payment_gateway import Invoice, InvoiceRequest, PaymentGateway
from club_booking.domain.constants import PAYMENT_CHANNELS
from club_booking.domain.errors import GatewayError

INVOICE_SUFFIX_LENGTH = 9
ALLOWED_CHARS = string.ascii_uppercase + string.digits


class StubPaymentGateway(PaymentGateway):
    """
    Emite facturas locales; la confirmación llega luego por el endpoint de callback.

    Con `record_requests=True` guarda cada solicitud recibida en `requests`
    (solo para tests; en un proceso de larga vida la lista no se poda).
    """

    def __init__(
        self,
        consumer_number: str = "7701234567",
        fail: bool = False,
        payment_channels: list[str] | None = None,
        record_requests: bool = False,
    ) -> None:
        self._consumer_number = consumer_number
        self._fail = fail
        self._payment_channels = list(payment_channels or PAYMENT_CHANNELS)
        self._record_requests = record_requests
        self.requests: list[InvoiceRequest] = []

    async def create_invoice(self, request: InvoiceRequest) -> Invoice:
        if self._record_requests:
            self.requests.append(request)
        if self._fail:
            raise GatewayError("Gateway de pagos no disponible (stub)", error_code="STUB_FAILURE")
        suffix = "".join(secrets.choice(ALLOWED_CHARS) for _ in range(INVOICE_SUFFIX_LENGTH))
        return Invoice(
            invoice_id=f"{request.invoice_prefix}{suffix}",
            due_at=request.due_at,
            payment_channels=list(self._payment_channels),
            consumer_number=self._consumer_number,
        )
