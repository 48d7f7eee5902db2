from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass
class InvoiceRequest:
    amount: Decimal
    consumer_reference: str
    booking_draft: dict[str, Any]
    due_at: datetime
    invoice_prefix: str = "INV-"


@dataclass
class Invoice:
    invoice_id: str
    due_at: datetime
    payment_channels: list[str] = field(default_factory=list)
    consumer_number: str | None = None


class PaymentGateway:
    async def create_invoice(self, request: InvoiceRequest) -> Invoice:
        """
        Genera una factura en el servicio externo de pagos.

        Raises:
            GatewayError: Si el servicio falla, no responde o el circuito está abierto.
        """
        raise NotImplementedError
