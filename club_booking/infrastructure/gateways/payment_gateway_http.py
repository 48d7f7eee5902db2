import json
import logging
from datetime import datetime
from typing import Any

import httpx

from club_booking.application.interfaces.payment_gateway import Invoice, InvoiceRequest, PaymentGateway
from club_booking.domain.constants import PAYMENT_CHANNELS
from club_booking.domain.errors import GatewayError
from club_booking.infrastructure.circuit_breaker import CircuitBreakerError, payment_gateway_breaker

logger = logging.getLogger(__name__)

SUCCESS_RESPONSE_CODE = "00"


class PaymentGatewayHTTP(PaymentGateway):
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        payment_channels: list[str] | None = None,
    ) -> None:
        """
        HTTP-based invoice gateway with configurable timeout.

        Args:
            base_url: Base URL of the payment gateway API
            timeout_seconds: Request timeout in seconds; keep it well below the hold TTL
            payment_channels: Channels reported when the gateway omits them
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._payment_channels = list(payment_channels or PAYMENT_CHANNELS)

    async def create_invoice(self, request: InvoiceRequest) -> Invoice:
        """
        Request an invoice, protected by the circuit breaker.

        Every failure mode (open circuit, timeout, transport error, non-2xx or a
        non-success response code, malformed body) is raised as GatewayError so the caller can
        release the holds.
        """
        url = f"{self._base_url}/invoices"
        payload: dict[str, Any] = {
            "amount": str(request.amount),
            "consumerInfo": {"membership_no": request.consumer_reference},
            "bookingData": request.booking_draft,
            "dueDate": request.due_at.isoformat(),
            "invoicePrefix": request.invoice_prefix,
        }

        try:
            with payment_gateway_breaker.calling():
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, json=payload)
                    response.raise_for_status()
        except CircuitBreakerError as exc:
            logger.error(
                "Payment gateway circuit breaker is open - service unavailable",
                extra={"consumer_reference": request.consumer_reference, "circuit_state": str(exc)},
            )
            raise GatewayError(
                "Payment service temporarily unavailable (circuit breaker open)",
                error_code="CIRCUIT_OPEN",
            ) from exc
        except httpx.TimeoutException as exc:
            logger.warning(
                "Payment gateway request timeout",
                extra={"consumer_reference": request.consumer_reference, "timeout": self._timeout},
            )
            raise GatewayError(str(exc) or "Payment gateway timeout", error_code="TIMEOUT") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Payment gateway returned an error status",
                extra={"status_code": exc.response.status_code, "consumer_reference": request.consumer_reference},
            )
            raise GatewayError(exc.response.text or str(exc), error_code="NON_2XX") from exc
        except httpx.HTTPError as exc:
            logger.error(
                "Payment gateway HTTP error",
                exc_info=exc,
                extra={"consumer_reference": request.consumer_reference},
            )
            raise GatewayError(str(exc), error_code="HTTP_ERROR") from exc

        try:
            body = response.json()
        except json.JSONDecodeError as exc:
            raise GatewayError("Invalid JSON from payment gateway", error_code="BAD_RESPONSE") from exc

        if not isinstance(body, dict) or body.get("ResponseCode") != SUCCESS_RESPONSE_CODE:
            message = body.get("ResponseMessage") if isinstance(body, dict) else None
            raise GatewayError(message or "Invoice was not created", error_code="REJECTED")

        try:
            data = body.get("Data") or {}
            invoice_id = data.get("InvoiceNumber")
            due_at = request.due_at
            if data.get("DueDate"):
                due_at = datetime.fromisoformat(str(data["DueDate"]).replace("Z", "+00:00"))
            payment_channels = list(data.get("PaymentChannels") or self._payment_channels)
        except (ValueError, TypeError, AttributeError) as exc:
            logger.error(
                "Malformed payment gateway response",
                extra={"consumer_reference": request.consumer_reference, "error": str(exc)},
            )
            raise GatewayError(f"Malformed payment gateway response: {exc}", error_code="BAD_RESPONSE") from exc

        if not invoice_id:
            raise GatewayError("Payment gateway response without InvoiceNumber", error_code="BAD_RESPONSE")

        return Invoice(
            invoice_id=invoice_id,
            due_at=due_at,
            payment_channels=payment_channels,
            consumer_number=data.get("ConsumerNumber"),
        )
