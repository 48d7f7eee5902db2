"""
Tests del gateway HTTP de facturas.

Las respuestas se simulan con httpx.MockTransport; el breaker se resetea en conftest.
"""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import patch

import httpx
import pytest

from club_booking.api import dependencies
from club_booking.api.dependencies import _in_memory_bundle
from club_booking.application.interfaces.payment_gateway import InvoiceRequest
from club_booking.config import Settings
from club_booking.domain.constants import PAYMENT_CHANNELS
from club_booking.domain.errors import GatewayError
from club_booking.infrastructure.circuit_breaker import payment_gateway_breaker
from club_booking.infrastructure.gateways.payment_gateway_http import PaymentGatewayHTTP
from club_booking.infrastructure.in_memory import StubPaymentGateway

BASE_URL = "https://payments.test/api"
DUE_AT = datetime(2026, 3, 10, 5, 3, tzinfo=timezone.utc)
RealAsyncClient = httpx.AsyncClient


def _request() -> InvoiceRequest:
    return InvoiceRequest(
        amount=Decimal("10000.00"),
        consumer_reference="M-1",
        booking_draft={"attempt_id": "ATT-1"},
        due_at=DUE_AT,
        invoice_prefix="INV-HALL-",
    )


def _mock_transport(handler):
    """Parchea httpx.AsyncClient para que use un transporte simulado."""

    def factory(*args, **kwargs):
        return RealAsyncClient(*args, transport=httpx.MockTransport(handler), **kwargs)

    return patch("club_booking.infrastructure.gateways.payment_gateway_http.httpx.AsyncClient", side_effect=factory)


class TestPaymentGatewayHTTP:
    async def test_success_envelope(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["payload"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "ResponseCode": "00",
                    "Data": {
                        "InvoiceNumber": "INV-HALL-ABC123",
                        "ConsumerNumber": "7701234567",
                        "PaymentChannels": ["JazzCash"],
                    },
                },
            )

        with _mock_transport(handler):
            invoice = await PaymentGatewayHTTP(BASE_URL + "/").create_invoice(_request())

        assert invoice.invoice_id == "INV-HALL-ABC123"
        assert invoice.due_at == DUE_AT
        assert invoice.payment_channels == ["JazzCash"]
        assert invoice.consumer_number == "7701234567"
        assert captured["url"] == f"{BASE_URL}/invoices"
        assert captured["payload"]["amount"] == "10000.00"
        assert captured["payload"]["consumerInfo"] == {"membership_no": "M-1"}
        assert captured["payload"]["bookingData"] == {"attempt_id": "ATT-1"}

    async def test_default_channels_and_due_date(self):
        def handler(request):
            return httpx.Response(
                200,
                json={"ResponseCode": "00", "Data": {"InvoiceNumber": "INV-1", "DueDate": "2026-03-10T05:10:00Z"}},
            )

        with _mock_transport(handler):
            invoice = await PaymentGatewayHTTP(BASE_URL).create_invoice(_request())

        assert invoice.payment_channels == list(PAYMENT_CHANNELS)
        assert invoice.due_at == DUE_AT + timedelta(minutes=7)

    async def test_rejected_response_code(self):
        def handler(request):
            return httpx.Response(200, json={"ResponseCode": "01", "ResponseMessage": "Consumer blocked"})

        with _mock_transport(handler):
            with pytest.raises(GatewayError) as exc_info:
                await PaymentGatewayHTTP(BASE_URL).create_invoice(_request())

        assert exc_info.value.gateway_error_code == "REJECTED"
        assert "Consumer blocked" in exc_info.value.message

    async def test_server_error(self):
        with _mock_transport(lambda request: httpx.Response(500, text="boom")):
            with pytest.raises(GatewayError) as exc_info:
                await PaymentGatewayHTTP(BASE_URL).create_invoice(_request())
        assert exc_info.value.gateway_error_code == "NON_2XX"

    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with _mock_transport(handler):
            with pytest.raises(GatewayError) as exc_info:
                await PaymentGatewayHTTP(BASE_URL, timeout_seconds=0.5).create_invoice(_request())
        assert exc_info.value.gateway_error_code == "TIMEOUT"

    async def test_missing_invoice_number(self):
        with _mock_transport(lambda request: httpx.Response(200, json={"ResponseCode": "00", "Data": {}})):
            with pytest.raises(GatewayError) as exc_info:
                await PaymentGatewayHTTP(BASE_URL).create_invoice(_request())
        assert exc_info.value.gateway_error_code == "BAD_RESPONSE"

    @pytest.mark.parametrize(
        "data",
        [
            {"InvoiceNumber": "INV-HALL-ABC123", "DueDate": "soon"},
            {"InvoiceNumber": "INV-HALL-ABC123", "PaymentChannels": 7},
            ["INV-HALL-ABC123"],
        ],
    )
    async def test_malformed_data_is_bad_response(self, data):
        with _mock_transport(lambda request: httpx.Response(200, json={"ResponseCode": "00", "Data": data})):
            with pytest.raises(GatewayError) as exc_info:
                await PaymentGatewayHTTP(BASE_URL).create_invoice(_request())
        assert exc_info.value.gateway_error_code == "BAD_RESPONSE"

    async def test_open_circuit_fails_fast(self):
        payment_gateway_breaker.open()
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        with _mock_transport(handler):
            with pytest.raises(GatewayError) as exc_info:
                await PaymentGatewayHTTP(BASE_URL).create_invoice(_request())

        assert exc_info.value.gateway_error_code == "CIRCUIT_OPEN"
        assert calls == []


class TestStubPaymentGateway:
    async def test_issues_prefixed_invoice(self):
        gateway = StubPaymentGateway(payment_channels=["HBL"], record_requests=True)

        invoice = await gateway.create_invoice(_request())

        assert invoice.invoice_id.startswith("INV-HALL-")
        assert len(invoice.invoice_id) == len("INV-HALL-") + 9
        assert invoice.due_at == DUE_AT
        assert invoice.payment_channels == ["HBL"]
        assert gateway.requests[0].consumer_reference == "M-1"

    async def test_configured_failure(self):
        with pytest.raises(GatewayError):
            await StubPaymentGateway(fail=True).create_invoice(_request())

    async def test_requests_are_not_kept_by_default(self):
        gateway = StubPaymentGateway()

        await gateway.create_invoice(_request())

        assert gateway.requests == []


class TestGatewaySelection:
    @pytest.fixture
    def fresh_bundle(self):
        _in_memory_bundle.cache_clear()
        yield
        _in_memory_bundle.cache_clear()

    def test_in_memory_mode_honours_gateway_url(self, monkeypatch, fresh_bundle):
        settings = Settings(_env_file=None, use_in_memory=True, payment_gateway_base_url=BASE_URL)
        monkeypatch.setattr(dependencies, "get_settings", lambda: settings)

        assert isinstance(_in_memory_bundle()["payment_gateway"], PaymentGatewayHTTP)

    def test_stub_without_gateway_url(self, monkeypatch, fresh_bundle):
        settings = Settings(_env_file=None, use_in_memory=True, payment_gateway_base_url=None)
        monkeypatch.setattr(dependencies, "get_settings", lambda: settings)

        assert isinstance(_in_memory_bundle()["payment_gateway"], StubPaymentGateway)
