"""Unit tests for the Paystack client against a mocked HTTP transport."""

import hashlib
import hmac
import json
import uuid

import httpx
import pytest
from libs.common.config import get_settings
from libs.common.errors import GatewayUnavailable
from services.payments_service.paystack_client import (
    PaystackClient,
    PaystackError,
    generate_reference,
    verify_signature,
)


def _client(handler) -> PaystackClient:
    return PaystackClient(
        secret_key="sk_test_abc",
        base_url="https://paystack.test",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


# ---------------------------------------------------------------------------
# initialize_transaction
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_initialize_sends_minor_units_and_bearer_auth():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "status": True,
                "data": {
                    "authorization_url": "https://checkout.paystack.com/x1",
                    "access_code": "x1",
                    "reference": "ord_abc",
                },
            },
        )

    txn = await _client(handler).initialize_transaction(
        email="ada@example.com",
        amount_kobo=4500000,
        reference="ord_abc",
        metadata={"order_id": "o-1"},
    )

    assert seen["auth"] == "Bearer sk_test_abc"
    assert seen["url"] == "https://paystack.test/transaction/initialize"
    assert seen["body"]["amount"] == 4500000
    assert seen["body"]["metadata"] == {"order_id": "o-1"}
    assert txn.authorization_url == "https://checkout.paystack.com/x1"
    assert txn.reference == "ord_abc"


# ---------------------------------------------------------------------------
# verify_transaction
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_verify_parses_transaction():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/transaction/verify/ord_abc"
        return httpx.Response(
            200,
            json={
                "status": True,
                "data": {
                    "reference": "ord_abc",
                    "status": "success",
                    "amount": 4500000,
                    "currency": "NGN",
                    "paid_at": "2025-10-27T10:30:00.000Z",
                    "channel": "card",
                    "metadata": {"order_id": "o-1"},
                },
            },
        )

    txn = await _client(handler).verify_transaction("ord_abc")

    assert txn.is_successful
    assert txn.amount == 4500000
    assert txn.paid_at.year == 2025 and txn.paid_at.tzinfo is not None
    assert txn.metadata == {"order_id": "o-1"}
    assert txn.channel == "card"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_verify_tolerates_empty_metadata():
    def handler(request):
        return httpx.Response(
            200,
            json={
                "status": True,
                "data": {"reference": "r", "status": "abandoned", "metadata": ""},
            },
        )

    txn = await _client(handler).verify_transaction("r")

    assert txn.metadata == {}
    assert txn.paid_at is None
    assert not txn.is_successful


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_timeout_is_gateway_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(GatewayUnavailable):
        await _client(handler).verify_transaction("ord_abc")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_connection_error_is_gateway_unavailable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(GatewayUnavailable):
        await _client(handler).verify_transaction("ord_abc")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_server_error_is_gateway_unavailable():
    def handler(request):
        return httpx.Response(502, text="<html>Bad gateway</html>")

    with pytest.raises(GatewayUnavailable) as exc_info:
        await _client(handler).verify_transaction("ord_abc")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
@pytest.mark.unit
async def test_client_error_is_paystack_error():
    def handler(request):
        return httpx.Response(
            400, json={"status": False, "message": "Transaction reference not found"}
        )

    with pytest.raises(PaystackError) as exc_info:
        await _client(handler).verify_transaction("missing")

    assert exc_info.value.status_code == 400
    assert "not found" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.unit
async def test_status_false_is_paystack_error():
    def handler(request):
        return httpx.Response(200, json={"status": False, "message": "Nope"})

    with pytest.raises(PaystackError):
        await _client(handler).verify_transaction("r")


@pytest.mark.unit
def test_client_requires_secret_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "PAYSTACK_SECRET_KEY", "")

    with pytest.raises(ValueError):
        PaystackClient(base_url="https://paystack.test")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_generate_reference_shape_and_uniqueness():
    order_id = uuid.UUID("1a2b3c4d-0000-0000-0000-000000000000")

    first = generate_reference(order_id)
    second = generate_reference(order_id)

    assert first.startswith("ord_1a2b3c4d_")
    assert len(first.split("_")) == 4
    assert first != second


@pytest.mark.unit
def test_verify_signature():
    body = b'{"event":"charge.success"}'
    good = hmac.new(b"sk_test_abc", body, hashlib.sha512).hexdigest()

    assert verify_signature(body, good, "sk_test_abc")
    assert not verify_signature(body, good, "sk_other")
    assert not verify_signature(body + b" ", good, "sk_test_abc")
    assert not verify_signature(body, "", "sk_test_abc")
