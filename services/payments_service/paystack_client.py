"""
Paystack API client for card/bank checkout transactions.

Provides async methods for:
- Initializing a transaction (hosted checkout page)
- Verifying a transaction by reference
- Generating order payment references
- Checking webhook signatures
"""

import hashlib
import hmac
import secrets
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import httpx
from libs.common.config import get_settings
from libs.common.datetime_utils import parse_gateway_timestamp
from libs.common.errors import GatewayUnavailable
from libs.common.logging import get_logger

logger = get_logger(__name__)


@dataclass
class InitializedTransaction:
    """Result of initializing a transaction."""

    authorization_url: str
    access_code: str
    reference: str


@dataclass
class VerifiedTransaction:
    """Transaction state as reported by Paystack."""

    reference: str
    status: str  # success, failed, abandoned, pending, ongoing, ...
    amount: int  # in kobo
    currency: str
    paid_at: Optional[datetime] = None
    channel: Optional[str] = None
    gateway_response: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_successful(self) -> bool:
        return self.status == "success"


class PaystackError(Exception):
    """Paystack answered, and the answer was a definitive no (4xx / status=false)."""

    def __init__(
        self, message: str, status_code: int = None, response_data: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)


def generate_reference(order_id: uuid.UUID) -> str:
    """Build a unique payment reference like ``ord_1a2b3c4d_1730000000000_9f8e7d``."""
    prefix = str(order_id).replace("-", "")[:8]
    return f"ord_{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


def verify_signature(raw_body: bytes, signature: str, secret_key: str) -> bool:
    """Check ``x-paystack-signature``: HMAC-SHA512 of the raw body."""
    if not secret_key or not signature:
        return False
    expected = hmac.new(secret_key.encode("utf-8"), raw_body, hashlib.sha512)
    return hmac.compare_digest(expected.hexdigest(), signature)


def _parse_metadata(value: Any) -> dict[str, Any]:
    # Paystack echoes metadata back as an object, or "" when none was sent
    return value if isinstance(value, dict) else {}


class PaystackClient:
    """Async client for Paystack Transaction APIs."""

    def __init__(
        self,
        secret_key: str = None,
        base_url: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.PAYSTACK_SECRET_KEY
        if not self.secret_key:
            raise ValueError("PAYSTACK_SECRET_KEY is required")
        self.base_url = (base_url or settings.PAYSTACK_API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.PAYSTACK_TIMEOUT_SECONDS
        self._transport = transport
        self._headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict = None,
        json_data: dict = None,
    ) -> dict:
        """Make an async request to Paystack API.

        Raises:
            GatewayUnavailable: Timeout, connection failure, or 5xx
            PaystackError: 4xx or a ``status: false`` body
        """
        url = f"{self.base_url}{endpoint}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._headers,
                    params=params,
                    json=json_data,
                )
        except httpx.TimeoutException as exc:
            logger.warning("Paystack %s %s timed out: %s", method, endpoint, exc)
            raise GatewayUnavailable("Payment gateway timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Paystack %s %s failed: %s", method, endpoint, exc)
            raise GatewayUnavailable("Payment gateway is unreachable") from exc

        if response.status_code >= 500:
            logger.error(
                "Paystack API unavailable: %s - %s",
                response.status_code,
                response.text[:500],
            )
            raise GatewayUnavailable(
                "Payment gateway is temporarily unavailable",
                gateway_status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            logger.error(f"Paystack API error: {response.status_code} - {data}")
            raise PaystackError(
                message=data.get("message", "Unknown Paystack error"),
                status_code=response.status_code,
                response_data=data,
            )

        if not data.get("status"):
            raise PaystackError(
                message=data.get("message", "Paystack request failed"),
                status_code=response.status_code,
                response_data=data,
            )

        return data

    # =========================================================================
    # Transaction Methods
    # =========================================================================

    async def initialize_transaction(
        self,
        email: str,
        amount_kobo: int,
        reference: str,
        currency: str = "NGN",
        callback_url: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> InitializedTransaction:
        """
        Create a transaction and get the hosted checkout URL.

        Args:
            email: Customer email (Paystack requires one)
            amount_kobo: Amount in kobo (Naira * 100)
            reference: Our unique reference (see generate_reference)
            callback_url: Where Paystack redirects after checkout
            metadata: Echoed back on verify and in webhooks (carry order_id here)
        """
        payload: dict[str, Any] = {
            "email": email,
            "amount": amount_kobo,
            "reference": reference,
            "currency": currency,
        }
        if callback_url:
            payload["callback_url"] = callback_url
        if metadata:
            payload["metadata"] = metadata

        data = await self._request("POST", "/transaction/initialize", json_data=payload)

        txn = data.get("data") or {}
        return InitializedTransaction(
            authorization_url=txn.get("authorization_url", ""),
            access_code=txn.get("access_code", ""),
            reference=txn.get("reference", reference),
        )

    async def verify_transaction(self, reference: str) -> VerifiedTransaction:
        """
        Fetch the authoritative status of a transaction.

        Returns:
            VerifiedTransaction; ``amount`` is in kobo
        """
        data = await self._request("GET", f"/transaction/verify/{reference}")

        txn = data.get("data") or {}
        return VerifiedTransaction(
            reference=txn.get("reference", reference),
            status=str(txn.get("status") or "").lower(),
            amount=int(txn.get("amount") or 0),
            currency=txn.get("currency", "NGN"),
            paid_at=parse_gateway_timestamp(txn.get("paid_at") or txn.get("paidAt")),
            channel=txn.get("channel"),
            gateway_response=txn.get("gateway_response"),
            metadata=_parse_metadata(txn.get("metadata")),
        )


def get_paystack_client() -> PaystackClient:
    """Get a PaystackClient instance (FastAPI dependency)."""
    if not get_settings().paystack_enabled:
        raise GatewayUnavailable("Payment gateway is not configured")
    return PaystackClient()
