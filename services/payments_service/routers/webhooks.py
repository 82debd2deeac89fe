"""Paystack webhook handler."""

import json

from fastapi import APIRouter, Depends, HTTPException, Request, status
from libs.common.config import get_settings
from libs.common.errors import AppError
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.payments_service.paystack_client import (
    PaystackClient,
    get_paystack_client,
    verify_signature,
)
from services.payments_service.services.reconciliation import reconcile_payment
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payment", tags=["payments"])
logger = get_logger(__name__)


@router.post("/webhooks/paystack")
async def paystack_webhook(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
    client: PaystackClient = Depends(get_paystack_client),
):
    """
    Paystack webhook endpoint (no auth; verified by x-paystack-signature).

    The event body is only a hint: the payment is re-verified with Paystack
    before anything changes. Handled failures are acknowledged so Paystack
    stops retrying; a gateway outage returns 503 so it tries again later.
    """
    raw = await request.body()
    signature = request.headers.get("x-paystack-signature")
    if not signature or not verify_signature(
        raw, signature, get_settings().PAYSTACK_SECRET_KEY
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature"
        )

    try:
        payload = json.loads(raw.decode("utf-8") or "{}")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Webhook body must be an object")

    event = payload.get("event")
    data = payload.get("data")
    reference = data.get("reference") if isinstance(data, dict) else None
    if event != "charge.success" or not isinstance(reference, str) or not reference:
        logger.info(
            "Ignoring Paystack webhook event %s",
            event,
            extra={"extra_fields": {"event": event, "reference": reference}},
        )
        return {"received": True}

    try:
        result = await reconcile_payment(db, client, reference)
    except AppError as exc:
        if exc.status_code >= 500:
            raise
        logger.warning(
            "Webhook for %s not applied: %s",
            reference,
            exc.message,
            extra={"extra_fields": {"reference": reference, "code": exc.code}},
        )
        return {"received": True}

    logger.info(
        "Webhook for %s reconciled: %s",
        reference,
        result.outcome.value,
        extra={"extra_fields": {"reference": reference, "event": event}},
    )
    return {"received": True}
