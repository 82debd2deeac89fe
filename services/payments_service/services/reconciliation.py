"""
Payment reconciliation: confirm a Paystack payment and advance its order.

Callback redirects, the verify endpoint and webhooks all land here, often
more than once for the same reference and sometimes at the same time. Each
write is a conditional UPDATE, so only the first caller moves the order
from ``pending`` to ``processing``; the rest see ``already_processed``.
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from libs.common.currency import from_minor_units, to_minor_units
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    GatewayUnavailable,
    OrderNotFound,
    PaymentAmountMismatch,
    PaymentFailed,
)
from libs.common.logging import get_logger
from services.payments_service.models import (
    IN_FLIGHT_GATEWAY_STATUSES,
    GatewayTransactionStatus,
    PaymentAttempt,
    PaymentAttemptStatus,
)
from services.payments_service.paystack_client import (
    PaystackClient,
    PaystackError,
    VerifiedTransaction,
)
from services.payments_service.services.payment_attempts import (
    conditional_update_attempt,
    get_attempt_by_reference,
)
from services.store_service.models import OrderPaymentStatus, OrderStatus
from services.store_service.services import order_store
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class ReconciliationOutcome(str, enum.Enum):
    PROCESSED = "processed"
    ALREADY_PROCESSED = "already_processed"
    NO_ORDER = "no_order"
    PENDING = "pending"


@dataclass
class ReconciliationResult:
    outcome: ReconciliationOutcome
    reference: str
    gateway_status: str
    order_id: Optional[uuid.UUID] = None
    amount: Optional[Decimal] = None
    paid_at: Optional[datetime] = None
    order_status: Optional[OrderStatus] = None

    @property
    def is_paid(self) -> bool:
        return self.outcome in (
            ReconciliationOutcome.PROCESSED,
            ReconciliationOutcome.ALREADY_PROCESSED,
            ReconciliationOutcome.NO_ORDER,
        )


def _resolve_order_id(
    metadata: dict[str, Any], attempt: Optional[PaymentAttempt]
) -> Optional[uuid.UUID]:
    raw = metadata.get("order_id")
    if raw:
        try:
            return uuid.UUID(str(raw))
        except ValueError:
            logger.warning("Ignoring malformed order_id in payment metadata: %r", raw)
    if attempt is not None:
        return attempt.order_id
    return None


async def _verify(client: PaystackClient, reference: str) -> VerifiedTransaction:
    try:
        return await client.verify_transaction(reference)
    except PaystackError as exc:
        if exc.status_code in (401, 403):
            # Our credentials, not the customer's payment
            logger.error("Paystack rejected our credentials on verify: %s", exc.message)
            raise GatewayUnavailable("Payment gateway rejected the request") from exc
        logger.info("Paystack could not verify %s: %s", reference, exc.message)
        raise PaymentFailed(reference, "not_found") from exc


async def _settle_unsuccessful(
    db: AsyncSession,
    txn: VerifiedTransaction,
    attempt: Optional[PaymentAttempt],
) -> ReconciliationResult:
    status = txn.status
    try:
        gateway_status = GatewayTransactionStatus(status)
    except ValueError:
        gateway_status = None

    if gateway_status in IN_FLIGHT_GATEWAY_STATUSES:
        return ReconciliationResult(
            outcome=ReconciliationOutcome.PENDING,
            reference=txn.reference,
            gateway_status=status,
            order_id=attempt.order_id if attempt else None,
            amount=from_minor_units(txn.amount),
        )

    if gateway_status is None:
        # Nothing is settled on a status we cannot interpret
        logger.warning(
            "Payment %s has unrecognised gateway status %r",
            txn.reference,
            status,
            extra={
                "extra_fields": {"reference": txn.reference, "gateway_status": status}
            },
        )
        raise PaymentFailed(txn.reference, status)

    target = (
        PaymentAttemptStatus.ABANDONED
        if gateway_status == GatewayTransactionStatus.ABANDONED
        else PaymentAttemptStatus.FAILED
    )
    order_id = _resolve_order_id(txn.metadata, attempt)
    try:
        if attempt is not None:
            await conditional_update_attempt(
                db,
                txn.reference,
                target,
                failure_reason=(txn.gateway_response or status)[:255],
                verified_at=utc_now(),
            )
        if order_id is not None:
            await order_store.mark_payment_failed(db, order_id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Payment %s not successful (status=%s)",
        txn.reference,
        status,
        extra={"extra_fields": {"reference": txn.reference, "gateway_status": status}},
    )
    raise PaymentFailed(txn.reference, status)


async def reconcile_payment(
    db: AsyncSession, client: PaystackClient, reference: str
) -> ReconciliationResult:
    """
    Verify ``reference`` with Paystack and, if paid, advance the order.

    Safe to call any number of times, concurrently.

    Raises:
        GatewayUnavailable: Paystack could not be reached (retryable)
        PaymentFailed: Paystack says the payment failed or was abandoned,
            reports a status we do not recognise, or does not know the
            reference. The order is marked payment-failed where known
        PaymentAmountMismatch: Paystack charged a different amount than
            the order's payment attempt asked for
    """
    # 1. Ask the gateway
    txn = await _verify(client, reference)
    attempt = await get_attempt_by_reference(db, reference)

    # 2. Not (yet) successful
    if not txn.is_successful:
        return await _settle_unsuccessful(db, txn, attempt)

    amount = from_minor_units(txn.amount)
    paid_at = txn.paid_at or utc_now()

    # 3. Which order?
    order_id = _resolve_order_id(txn.metadata, attempt)
    order = await order_store.find_order(db, order_id) if order_id else None
    if order is None:
        logger.error(
            "Successful payment %s has no matching order (order_id=%s)",
            reference,
            order_id,
            extra={
                "extra_fields": {
                    "reference": reference,
                    "order_id": str(order_id) if order_id else None,
                    "anomaly": "paid_without_order",
                }
            },
        )
        if attempt is not None:
            try:
                await conditional_update_attempt(
                    db,
                    reference,
                    PaymentAttemptStatus.SUCCESS,
                    paid_at=paid_at,
                    channel=txn.channel,
                    verified_at=utc_now(),
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        return ReconciliationResult(
            outcome=ReconciliationOutcome.NO_ORDER,
            reference=reference,
            gateway_status=txn.status,
            order_id=order_id,
            amount=amount,
            paid_at=paid_at,
        )

    # 4. Amount check
    expected = (
        attempt.amount if attempt is not None else to_minor_units(order.total_amount)
    )
    if txn.amount != expected:
        logger.error(
            "Amount mismatch for %s: got %d, expected %d",
            reference,
            txn.amount,
            expected,
            extra={
                "extra_fields": {
                    "reference": reference,
                    "order_id": str(order.id),
                    "anomaly": "amount_mismatch",
                }
            },
        )
        if attempt is not None:
            try:
                await conditional_update_attempt(
                    db,
                    reference,
                    PaymentAttemptStatus.FAILED,
                    failure_reason=f"amount_mismatch: got {txn.amount}",
                    verified_at=utc_now(),
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        raise PaymentAmountMismatch(reference, expected, txn.amount)

    # 5. Settle attempt and order in one transaction
    try:
        if attempt is not None:
            await conditional_update_attempt(
                db,
                reference,
                PaymentAttemptStatus.SUCCESS,
                paid_at=paid_at,
                channel=txn.channel,
                verified_at=utc_now(),
            )
        update = await order_store.conditional_update_status(
            db,
            order.id,
            OrderStatus.PENDING,
            OrderStatus.PROCESSING,
            payment_status=OrderPaymentStatus.PAID,
            paid_at=paid_at,
        )
        await db.commit()
    except OrderNotFound:
        # Deleted between lookup and update
        await db.rollback()
        logger.error("Order %s vanished while reconciling %s", order_id, reference)
        return ReconciliationResult(
            outcome=ReconciliationOutcome.NO_ORDER,
            reference=reference,
            gateway_status=txn.status,
            order_id=order_id,
            amount=amount,
            paid_at=paid_at,
        )
    except Exception:
        await db.rollback()
        raise

    if update.applied:
        logger.info(
            "Payment %s confirmed; order %s -> processing",
            reference,
            order.order_number,
            extra={"extra_fields": {"reference": reference, "order_id": str(order.id)}},
        )
        outcome = ReconciliationOutcome.PROCESSED
    else:
        if update.current_status == OrderStatus.CANCELLED:
            logger.warning(
                "Payment %s succeeded for cancelled order %s; needs refund review",
                reference,
                order.order_number,
                extra={
                    "extra_fields": {
                        "reference": reference,
                        "order_id": str(order.id),
                        "anomaly": "paid_after_cancel",
                    }
                },
            )
        else:
            logger.info(
                "Payment %s already processed (order %s is %s)",
                reference,
                order.order_number,
                update.current_status.value,
            )
        outcome = ReconciliationOutcome.ALREADY_PROCESSED

    return ReconciliationResult(
        outcome=outcome,
        reference=reference,
        gateway_status=txn.status,
        order_id=order.id,
        amount=amount,
        paid_at=paid_at,
        order_status=update.current_status,
    )
