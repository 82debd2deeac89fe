"""
Payment attempts: initialize a Paystack transaction for an order, and
read back payment history.

An order's payment reference is write-once. Re-initializing while the
existing attempt is still pending hands back that attempt (same checkout
URL) instead of opening a second transaction.
"""

import uuid
from typing import Any, Optional

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.currency import to_minor_units
from libs.common.errors import (
    BadRequest,
    OrderNotFound,
    PaymentNotFound,
    PaymentReferenceConflict,
)
from libs.common.logging import get_logger
from services.payments_service.models import PaymentAttempt, PaymentAttemptStatus
from services.payments_service.paystack_client import (
    PaystackClient,
    generate_reference,
)
from services.store_service.models import Order, OrderPaymentStatus, OrderStatus
from services.store_service.services import order_store
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Attempt store
# ---------------------------------------------------------------------------


async def get_attempt_by_reference(
    db: AsyncSession, reference: str
) -> Optional[PaymentAttempt]:
    result = await db.execute(
        select(PaymentAttempt)
        .where(PaymentAttempt.reference == reference)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_attempt(db: AsyncSession, attempt_id: uuid.UUID) -> PaymentAttempt:
    attempt = await db.get(PaymentAttempt, attempt_id)
    if attempt is None:
        raise PaymentNotFound(attempt_id)
    return attempt


async def list_attempts_for_user(
    db: AsyncSession, user_auth_id: str
) -> list[PaymentAttempt]:
    """A customer's payment attempts, newest first."""
    result = await db.execute(
        select(PaymentAttempt)
        .where(PaymentAttempt.user_auth_id == user_auth_id)
        .order_by(PaymentAttempt.created_at.desc())
    )
    return list(result.scalars().all())


async def list_attempts(
    db: AsyncSession,
    *,
    page: int = 1,
    page_size: int = 20,
    status: Optional[PaymentAttemptStatus] = None,
) -> tuple[list[PaymentAttempt], int]:
    """One page of all payment attempts (newest first) and the total count."""
    query = select(PaymentAttempt)
    if status is not None:
        query = query.where(PaymentAttempt.status == status)

    total_result = await db.execute(
        select(func.count()).select_from(query.subquery())
    )
    total = total_result.scalar_one()

    result = await db.execute(
        query.order_by(PaymentAttempt.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def conditional_update_attempt(
    db: AsyncSession,
    reference: str,
    to_status: PaymentAttemptStatus,
    **values: Any,
) -> bool:
    """Settle a pending attempt. False when it was already settled (or is unknown)."""
    result = await db.execute(
        update(PaymentAttempt)
        .where(
            PaymentAttempt.reference == reference,
            PaymentAttempt.status == PaymentAttemptStatus.PENDING,
        )
        .values(status=to_status, **values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------


async def _existing_attempt_for(db: AsyncSession, order: Order) -> PaymentAttempt:
    attempt = await get_attempt_by_reference(db, order.payment_reference)
    if attempt is None:
        raise PaymentReferenceConflict(
            "Order already has a payment reference with no attempt on record",
            order_id=str(order.id),
            reference=order.payment_reference,
        )
    if attempt.status == PaymentAttemptStatus.PENDING:
        return attempt
    if attempt.status == PaymentAttemptStatus.SUCCESS:
        raise BadRequest("Order has already been paid", order_id=str(order.id))
    raise PaymentReferenceConflict(
        f"Payment {attempt.reference} for this order is {attempt.status.value}; "
        "place a new order to pay again",
        order_id=str(order.id),
        reference=attempt.reference,
    )


async def initialize_payment(
    db: AsyncSession,
    client: PaystackClient,
    order_id: uuid.UUID,
    *,
    user: Optional[AuthUser] = None,
    email: Optional[str] = None,
    callback_url: Optional[str] = None,
) -> PaymentAttempt:
    """
    Open (or reuse) a Paystack transaction for an order.

    1. Load the order; members may only pay for their own orders
    2. Reject orders that are not awaiting payment
    3. Reuse a pending attempt if the order already has a reference
    4. Initialize with Paystack, then claim the reference (write-once)
    5. Record the attempt and commit
    """
    settings = get_settings()

    # 1. Ownership
    order = await order_store.get_order(db, order_id)
    if order.user_auth_id and not (
        user is not None and (user.is_admin or user.user_id == order.user_auth_id)
    ):
        raise OrderNotFound(order_id)

    # 2. Payable?
    if order.payment_status == OrderPaymentStatus.PAID:
        raise BadRequest("Order has already been paid", order_id=str(order.id))
    if order.status != OrderStatus.PENDING:
        raise BadRequest(
            f"Order is {order.status.value} and cannot be paid",
            order_id=str(order.id),
        )

    # 3. Reuse
    if order.payment_reference:
        return await _existing_attempt_for(db, order)

    # 4. Gateway, then claim
    amount_kobo = to_minor_units(order.total_amount)
    reference = generate_reference(order.id)
    payer_email = email or order.customer_email
    metadata = {
        "order_id": str(order.id),
        "order_number": order.order_number,
    }

    txn = await client.initialize_transaction(
        email=payer_email,
        amount_kobo=amount_kobo,
        reference=reference,
        currency=settings.CURRENCY,
        callback_url=callback_url or settings.PAYSTACK_CALLBACK_URL,
        metadata=metadata,
    )

    try:
        claimed = await order_store.set_payment_reference(db, order.id, reference)
        if not claimed:
            # A concurrent initialize won; hand back whatever it recorded
            await db.rollback()
            order = await order_store.get_order(db, order_id)
            return await _existing_attempt_for(db, order)

        # 5. Record
        attempt = PaymentAttempt(
            reference=reference,
            order_id=order.id,
            user_auth_id=order.user_auth_id,
            customer_email=payer_email,
            amount=amount_kobo,
            currency=settings.CURRENCY,
            status=PaymentAttemptStatus.PENDING,
            authorization_url=txn.authorization_url,
            access_code=txn.access_code,
            payment_metadata=metadata,
        )
        db.add(attempt)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Initialized payment %s for order %s (%d kobo)",
        reference,
        order.order_number,
        amount_kobo,
        extra={"extra_fields": {"order_id": str(order.id), "reference": reference}},
    )
    return attempt
