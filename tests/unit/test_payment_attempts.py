"""Unit tests for initialize_payment."""

from decimal import Decimal

import pytest
from libs.auth.models import AuthUser
from libs.common.errors import (
    BadRequest,
    GatewayUnavailable,
    OrderNotFound,
    PaymentReferenceConflict,
)
from services.payments_service.models import PaymentAttemptStatus
from services.payments_service.services.payment_attempts import (
    conditional_update_attempt,
    initialize_payment,
)
from services.store_service.models import OrderPaymentStatus, OrderStatus
from services.store_service.services import order_store
from tests.factories import OrderFactory, ProductFactory


async def _pending_order(db, **overrides):
    product = ProductFactory.create(price=Decimal("15000.00"))
    order = OrderFactory.create(items=[(product, 3)], **overrides)
    db.add_all([product, order])
    await db.commit()
    return order


def _owner(order) -> AuthUser:
    return AuthUser(user_id=order.user_auth_id, email=order.customer_email)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_initialize_records_attempt_and_reference(db_session, paystack):
    order = await _pending_order(db_session)

    attempt = await initialize_payment(
        db_session, paystack.client(), order.id, user=_owner(order)
    )

    assert attempt.status == PaymentAttemptStatus.PENDING
    assert attempt.amount == 4500000
    assert attempt.reference.startswith("ord_")
    assert attempt.authorization_url.endswith(attempt.reference)
    assert attempt.payment_metadata["order_id"] == str(order.id)

    reloaded = await order_store.get_order(db_session, order.id)
    assert reloaded.payment_reference == attempt.reference
    # Paystack saw the minor-unit amount and the order id in metadata
    sent = paystack.transactions[attempt.reference]
    assert sent["amount"] == 4500000
    assert sent["metadata"]["order_id"] == str(order.id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reinitialize_reuses_pending_attempt(db_session, paystack):
    order = await _pending_order(db_session)
    client = paystack.client()

    first = await initialize_payment(db_session, client, order.id, user=_owner(order))
    second = await initialize_payment(db_session, client, order.id, user=_owner(order))

    assert second.reference == first.reference
    assert len(paystack.transactions) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_failed_attempt_blocks_new_reference(db_session, paystack):
    order = await _pending_order(db_session)
    attempt = await initialize_payment(
        db_session, paystack.client(), order.id, user=_owner(order)
    )
    await conditional_update_attempt(
        db_session, attempt.reference, PaymentAttemptStatus.FAILED
    )
    await db_session.commit()

    with pytest.raises(PaymentReferenceConflict):
        await initialize_payment(
            db_session, paystack.client(), order.id, user=_owner(order)
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_paid_order_cannot_be_initialized(db_session, paystack):
    order = await _pending_order(
        db_session,
        status=OrderStatus.PROCESSING,
        payment_status=OrderPaymentStatus.PAID,
    )

    with pytest.raises(BadRequest):
        await initialize_payment(
            db_session, paystack.client(), order.id, user=_owner(order)
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancelled_order_cannot_be_initialized(db_session, paystack):
    order = await _pending_order(db_session, status=OrderStatus.CANCELLED)

    with pytest.raises(BadRequest):
        await initialize_payment(
            db_session, paystack.client(), order.id, user=_owner(order)
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_other_members_order_is_hidden(db_session, paystack):
    order = await _pending_order(db_session)
    stranger = AuthUser(user_id="auth-stranger", email="x@example.com")

    with pytest.raises(OrderNotFound):
        await initialize_payment(db_session, paystack.client(), order.id, user=stranger)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_guest_order_can_be_paid_anonymously(db_session, paystack):
    order = await _pending_order(db_session, user_auth_id=None, is_guest_order=True)

    attempt = await initialize_payment(db_session, paystack.client(), order.id)

    assert attempt.customer_email == order.customer_email
    assert attempt.user_auth_id is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_gateway_outage_leaves_order_unreferenced(db_session, paystack):
    order = await _pending_order(db_session)
    paystack.outage = 500

    with pytest.raises(GatewayUnavailable):
        await initialize_payment(
            db_session, paystack.client(), order.id, user=_owner(order)
        )

    reloaded = await order_store.get_order(db_session, order.id)
    assert reloaded.payment_reference is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reference_without_attempt_is_conflict(db_session, paystack):
    order = await _pending_order(db_session, payment_reference="ord_legacy_1")

    with pytest.raises(PaymentReferenceConflict):
        await initialize_payment(
            db_session, paystack.client(), order.id, user=_owner(order)
        )

