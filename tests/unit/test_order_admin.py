"""Unit tests for admin order overrides."""

import pytest
from libs.common.errors import InvalidStatusTransition, OrderNotFound
from services.store_service.models import Order, OrderStatus, StoreAuditLog
from services.store_service.services import catalog_store, order_admin, order_store
from sqlalchemy import select, update
from tests.factories import OrderFactory, ProductFactory


async def _order(db, stock=5, quantity=2, **overrides):
    product = ProductFactory.create(stock=stock)
    order = OrderFactory.create(items=[(product, quantity)], **overrides)
    db.add_all([product, order])
    await db.commit()
    return order, product


async def _audit_actions(db, order_id) -> list[str]:
    result = await db.execute(
        select(StoreAuditLog.action).where(StoreAuditLog.entity_id == order_id)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
@pytest.mark.unit
async def test_forward_transition_is_applied_and_audited(db_session):
    order, _ = await _order(db_session, status=OrderStatus.PROCESSING)

    updated = await order_admin.update_order_status(
        db_session, order.id, OrderStatus.SHIPPED, performed_by="auth-admin"
    )

    assert updated.status == OrderStatus.SHIPPED
    assert await _audit_actions(db_session, order.id) == ["status_changed"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_skipping_states_is_rejected(db_session):
    order, _ = await _order(db_session)

    with pytest.raises(InvalidStatusTransition):
        await order_admin.update_order_status(
            db_session, order.id, OrderStatus.DELIVERED, performed_by="auth-admin"
        )

    reloaded = await order_store.get_order(db_session, order.id)
    assert reloaded.status == OrderStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.unit
async def test_terminal_order_cannot_move(db_session):
    order, _ = await _order(db_session, status=OrderStatus.DELIVERED)

    with pytest.raises(InvalidStatusTransition):
        await order_admin.update_order_status(
            db_session, order.id, OrderStatus.CANCELLED, performed_by="auth-admin"
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_same_status_is_a_no_op(db_session):
    order, _ = await _order(db_session, status=OrderStatus.SHIPPED)

    updated = await order_admin.update_order_status(
        db_session, order.id, OrderStatus.SHIPPED, performed_by="auth-admin"
    )

    assert updated.status == OrderStatus.SHIPPED
    assert await _audit_actions(db_session, order.id) == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancel_restores_stock(db_session):
    order, product = await _order(db_session, stock=3, quantity=2)

    updated = await order_admin.update_order_status(
        db_session, order.id, OrderStatus.CANCELLED, performed_by="auth-admin"
    )

    assert updated.status == OrderStatus.CANCELLED
    assert updated.cancelled_at is not None
    assert await catalog_store.get_stock(db_session, product.id) == 5


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_pending_order_restores_stock(db_session):
    order, product = await _order(db_session, stock=3, quantity=2)

    await order_admin.delete_order(db_session, order.id, performed_by="auth-admin")

    assert await order_store.find_order(db_session, order.id) is None
    assert await catalog_store.get_stock(db_session, product.id) == 5
    assert await _audit_actions(db_session, order.id) == ["order_deleted"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_shipped_order_keeps_stock(db_session):
    order, product = await _order(
        db_session, stock=3, quantity=2, status=OrderStatus.SHIPPED
    )

    await order_admin.delete_order(db_session, order.id, performed_by="auth-admin")

    assert await catalog_store.get_stock(db_session, product.id) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_missing_order(db_session):
    order, _ = await _order(db_session)
    await order_admin.delete_order(db_session, order.id, performed_by="auth-admin")

    with pytest.raises(OrderNotFound):
        await order_admin.update_order_status(
            db_session, order.id, OrderStatus.CANCELLED, performed_by="auth-admin"
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_skips_restock_when_order_paid_meanwhile(
    db_session, session_factory, monkeypatch
):
    """Payment lands between the admin's read and the delete: no restock."""
    order, product = await _order(db_session, stock=3, quantity=2)
    order_id, product_id = order.id, product.id
    real_get_order = order_store.get_order

    async def get_order_then_pay(db, oid):
        loaded = await real_get_order(db, oid)
        async with session_factory() as rival:
            await rival.execute(
                update(Order)
                .where(Order.id == oid)
                .values(status=OrderStatus.PROCESSING)
            )
            await rival.commit()
        return loaded

    monkeypatch.setattr(order_store, "get_order", get_order_then_pay)

    await order_admin.delete_order(db_session, order_id, performed_by="auth-admin")

    assert await order_store.find_order(db_session, order_id) is None
    assert await catalog_store.get_stock(db_session, product_id) == 3
