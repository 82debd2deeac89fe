"""Admin overrides on orders: status changes and deletion."""

import uuid
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import InvalidStatusTransition
from libs.common.logging import get_logger
from services.store_service.models import (
    AuditEntityType,
    Order,
    OrderStatus,
    can_transition,
)
from services.store_service.services import catalog_store, order_store
from services.store_service.services.audit import log_audit
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def _restore_items_stock(db: AsyncSession, order: Order) -> None:
    for item in sorted(order.items, key=lambda i: str(i.product_id)):
        restored = await catalog_store.restore_stock(db, item.product_id, item.quantity)
        if not restored:
            logger.warning(
                "Product %s no longer exists; %d units from order %s not restocked",
                item.product_id,
                item.quantity,
                order.order_number,
            )


async def update_order_status(
    db: AsyncSession,
    order_id: uuid.UUID,
    target: OrderStatus,
    *,
    performed_by: str,
    notes: Optional[str] = None,
) -> Order:
    """
    Move an order along the state machine on an admin's behalf.

    Setting the status it already has is a no-op. Cancelling puts the
    order's quantities back into stock in the same transaction.
    """
    order = await order_store.get_order(db, order_id)
    current = order.status
    if current == target:
        return order
    if not can_transition(current, target):
        raise InvalidStatusTransition(current.value, target.value)

    values = {}
    if target == OrderStatus.CANCELLED:
        values["cancelled_at"] = utc_now()

    try:
        outcome = await order_store.conditional_update_status(
            db, order_id, current, target, **values
        )
        if not outcome.applied:
            # Someone else moved it between our read and write
            raise InvalidStatusTransition(outcome.current_status.value, target.value)

        if target == OrderStatus.CANCELLED:
            await _restore_items_stock(db, order)

        await log_audit(
            db,
            AuditEntityType.ORDER,
            order_id,
            "status_changed",
            performed_by,
            old_value={"status": current.value},
            new_value={"status": target.value},
            notes=notes,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Order %s status %s -> %s by %s",
        order.order_number,
        current.value,
        target.value,
        performed_by,
    )
    return await order_store.get_order(db, order_id)


async def delete_order(
    db: AsyncSession, order_id: uuid.UUID, *, performed_by: str
) -> None:
    """Hard-delete an order; a still-pending order gives its stock back first."""
    order = await order_store.get_order(db, order_id)
    order_number = order.order_number
    status = order.status
    try:
        if status == OrderStatus.PENDING:
            # Only restock if the order is still pending at write time
            outcome = await order_store.conditional_update_status(
                db,
                order_id,
                OrderStatus.PENDING,
                OrderStatus.CANCELLED,
                cancelled_at=utc_now(),
            )
            if outcome.applied:
                await _restore_items_stock(db, order)
            else:
                status = outcome.current_status
        await log_audit(
            db,
            AuditEntityType.ORDER,
            order_id,
            "order_deleted",
            performed_by,
            old_value={
                "order_number": order_number,
                "status": status.value,
                "total_amount": str(order.total_amount),
            },
        )
        await order_store.delete_order(db, order)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Order %s deleted by %s", order_number, performed_by)
