"""Order store: persistence and conditional status transitions for orders.

None of these functions commit; the calling workflow owns the transaction.
"""

import enum
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from libs.common.errors import OrderNotFound
from services.store_service.models import Order, OrderPaymentStatus, OrderStatus
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload


class StatusUpdateResult(str, enum.Enum):
    APPLIED = "applied"
    ALREADY_IN_STATE = "already_in_state"


@dataclass
class StatusUpdate:
    result: StatusUpdateResult
    current_status: OrderStatus

    @property
    def applied(self) -> bool:
        return self.result == StatusUpdateResult.APPLIED


async def save_order(db: AsyncSession, order: Order) -> Order:
    """Stage a new order (and its items) and flush to obtain ids."""
    db.add(order)
    await db.flush()
    return order


async def get_order(db: AsyncSession, order_id: uuid.UUID) -> Order:
    """Load an order with its items, refreshed from the database."""
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.items))
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise OrderNotFound(order_id)
    return order


async def find_order(db: AsyncSession, order_id: uuid.UUID) -> Optional[Order]:
    try:
        return await get_order(db, order_id)
    except OrderNotFound:
        return None


async def get_order_by_number(db: AsyncSession, order_number: str) -> Optional[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.order_number == order_number)
        .options(selectinload(Order.items))
    )
    return result.scalar_one_or_none()


async def list_orders_for_user(db: AsyncSession, user_auth_id: str) -> list[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.user_auth_id == user_auth_id)
        .options(selectinload(Order.items))
        .order_by(Order.created_at.desc())
    )
    return list(result.scalars().all())


async def get_status(db: AsyncSession, order_id: uuid.UUID) -> Optional[OrderStatus]:
    result = await db.execute(select(Order.status).where(Order.id == order_id))
    return result.scalar_one_or_none()


async def conditional_update_status(
    db: AsyncSession,
    order_id: uuid.UUID,
    from_status: OrderStatus,
    to_status: OrderStatus,
    **values: Any,
) -> StatusUpdate:
    """Move an order ``from_status -> to_status`` only if it is still in ``from_status``.

    Extra column values (e.g. ``paid_at``) are written in the same statement.
    When another writer got there first the result is ALREADY_IN_STATE with
    whatever status the order has now; a missing order raises OrderNotFound.
    """
    result = await db.execute(
        update(Order)
        .where(Order.id == order_id, Order.status == from_status)
        .values(status=to_status, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        return StatusUpdate(StatusUpdateResult.APPLIED, to_status)

    current = await get_status(db, order_id)
    if current is None:
        raise OrderNotFound(order_id)
    return StatusUpdate(StatusUpdateResult.ALREADY_IN_STATE, current)


async def set_payment_reference(
    db: AsyncSession, order_id: uuid.UUID, reference: str
) -> bool:
    """Attach a payment reference unless one is already set (write-once)."""
    result = await db.execute(
        update(Order)
        .where(Order.id == order_id, Order.payment_reference.is_(None))
        .values(payment_reference=reference)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def delete_order(db: AsyncSession, order: Order) -> None:
    await db.delete(order)
    await db.flush()


async def mark_payment_failed(db: AsyncSession, order_id: uuid.UUID) -> bool:
    """Flag an unpaid pending order's payment as failed; the order stays pending."""
    result = await db.execute(
        update(Order)
        .where(
            Order.id == order_id,
            Order.status == OrderStatus.PENDING,
            Order.payment_status == OrderPaymentStatus.UNPAID,
        )
        .values(payment_status=OrderPaymentStatus.FAILED)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
