"""
Order workflow: checkout.

Creating an order is one transaction:
1. Merge duplicate lines and load the referenced products
2. Validate stock and snapshot name/price into order items
3. Persist the order, then conditionally decrement stock per line
4. Commit (or roll back everything on any failure)
5. Send the confirmation email, best-effort, after commit
"""

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.currency import quantize_major
from libs.common.emails.store import OrderNotifier, OrderSummary, OrderSummaryItem
from libs.common.errors import BadRequest, InsufficientStock, ProductNotFound
from libs.common.logging import get_logger
from services.store_service.models import (
    Order,
    OrderItem,
    OrderPaymentStatus,
    OrderStatus,
)
from services.store_service.schemas import CreateOrderRequest, OrderItemCreate
from services.store_service.services import catalog_store, order_store
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass
class CustomerIdentity:
    """Who the order belongs to and where confirmations go."""

    email: str
    user_auth_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    @property
    def is_guest(self) -> bool:
        return self.user_auth_id is None


def resolve_customer(
    payload: CreateOrderRequest, user: Optional[AuthUser]
) -> CustomerIdentity:
    """Work out the order owner from the token and/or the request body.

    Authenticated checkout uses the token identity, with the body's
    ``customer_*`` fields taking precedence for contact details. Guest
    checkout requires ``guest_info`` with an email.
    """
    if user is not None:
        email = payload.customer_email or user.email
        if not email:
            raise BadRequest("Customer email is required")
        return CustomerIdentity(
            email=str(email),
            user_auth_id=user.user_id,
            first_name=payload.customer_first_name or user.first_name,
            last_name=payload.customer_last_name or user.last_name,
            phone=payload.customer_phone,
        )

    guest = payload.guest_info
    if guest is None:
        raise BadRequest("Guest information is required for guest checkout")
    return CustomerIdentity(
        email=str(guest.email),
        first_name=guest.first_name,
        last_name=guest.last_name,
        phone=guest.phone,
    )


def merge_lines(items: list[OrderItemCreate]) -> list[tuple[uuid.UUID, int]]:
    """Collapse repeated products into one line, keeping first-seen order."""
    merged: dict[uuid.UUID, int] = {}
    for item in items:
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity
    return list(merged.items())


def build_summary(order: Order) -> OrderSummary:
    return OrderSummary(
        order_id=str(order.id),
        order_number=order.order_number,
        total_amount=order.total_amount,
        items=[
            OrderSummaryItem(
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                subtotal=item.subtotal,
            )
            for item in order.items
        ],
        shipping_address=order.shipping_address,
    )


async def create_order(
    db: AsyncSession,
    payload: CreateOrderRequest,
    customer: CustomerIdentity,
    notifier: Optional[OrderNotifier] = None,
) -> Order:
    """
    Place an order and decrement stock atomically.

    Either the order, all of its items and every stock decrement are
    committed together, or nothing is. Prices come from the catalog at
    this moment; anything the client sent about price is ignored.

    Raises:
        ProductNotFound: A referenced product is missing or inactive
        InsufficientStock: A line asks for more than is available, either
            at validation time or because a concurrent checkout took it
    """
    lines = merge_lines(payload.items)

    try:
        # 1. Load products
        products = await catalog_store.get_products(db, [pid for pid, _ in lines])
        for product_id, _ in lines:
            if product_id not in products:
                raise ProductNotFound(product_id)

        # 2. Validate stock and snapshot prices
        order_items: list[OrderItem] = []
        total = Decimal("0")
        for position, (product_id, quantity) in enumerate(lines):
            product = products[product_id]
            if product.stock < quantity:
                raise InsufficientStock(product.name, product.stock, quantity)

            unit_price = quantize_major(product.price)
            subtotal = quantize_major(unit_price * quantity)
            total += subtotal
            order_items.append(
                OrderItem(
                    product_id=product_id,
                    position=position,
                    product_name=product.name,
                    quantity=quantity,
                    unit_price=unit_price,
                    subtotal=subtotal,
                )
            )

        # 3. Persist order + items
        order = Order(
            order_number=Order.generate_order_number(),
            user_auth_id=customer.user_auth_id,
            is_guest_order=customer.is_guest,
            customer_email=customer.email,
            customer_first_name=customer.first_name,
            customer_last_name=customer.last_name,
            customer_phone=customer.phone,
            shipping_address=(
                payload.shipping_address.model_dump()
                if payload.shipping_address
                else None
            ),
            notes=payload.notes,
            total_amount=quantize_major(total),
            status=OrderStatus.PENDING,
            payment_status=OrderPaymentStatus.UNPAID,
            items=order_items,
        )
        await order_store.save_order(db, order)
        order_id = order.id

        # 4. Conditional decrements; sorted ids keep lock order stable
        for product_id, quantity in sorted(lines, key=lambda line: str(line[0])):
            taken = await catalog_store.conditional_decrement_stock(
                db, product_id, quantity
            )
            if not taken:
                product_name = products[product_id].name
                await db.rollback()
                available = await catalog_store.get_stock(db, product_id)
                raise InsufficientStock(product_name, available or 0, quantity)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    order = await order_store.get_order(db, order_id)
    logger.info(
        "Created order %s for %s (total=%s, items=%d)",
        order.order_number,
        customer.email,
        order.total_amount,
        len(order.items),
        extra={
            "extra_fields": {
                "order_id": str(order.id),
                "is_guest_order": order.is_guest_order,
            }
        },
    )

    # 5. Confirmation email (non-fatal)
    if notifier is not None:
        try:
            await notifier.send_order_confirmation(
                customer.email, customer.first_name, build_summary(order)
            )
        except Exception:
            logger.exception(
                "Order confirmation failed for %s; order kept", order.order_number
            )

    return order
