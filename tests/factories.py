"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    product = ProductFactory.create(stock=5)
    db_session.add(product)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


# ---------------------------------------------------------------------------
# Store Service
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import Product, ProductCategory

        defaults = {
            "id": _uuid(),
            "name": f"Classic Oxford Shirt {uuid.uuid4().hex[:4]}",
            "description": "Slim-fit cotton shirt",
            "brand": "BeBrand",
            "price": Decimal("15000.00"),
            "stock": 10,
            "category": ProductCategory.MEN,
            "subcategory": "shirts",
            "is_active": True,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Product(**defaults)


class OrderFactory:
    @staticmethod
    def create(items=None, **overrides):
        """Build an order; ``items`` is a list of (product, quantity) pairs."""
        from services.store_service.models import (
            Order,
            OrderItem,
            OrderPaymentStatus,
            OrderStatus,
        )

        order_items = []
        total = Decimal("0")
        for position, (product, quantity) in enumerate(items or []):
            subtotal = product.price * quantity
            total += subtotal
            order_items.append(
                OrderItem(
                    id=_uuid(),
                    product_id=product.id,
                    position=position,
                    product_name=product.name,
                    quantity=quantity,
                    unit_price=product.price,
                    subtotal=subtotal,
                )
            )

        defaults = {
            "id": _uuid(),
            "order_number": Order.generate_order_number(),
            "user_auth_id": f"auth-{uuid.uuid4().hex[:8]}",
            "is_guest_order": False,
            "customer_email": _unique_email(),
            "customer_first_name": "Ada",
            "customer_last_name": "Obi",
            "total_amount": total or Decimal("15000.00"),
            "status": OrderStatus.PENDING,
            "payment_status": OrderPaymentStatus.UNPAID,
            "items": order_items,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Order(**defaults)


# ---------------------------------------------------------------------------
# Payments Service
# ---------------------------------------------------------------------------


class PaymentAttemptFactory:
    @staticmethod
    def create(order=None, **overrides):
        from libs.common.currency import to_minor_units
        from services.payments_service.models import (
            PaymentAttempt,
            PaymentAttemptStatus,
        )

        order_id = order.id if order is not None else _uuid()
        defaults = {
            "id": _uuid(),
            "reference": f"ord_{uuid.uuid4().hex[:8]}_1730000000000_abc123",
            "order_id": order_id,
            "user_auth_id": order.user_auth_id if order is not None else None,
            "customer_email": (
                order.customer_email if order is not None else _unique_email()
            ),
            "amount": (
                to_minor_units(order.total_amount) if order is not None else 1500000
            ),
            "currency": "NGN",
            "status": PaymentAttemptStatus.PENDING,
            "payment_metadata": {"order_id": str(order_id)},
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return PaymentAttempt(**defaults)
