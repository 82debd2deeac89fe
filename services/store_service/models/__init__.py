"""Store Service models package."""

from services.store_service.models.catalog import Product
from services.store_service.models.commerce import Order, OrderItem, StoreAuditLog
from services.store_service.models.enums import (
    ORDER_TRANSITIONS,
    AuditEntityType,
    OrderPaymentStatus,
    OrderStatus,
    ProductCategory,
    can_transition,
    is_terminal,
)

__all__ = [
    "ORDER_TRANSITIONS",
    "AuditEntityType",
    "Order",
    "OrderItem",
    "OrderPaymentStatus",
    "OrderStatus",
    "Product",
    "ProductCategory",
    "StoreAuditLog",
    "can_transition",
    "is_terminal",
]
