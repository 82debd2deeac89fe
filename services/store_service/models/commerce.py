"""Store commerce models: orders, order items, audit logs."""

import random
import string
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONType
from services.store_service.models.enums import (
    AuditEntityType,
    OrderPaymentStatus,
    OrderStatus,
    enum_values,
)
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# ============================================================================
# ORDER MODELS
# ============================================================================


class Order(Base):
    """Orders placed by members or guests."""

    __tablename__ = "store_orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )

    # Customer (user_auth_id is null for guest checkout)
    user_auth_id: Mapped[Optional[str]] = mapped_column(
        String(255), index=True, nullable=True
    )
    is_guest_order: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_first_name: Mapped[Optional[str]] = mapped_column(
        String(120), nullable=True
    )
    customer_last_name: Mapped[Optional[str]] = mapped_column(
        String(120), nullable=True
    )
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # {"street": "...", "city": "...", "state": "...", "zip_code": "...", "country": "..."}
    shipping_address: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Sum of item subtotals at checkout; never recomputed
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(
            OrderStatus,
            values_callable=enum_values,
            name="store_order_status_enum",
        ),
        default=OrderStatus.PENDING,
        server_default="pending",
        nullable=False,
    )

    # Payment reference (links to payments_service); write-once
    payment_reference: Mapped[Optional[str]] = mapped_column(
        String(100), unique=True, index=True, nullable=True
    )
    payment_status: Mapped[OrderPaymentStatus] = mapped_column(
        SAEnum(
            OrderPaymentStatus,
            values_callable=enum_values,
            name="store_order_payment_status_enum",
        ),
        default=OrderPaymentStatus.UNPAID,
        server_default="unpaid",
        nullable=False,
    )

    # Timestamps
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="store_orders_total_non_negative"),
        Index("ix_store_orders_user_auth_id_created_at", "user_auth_id", "created_at"),
    )

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    @staticmethod
    def generate_order_number() -> str:
        """Generate a unique order number like BB-20260104-A1B2C."""
        date_part = utc_now().strftime("%Y%m%d")
        random_part = "".join(
            random.choices(string.ascii_uppercase + string.digits, k=5)
        )
        return f"BB-{date_part}-{random_part}"

    def __repr__(self):
        return f"<Order {self.order_number} status={self.status}>"


class OrderItem(Base):
    """Order line items (snapshot at order time)."""

    __tablename__ = "store_order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("store_orders.id", ondelete="CASCADE"),
        nullable=False,
    )
    # No FK: the snapshot must outlive a deleted product
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Position within the order as requested by the client
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Snapshot at order time (products may change)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="store_order_items_positive_quantity"),
    )

    # Relationships
    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem {self.product_name} qty={self.quantity}>"


# ============================================================================
# AUDIT LOG MODEL
# ============================================================================


class StoreAuditLog(Base):
    """Audit log for admin overrides on orders and products."""

    __tablename__ = "store_audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    entity_type: Mapped[AuditEntityType] = mapped_column(
        SAEnum(
            AuditEntityType,
            values_callable=enum_values,
            name="store_audit_entity_type_enum",
        ),
        nullable=False,
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    action: Mapped[str] = mapped_column(
        String(50), nullable=False
    )  # e.g., "status_changed", "order_deleted"

    old_value: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    new_value: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    performed_by: Mapped[str] = mapped_column(String(255), nullable=False)
    performed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_store_audit_logs_entity", "entity_type", "entity_id"),
    )

    def __repr__(self):
        return f"<StoreAuditLog {self.entity_type}:{self.entity_id} {self.action}>"
