"""Store catalog models."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_service.models.enums import ProductCategory, enum_values
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Product(Base):
    """Products available in the store (e.g., 'Classic Oxford Shirt')."""

    __tablename__ = "store_products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Basic info
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    brand: Mapped[str] = mapped_column(String(120), nullable=False)

    # Pricing in major units; orders snapshot this at checkout
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Only ever changed through conditional updates (see catalog_store)
    stock: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    category: Mapped[ProductCategory] = mapped_column(
        SAEnum(
            ProductCategory,
            values_callable=enum_values,
            name="store_product_category_enum",
        ),
        nullable=False,
    )
    subcategory: Mapped[str] = mapped_column(String(100), nullable=False)

    image_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    # Soft delete: inactive products cannot be ordered
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("stock >= 0", name="store_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="store_products_price_non_negative"),
    )

    def __repr__(self):
        return f"<Product {self.name} stock={self.stock}>"
