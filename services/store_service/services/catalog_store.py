"""Catalog store: product lookups and conditional stock mutations.

Stock is never changed with read-modify-write in application memory; every
mutation is a single UPDATE whose WHERE clause carries the guard, and the
caller inspects the affected row count.
"""

import uuid
from typing import Iterable, Optional

from libs.common.errors import ProductNotFound
from services.store_service.models import Product
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession


async def get_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    """Return an orderable product or raise ProductNotFound."""
    result = await db.execute(
        select(Product).where(Product.id == product_id, Product.is_active.is_(True))
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise ProductNotFound(product_id)
    return product


async def get_products(
    db: AsyncSession, product_ids: Iterable[uuid.UUID]
) -> dict[uuid.UUID, Product]:
    """Fetch active products by id in one query; missing ids are simply absent."""
    ids = list(product_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Product)
        .where(Product.id.in_(ids), Product.is_active.is_(True))
        .execution_options(populate_existing=True)
    )
    return {product.id: product for product in result.scalars().all()}


async def get_stock(db: AsyncSession, product_id: uuid.UUID) -> Optional[int]:
    """Current stock straight from the database (None if the product is gone)."""
    result = await db.execute(select(Product.stock).where(Product.id == product_id))
    return result.scalar_one_or_none()


async def conditional_decrement_stock(
    db: AsyncSession, product_id: uuid.UUID, quantity: int
) -> bool:
    """Take ``quantity`` units if at least that many remain.

    Returns False (nothing changed) when the guard fails. Does not commit.
    """
    result = await db.execute(
        update(Product)
        .where(
            Product.id == product_id,
            Product.is_active.is_(True),
            Product.stock >= quantity,
        )
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def restore_stock(db: AsyncSession, product_id: uuid.UUID, quantity: int) -> bool:
    """Put ``quantity`` units back (cancellation). Does not commit.

    Returns False when the product no longer exists.
    """
    result = await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
