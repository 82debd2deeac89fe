"""Admin order management router."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.schemas import OrderResponse, OrderStatusUpdate
from services.store_service.services import order_admin
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Override an order's status (validated against the order lifecycle)."""
    return await order_admin.update_order_status(
        db,
        order_id,
        payload.status,
        performed_by=current_user.user_id,
        notes=payload.notes,
    )


@router.delete("/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete an order. Pending orders release their stock."""
    await order_admin.delete_order(db, order_id, performed_by=current_user.user_id)
    return None
