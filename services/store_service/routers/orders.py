"""Store orders router: checkout and order history."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from libs.auth.dependencies import get_current_user, get_optional_user
from libs.auth.models import AuthUser
from libs.common.emails.store import OrderNotifier, get_order_notifier
from libs.common.errors import OrderNotFound
from libs.common.rate_limit import checkout_limit
from libs.db.session import get_async_db
from services.store_service.schemas import CreateOrderRequest, OrderResponse
from services.store_service.services import order_store
from services.store_service.services.order_workflow import (
    create_order,
    resolve_customer,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post(
    "/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED
)
@checkout_limit
async def place_order(
    request: Request,
    payload: CreateOrderRequest,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
    notifier: OrderNotifier = Depends(get_order_notifier),
):
    """Place an order. Works for signed-in customers and, with guest_info, for guests."""
    customer = resolve_customer(payload, current_user)
    return await create_order(db, payload, customer, notifier=notifier)


@router.post(
    "/orders/guest",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
@checkout_limit
async def place_guest_order(
    request: Request,
    payload: CreateOrderRequest,
    db: AsyncSession = Depends(get_async_db),
    notifier: OrderNotifier = Depends(get_order_notifier),
):
    """Guest checkout; any bearer token is ignored."""
    customer = resolve_customer(payload, None)
    return await create_order(db, payload, customer, notifier=notifier)


# ============================================================================
# ORDER HISTORY
# ============================================================================


@router.get("/orders", response_model=list[OrderResponse])
async def list_my_orders(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """List the caller's orders, newest first."""
    return await order_store.list_orders_for_user(db, current_user.user_id)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get a specific order. Visible to its owner and to admins."""
    order = await order_store.get_order(db, order_id)
    if not current_user.is_admin and order.user_auth_id != current_user.user_id:
        # Same answer as a missing order so ids cannot be enumerated
        raise OrderNotFound(order_id)
    return order


@router.get("/orders/by-number/{order_number}", response_model=OrderResponse)
async def get_order_by_number(
    order_number: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_store.get_order_by_number(db, order_number)
    if order is None or (
        not current_user.is_admin and order.user_auth_id != current_user.user_id
    ):
        raise HTTPException(status_code=404, detail="Order not found")
    return order
