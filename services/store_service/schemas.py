"""Pydantic schemas for store service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from services.store_service.models import OrderPaymentStatus, OrderStatus

# ============================================================================
# CHECKOUT SCHEMAS
# ============================================================================


class OrderItemCreate(BaseModel):
    # Clients may echo name/price/subtotal; they are ignored and recomputed.
    product_id: uuid.UUID
    quantity: int = Field(..., ge=1, le=1000)


class ShippingAddress(BaseModel):
    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=120)
    state: str = Field(..., max_length=120)
    zip_code: str = Field(..., max_length=20)
    country: str = Field(..., max_length=120)


class GuestInfo(BaseModel):
    email: EmailStr
    first_name: Optional[str] = Field(None, max_length=120)
    last_name: Optional[str] = Field(None, max_length=120)
    phone: Optional[str] = Field(None, max_length=50)


class CreateOrderRequest(BaseModel):
    items: list[OrderItemCreate] = Field(..., min_length=1)
    shipping_address: Optional[ShippingAddress] = None
    notes: Optional[str] = Field(None, max_length=2000)

    # Contact overrides for authenticated checkout
    customer_email: Optional[EmailStr] = None
    customer_first_name: Optional[str] = Field(None, max_length=120)
    customer_last_name: Optional[str] = Field(None, max_length=120)
    customer_phone: Optional[str] = Field(None, max_length=50)

    # Required when checking out without an account
    guest_info: Optional[GuestInfo] = None


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: uuid.UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_number: str
    user_auth_id: Optional[str] = None
    is_guest_order: bool
    customer_email: str
    customer_first_name: Optional[str] = None
    customer_last_name: Optional[str] = None
    customer_phone: Optional[str] = None
    shipping_address: Optional[ShippingAddress] = None
    notes: Optional[str] = None
    items: list[OrderItemResponse]
    total_amount: Decimal
    status: OrderStatus
    payment_status: OrderPaymentStatus
    payment_reference: Optional[str] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=1000)
