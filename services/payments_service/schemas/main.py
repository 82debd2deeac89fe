import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from services.payments_service.models import PaymentAttemptStatus
from services.payments_service.services.reconciliation import ReconciliationOutcome
from services.store_service.models import OrderStatus


class InitializePaymentRequest(BaseModel):
    order_id: uuid.UUID
    # Defaults to the order's customer email
    email: Optional[EmailStr] = None
    callback_url: Optional[str] = Field(default=None, max_length=512)


class PaymentAttemptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    reference: str
    order_id: uuid.UUID
    customer_email: str
    amount: int  # kobo
    currency: str
    status: PaymentAttemptStatus
    authorization_url: Optional[str] = None
    access_code: Optional[str] = None
    created_at: datetime
    channel: Optional[str] = None
    failure_reason: Optional[str] = None
    paid_at: Optional[datetime] = None


class PaymentAttemptListResponse(BaseModel):
    """Paginated payment attempt list."""

    items: list[PaymentAttemptResponse]
    total: int
    page: int
    page_size: int


class VerifyPaymentRequest(BaseModel):
    reference: str = Field(..., min_length=1, max_length=100)


class ReconciliationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    outcome: ReconciliationOutcome
    reference: str
    gateway_status: str
    order_id: Optional[uuid.UUID] = None
    amount: Optional[Decimal] = None  # major units
    paid_at: Optional[datetime] = None
    order_status: Optional[OrderStatus] = None
