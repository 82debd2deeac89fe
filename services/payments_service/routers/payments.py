"""Order payment endpoints: initialize, Paystack callback, verify, history."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from libs.auth.dependencies import get_current_user, get_optional_user, require_admin
from libs.auth.models import AuthUser
from libs.common.errors import BadRequest, PaymentNotFound
from libs.common.rate_limit import payment_limit
from libs.db.session import get_async_db
from services.payments_service.models import PaymentAttemptStatus
from services.payments_service.paystack_client import (
    PaystackClient,
    get_paystack_client,
)
from services.payments_service.schemas import (
    InitializePaymentRequest,
    PaymentAttemptListResponse,
    PaymentAttemptResponse,
    ReconciliationResponse,
    VerifyPaymentRequest,
)
from services.payments_service.services import payment_attempts
from services.payments_service.services.payment_attempts import initialize_payment
from services.payments_service.services.reconciliation import reconcile_payment
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payment", tags=["payments"])


@router.post(
    "/initialize",
    response_model=PaymentAttemptResponse,
    status_code=status.HTTP_201_CREATED,
)
@payment_limit
async def initialize_order_payment(
    request: Request,
    payload: InitializePaymentRequest,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
    client: PaystackClient = Depends(get_paystack_client),
):
    """
    Start paying for an order. Redirect the customer to ``authorization_url``.

    Calling this again for the same order returns the same pending attempt.
    """
    return await initialize_payment(
        db,
        client,
        payload.order_id,
        user=current_user,
        email=payload.email,
        callback_url=payload.callback_url,
    )


@router.get("/callback", response_model=ReconciliationResponse)
async def paystack_callback(
    reference: Optional[str] = Query(default=None, max_length=100),
    trxref: Optional[str] = Query(default=None, max_length=100),
    db: AsyncSession = Depends(get_async_db),
    client: PaystackClient = Depends(get_paystack_client),
):
    """Paystack redirects the customer here after checkout."""
    ref = reference or trxref
    if not ref:
        raise BadRequest("Payment reference is required")
    return await reconcile_payment(db, client, ref)


@router.post("/verify", response_model=ReconciliationResponse)
@payment_limit
async def verify_payment(
    request: Request,
    payload: VerifyPaymentRequest,
    db: AsyncSession = Depends(get_async_db),
    client: PaystackClient = Depends(get_paystack_client),
):
    """Confirm a payment by reference (e.g. after the customer returns to the shop)."""
    return await reconcile_payment(db, client, payload.reference)


# ============================================================================
# PAYMENT HISTORY
# ============================================================================


@router.get("/my-payments", response_model=list[PaymentAttemptResponse])
async def list_my_payments(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """The caller's payment attempts, newest first."""
    return await payment_attempts.list_attempts_for_user(db, current_user.user_id)


@router.get("/admin/all", response_model=PaymentAttemptListResponse)
async def list_all_payments(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status_filter: Optional[PaymentAttemptStatus] = Query(None, alias="status"),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """All payment attempts, paginated (admin only)."""
    items, total = await payment_attempts.list_attempts(
        db, page=page, page_size=page_size, status=status_filter
    )
    return PaymentAttemptListResponse(
        items=[PaymentAttemptResponse.model_validate(a) for a in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{attempt_id}", response_model=PaymentAttemptResponse)
async def get_payment(
    attempt_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get one payment attempt. Visible to its payer and to admins."""
    attempt = await payment_attempts.get_attempt(db, attempt_id)
    if not current_user.is_admin and attempt.user_auth_id != current_user.user_id:
        raise PaymentNotFound(attempt_id)
    return attempt
