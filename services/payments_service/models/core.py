import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONType
from services.payments_service.models.enums import PaymentAttemptStatus, enum_values
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class PaymentAttempt(Base):
    """One Paystack transaction initialized for a store order."""

    __tablename__ = "payment_attempts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reference: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False
    )

    # Cross-service reference to store_orders.id (no FK)
    order_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    user_auth_id: Mapped[Optional[str]] = mapped_column(
        String(255), index=True, nullable=True
    )
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)

    # Minor units (kobo); what we asked the gateway to charge
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), default="NGN", nullable=False)

    status: Mapped[PaymentAttemptStatus] = mapped_column(
        SAEnum(
            PaymentAttemptStatus,
            name="payment_attempt_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PaymentAttemptStatus.PENDING,
        nullable=False,
    )
    failure_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Paystack initialize response
    authorization_url: Mapped[Optional[str]] = mapped_column(
        String(512), nullable=True
    )
    access_code: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    # Paystack verify response
    channel: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    payment_metadata: Mapped[Optional[dict]] = mapped_column(
        "metadata", JSONType, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="payment_attempts_positive_amount"),
    )

    def __repr__(self):
        return f"<PaymentAttempt {self.reference} status={self.status}>"
