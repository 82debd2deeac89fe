"""initial store and payments tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

product_category = sa.Enum("men", "women", name="store_product_category_enum")
order_status = sa.Enum(
    "pending",
    "processing",
    "shipped",
    "delivered",
    "cancelled",
    name="store_order_status_enum",
)
order_payment_status = sa.Enum(
    "unpaid", "paid", "failed", name="store_order_payment_status_enum"
)
audit_entity_type = sa.Enum("product", "order", name="store_audit_entity_type_enum")
payment_attempt_status = sa.Enum(
    "pending", "success", "failed", "abandoned", name="payment_attempt_status_enum"
)


def upgrade() -> None:
    op.create_table(
        "store_products",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("brand", sa.String(120), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock", sa.Integer(), server_default="0", nullable=False),
        sa.Column("category", product_category, nullable=False),
        sa.Column("subcategory", sa.String(100), nullable=False),
        sa.Column("image_url", sa.String(512), nullable=True),
        sa.Column("thumbnail_url", sa.String(512), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("stock >= 0", name="store_products_stock_non_negative"),
        sa.CheckConstraint("price >= 0", name="store_products_price_non_negative"),
    )

    op.create_table(
        "store_orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("order_number", sa.String(20), nullable=False),
        sa.Column("user_auth_id", sa.String(255), nullable=True),
        sa.Column("is_guest_order", sa.Boolean(), server_default=sa.false()),
        sa.Column("customer_email", sa.String(255), nullable=False),
        sa.Column("customer_first_name", sa.String(120), nullable=True),
        sa.Column("customer_last_name", sa.String(120), nullable=True),
        sa.Column("customer_phone", sa.String(50), nullable=True),
        sa.Column("shipping_address", json_type, nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", order_status, server_default="pending", nullable=False),
        sa.Column("payment_reference", sa.String(100), nullable=True),
        sa.Column(
            "payment_status",
            order_payment_status,
            server_default="unpaid",
            nullable=False,
        ),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("total_amount >= 0", name="store_orders_total_non_negative"),
    )
    op.create_index(
        "ix_store_orders_order_number", "store_orders", ["order_number"], unique=True
    )
    op.create_index("ix_store_orders_user_auth_id", "store_orders", ["user_auth_id"])
    op.create_index(
        "ix_store_orders_payment_reference",
        "store_orders",
        ["payment_reference"],
        unique=True,
    )
    op.create_index(
        "ix_store_orders_user_auth_id_created_at",
        "store_orders",
        ["user_auth_id", "created_at"],
    )

    op.create_table(
        "store_order_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "order_id",
            sa.Uuid(),
            sa.ForeignKey("store_orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("quantity > 0", name="store_order_items_positive_quantity"),
    )
    op.create_index(
        "ix_store_order_items_product_id", "store_order_items", ["product_id"]
    )

    op.create_table(
        "store_audit_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("entity_type", audit_entity_type, nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("old_value", json_type, nullable=True),
        sa.Column("new_value", json_type, nullable=True),
        sa.Column("performed_by", sa.String(255), nullable=False),
        sa.Column("performed_at", sa.DateTime(timezone=True)),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index(
        "ix_store_audit_logs_entity", "store_audit_logs", ["entity_type", "entity_id"]
    )

    op.create_table(
        "payment_attempts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("reference", sa.String(100), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("user_auth_id", sa.String(255), nullable=True),
        sa.Column("customer_email", sa.String(255), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column("status", payment_attempt_status, nullable=False),
        sa.Column("failure_reason", sa.String(255), nullable=True),
        sa.Column("authorization_url", sa.String(512), nullable=True),
        sa.Column("access_code", sa.String(128), nullable=True),
        sa.Column("channel", sa.String(32), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("metadata", json_type, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("amount > 0", name="payment_attempts_positive_amount"),
    )
    op.create_index(
        "ix_payment_attempts_reference", "payment_attempts", ["reference"], unique=True
    )
    op.create_index("ix_payment_attempts_order_id", "payment_attempts", ["order_id"])
    op.create_index(
        "ix_payment_attempts_user_auth_id", "payment_attempts", ["user_auth_id"]
    )


def downgrade() -> None:
    op.drop_table("payment_attempts")
    op.drop_table("store_audit_logs")
    op.drop_table("store_order_items")
    op.drop_table("store_orders")
    op.drop_table("store_products")

    bind = op.get_bind()
    for enum_type in (
        payment_attempt_status,
        audit_entity_type,
        order_payment_status,
        order_status,
        product_category,
    ):
        enum_type.drop(bind, checkfirst=True)
