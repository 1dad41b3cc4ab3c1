"""initial schema: users, shops, service_requests, payment_intents, reviews, notifications

Revision ID: a1f3c9e2b7d4
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "a1f3c9e2b7d4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False, server_default=""),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "shops",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.String(500), nullable=False, server_default=""),
    )
    op.create_index("ix_shops_owner_id", "shops", ["owner_id"])

    op.create_table(
        "service_requests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("customer_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("driver_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("pickup_driver_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("mechanic_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("shop_id", sa.String(36), sa.ForeignKey("shops.id"), nullable=True),
        sa.Column("vehicle_id", sa.String(36), nullable=True),
        sa.Column("service_type", sa.String(100), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(32), nullable=False, server_default="pending"),
        sa.Column("urgency", sa.String(16), nullable=False, server_default="normal"),
        sa.Column("pickup_address", sa.String(500), nullable=False, server_default=""),
        sa.Column("location", sa.String(500), nullable=True),
        sa.Column("pickup_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("estimated_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("final_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("payment_status", sa.String(32), nullable=False, server_default="unpaid"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    for col in ("customer_id", "driver_id", "pickup_driver_id", "shop_id", "status"):
        op.create_index(f"ix_service_requests_{col}", "service_requests", [col])

    op.create_table(
        "payment_intents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("payment_intent_id", sa.String(255), nullable=False),
        sa.Column(
            "service_request_id",
            sa.String(36),
            sa.ForeignKey("service_requests.id"),
            nullable=False,
        ),
        sa.Column("customer_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_payment_intents_payment_intent_id",
        "payment_intents",
        ["payment_intent_id"],
        unique=True,
    )
    op.create_index(
        "ix_payment_intents_service_request_id", "payment_intents", ["service_request_id"]
    )
    op.create_index("ix_payment_intents_customer_id", "payment_intents", ["customer_id"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "service_request_id",
            sa.String(36),
            sa.ForeignKey("service_requests.id"),
            nullable=False,
        ),
        sa.Column("customer_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("shop_id", sa.String(36), nullable=True),
        sa.Column("driver_id", sa.String(36), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    for col in ("service_request_id", "customer_id", "shop_id", "driver_id"):
        op.create_index(f"ix_reviews_{col}", "reviews", [col])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("type", sa.String(32), nullable=False, server_default="info"),
        sa.Column("title", sa.String(200), nullable=False, server_default=""),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("link", sa.String(500), nullable=True),
        sa.Column("related_id", sa.String(36), nullable=True),
        sa.Column("channel", sa.String(16), nullable=False, server_default="in_app"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_is_read", "notifications", ["is_read"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("reviews")
    op.drop_table("payment_intents")
    op.drop_table("service_requests")
    op.drop_table("shops")
    op.drop_table("users")
