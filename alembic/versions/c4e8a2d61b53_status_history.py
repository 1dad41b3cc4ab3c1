"""status_history: one row per service request status transition

Revision ID: c4e8a2d61b53
Revises: a1f3c9e2b7d4
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "c4e8a2d61b53"
down_revision = "a1f3c9e2b7d4"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "status_history",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "service_request_id",
            sa.String(36),
            sa.ForeignKey("service_requests.id"),
            nullable=False,
        ),
        sa.Column("previous_status", sa.String(32), nullable=False),
        sa.Column("new_status", sa.String(32), nullable=False),
        sa.Column("changed_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("changed_by_role", sa.String(32), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_status_history_service_request_id", "status_history", ["service_request_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_status_history_service_request_id", table_name="status_history")
    op.drop_table("status_history")
