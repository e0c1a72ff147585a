# backend/alembic/versions/002_notifications_audit.py
"""Notifications inbox and admin audit log

Revision ID: 002_notifications_audit
Revises: 001_core_schema
Create Date: 2026-09-01 00:00:01.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "002_notifications_audit"
down_revision: Union[str, None] = "001_core_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create notifications and audit_logs."""
    print("Creating notifications table...")
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("recipient_id", sa.String(26), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_notifications_recipient_created", "notifications", ["recipient_id", "created_at"]
    )

    print("Creating audit_logs table...")
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("admin_id", sa.String(26), nullable=False),
        sa.Column("action", sa.String(40), nullable=False),
        sa.Column("target_type", sa.String(40), nullable=False),
        sa.Column("target_id", sa.String(26), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["admin_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_admin_id", "audit_logs", ["admin_id"])
    op.create_index("idx_audit_logs_target", "audit_logs", ["target_type", "target_id"])

    print("Notifications and audit log created")


def downgrade() -> None:
    """Drop notifications and audit_logs."""
    op.drop_table("audit_logs")
    op.drop_table("notifications")
