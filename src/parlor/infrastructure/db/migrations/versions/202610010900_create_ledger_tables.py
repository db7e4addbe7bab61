"""create billiard tables, sessions and daily aggregates

Revision ID: 202610010900
Revises:
Create Date: 2026-10-01 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "202610010900"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "billiard_tables",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("category", sa.String(length=20), nullable=False),
        sa.Column("hourly_rate", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("light_on", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_maintenance_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("table_id", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("accumulated_ms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active_since", sa.DateTime(timezone=True), nullable=True),
        sa.Column("break_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_friendly", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("discount_percent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("payment_method", sa.String(length=10), nullable=False),
        sa.Column("payment_status", sa.String(length=10), nullable=False),
        sa.Column("billed_minutes", sa.Integer(), nullable=True),
        sa.Column("amount", sa.Integer(), nullable=True),
        sa.Column("customer_name", sa.String(length=120), nullable=True),
        sa.Column("customer_phone", sa.String(length=32), nullable=True),
        sa.Column("notes", sa.String(length=1000), nullable=True),
        sa.ForeignKeyConstraint(["table_id"], ["billiard_tables.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_sessions_open_per_table",
        "sessions",
        ["table_id"],
        unique=True,
        postgresql_where=sa.text("end_time IS NULL"),
        sqlite_where=sa.text("end_time IS NULL"),
    )
    op.create_index(
        "ix_sessions_table_start_time",
        "sessions",
        ["table_id", "start_time", "id"],
        unique=False,
    )

    op.create_table(
        "daily_aggregates",
        sa.Column("business_date", sa.Date(), nullable=False),
        sa.Column("total_amount", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("session_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("friendly_count", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("business_date"),
    )

    op.create_table(
        "daily_aggregate_breakdowns",
        sa.Column("business_date", sa.Date(), nullable=False),
        sa.Column("dimension", sa.String(length=20), nullable=False),
        sa.Column("key", sa.String(length=20), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("business_date", "dimension", "key"),
    )


def downgrade() -> None:
    op.drop_table("daily_aggregate_breakdowns")
    op.drop_table("daily_aggregates")
    op.drop_index("ix_sessions_table_start_time", table_name="sessions")
    op.drop_index("uq_sessions_open_per_table", table_name="sessions")
    op.drop_table("sessions")
    op.drop_table("billiard_tables")
