"""Create the entries table.

Revision ID: 20260101_initial_entries
Revises:
Create Date: 2026-01-01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20260101_initial_entries"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "entries",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("entry_id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("entry_type", sa.String(length=16), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("entry_id", name="uq_entries_entry_id"),
        sa.CheckConstraint("amount <> 0", name="ck_entries_amount_nonzero"),
        sa.CheckConstraint(
            "entry_type IN ('income', 'expense')", name="ck_entries_entry_type"
        ),
    )
    op.create_index("ix_entries_owner_date", "entries", ["owner_id", "date"])
    op.create_index("ix_entries_owner_type", "entries", ["owner_id", "entry_type"])
    op.create_index(
        "ix_entries_owner_category", "entries", ["owner_id", "category"]
    )


def downgrade() -> None:
    op.drop_index("ix_entries_owner_category", table_name="entries")
    op.drop_index("ix_entries_owner_type", table_name="entries")
    op.drop_index("ix_entries_owner_date", table_name="entries")
    op.drop_table("entries")
