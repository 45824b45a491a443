"""Order-line record store

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from shipsync.adapters.sqlalchemy.mappings import Money, UTCDateTime

revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_PAYMENT_TYPES = ("prepaid", "collect")
_CLAIM_STATUSES = ("unclaimed", "claimed", "ready_for_handover")


def upgrade() -> None:
    op.create_table(
        "order_line",
        sa.Column("surrogate_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("order_id", sa.String(length=64), nullable=False),
        sa.Column("product_code", sa.String(length=128), nullable=False),
        sa.Column("product_name", sa.String(length=512), nullable=False),
        sa.Column("order_date", UTCDateTime(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("pincode", sa.String(length=16), nullable=True),
        sa.Column("selling_price", Money(), nullable=False),
        sa.Column("order_total", Money(), nullable=False),
        sa.Column(
            "payment_type",
            sa.Enum(*_PAYMENT_TYPES, name="payment_type", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("prepaid_amount", Money(), nullable=False),
        sa.Column("allocation_ratio", sa.Integer(), nullable=False),
        sa.Column("allocated_total", Money(), nullable=False),
        sa.Column("collectable_amount", Money(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*_CLAIM_STATUSES, name="claim_status", native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column("claimed_by", sa.String(length=128), nullable=True),
        sa.Column("claimed_at", UTCDateTime(), nullable=True),
        sa.Column("last_claimed_by", sa.String(length=128), nullable=True),
        sa.Column("last_claimed_at", UTCDateTime(), nullable=True),
        sa.Column("clone_status", sa.String(length=32), nullable=True),
        sa.Column("cloned_order_id", sa.String(length=64), nullable=True),
        sa.Column("is_cloned_row", sa.Boolean(), nullable=False),
        sa.Column("label_downloaded", sa.Boolean(), nullable=False),
        sa.Column("handover_at", UTCDateTime(), nullable=True),
        sa.Column("customer_name", sa.String(length=256), nullable=True),
        sa.Column("product_image", sa.String(length=1024), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("surrogate_id", name=op.f("pk_order_line")),
        sa.UniqueConstraint(
            "order_id", "product_code", name=op.f("uq_order_line_order_id_product_code")
        ),
    )
    op.create_table(
        "sync_state",
        sa.Column("key", sa.String(length=128), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_sync_state")),
    )
    op.create_table(
        "raw_payload",
        sa.Column("page", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("fetched_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("page", name=op.f("pk_raw_payload")),
    )
    op.create_table(
        "product_catalog",
        sa.Column("name", sa.String(length=512), nullable=False),
        sa.Column("image", sa.String(length=1024), nullable=False),
        sa.PrimaryKeyConstraint("name", name=op.f("pk_product_catalog")),
    )


def downgrade() -> None:
    op.drop_table("product_catalog")
    op.drop_table("raw_payload")
    op.drop_table("sync_state")
    op.drop_table("order_line")
