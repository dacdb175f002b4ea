"""create_assets_and_allocation_categories

Revision ID: 3f1a9c2e7b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "3f1a9c2e7b40"
down_revision = None
branch_labels = None
depends_on = None

vesting_type = postgresql.ENUM(
    "NO_VESTING", "LINEAR_VESTING", "CLIFF_VESTING", name="vestingtype", create_type=False
)


def upgrade() -> None:
    vesting_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "assets",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("issuer_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(500), nullable=False),
        sa.Column("token_symbol", sa.String(20), nullable=True),
        sa.Column("token_supply", sa.BigInteger, server_default="0", nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("is_deleted", sa.Boolean, server_default="false", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_assets_issuer_id", "assets", ["issuer_id"])

    op.create_table(
        "allocation_categories",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("asset_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("issuer_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("tokens", sa.BigInteger, nullable=False),
        sa.Column("percentage", sa.Float, server_default="0", nullable=False),
        sa.Column("vesting_type", vesting_type, nullable=False),
        sa.Column("vesting_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("vesting_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cliff_period", sa.Integer, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, server_default="true", nullable=False),
        sa.Column("version", sa.Integer, server_default="1", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["asset_id"], ["assets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("tokens >= 0", name="ck_allocation_categories_tokens_non_negative"),
    )
    op.create_index("ix_allocation_categories_asset_id", "allocation_categories", ["asset_id"])
    op.create_index(
        "ix_allocation_categories_issuer_id_asset_id",
        "allocation_categories",
        ["issuer_id", "asset_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_allocation_categories_issuer_id_asset_id", table_name="allocation_categories")
    op.drop_index("ix_allocation_categories_asset_id", table_name="allocation_categories")
    op.drop_table("allocation_categories")
    op.drop_index("ix_assets_issuer_id", table_name="assets")
    op.drop_table("assets")
    vesting_type.drop(op.get_bind(), checkfirst=True)
