"""create_stock_and_pricing_tables

Revision ID: 3e5a7c1b9d20
Revises:
Create Date: 2026-10-17
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3e5a7c1b9d20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "stock_items",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("state", sa.String(length=20), nullable=False),
        sa.Column("sale_id", sa.String(length=64), nullable=True),
        sa.Column("is_promo", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("category", sa.String(length=30), nullable=True),
        sa.Column("brand", sa.String(length=50), nullable=True),
        sa.Column("model", sa.String(length=100), nullable=False),
        sa.Column("storage_gb", sa.Integer(), nullable=True),
        sa.Column("color", sa.String(length=50), nullable=True),
        sa.Column("color_other", sa.String(length=50), nullable=True),
        sa.Column("condition", sa.String(length=30), nullable=True),
        sa.Column("imei", sa.String(length=20), nullable=True),
        sa.Column("battery_pct", sa.Float(), nullable=True),
        sa.Column("is_sealed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("purchase_usd", sa.Float(), nullable=True),
        sa.Column("fx_rate_used", sa.Float(), nullable=True),
        sa.Column("purchase_ars", sa.Float(), nullable=True),
        sa.Column("sale_price_usd", sa.Float(), nullable=True),
        sa.Column("sale_price_ars", sa.Float(), nullable=True),
        sa.Column("warranty_days", sa.Integer(), nullable=True),
        sa.Column("provider_name", sa.String(length=200), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reserve_type", sa.String(length=10), nullable=True),
        sa.Column("reserve_amount_ars", sa.Float(), nullable=True),
        sa.Column("reserve_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        # sale_id only on sold units
        sa.CheckConstraint("sale_id IS NULL OR state = 'sold'", name="ck_stock_items_sale_id_only_when_sold"),
    )
    op.create_index(op.f("ix_stock_items_state"), "stock_items", ["state"], unique=False)
    op.create_index(op.f("ix_stock_items_model"), "stock_items", ["model"], unique=False)
    op.create_index(op.f("ix_stock_items_imei"), "stock_items", ["imei"], unique=False)
    # A sale consumes at most one unit
    op.create_index(
        "uq_stock_items_sale_id",
        "stock_items",
        ["sale_id"],
        unique=True,
        postgresql_where=sa.text("sale_id IS NOT NULL"),
    )

    op.create_table(
        "installment_rules",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("card_brand", sa.String(length=50), nullable=False),
        sa.Column("installments", sa.Integer(), nullable=False),
        sa.Column("channel", sa.String(length=20), nullable=False, server_default="standard"),
        sa.Column("surcharge_pct", sa.Float(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("card_brand", "installments", "channel", name="uq_installment_rules_brand_count_channel"),
    )
    op.create_index(op.f("ix_installment_rules_card_brand"), "installment_rules", ["card_brand"], unique=False)
    op.create_index(op.f("ix_installment_rules_channel"), "installment_rules", ["channel"], unique=False)

    op.create_table(
        "plan_canje_values",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("model", sa.String(length=100), nullable=False),
        sa.Column("storage_gb", sa.Integer(), nullable=True),
        sa.Column("battery_min", sa.Float(), nullable=False, server_default="0"),
        sa.Column("battery_max", sa.Float(), nullable=False, server_default="100"),
        sa.Column("pct_of_reference", sa.Float(), nullable=True),
        sa.Column("value_ars", sa.Float(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("battery_min <= battery_max", name="ck_plan_canje_battery_range"),
    )
    op.create_index(op.f("ix_plan_canje_values_model"), "plan_canje_values", ["model"], unique=False)

    op.create_table(
        "installment_quotes",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("card_brand", sa.String(length=50), nullable=False),
        sa.Column("channel", sa.String(length=20), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("base_price", sa.Float(), nullable=False),
        sa.Column("usd_rate", sa.Float(), nullable=True),
        sa.Column("base_price_ars", sa.Float(), nullable=False),
        sa.Column("rows_json", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("installment_quotes")
    op.drop_index(op.f("ix_plan_canje_values_model"), table_name="plan_canje_values")
    op.drop_table("plan_canje_values")
    op.drop_index(op.f("ix_installment_rules_channel"), table_name="installment_rules")
    op.drop_index(op.f("ix_installment_rules_card_brand"), table_name="installment_rules")
    op.drop_table("installment_rules")
    op.drop_index("uq_stock_items_sale_id", table_name="stock_items")
    op.drop_index(op.f("ix_stock_items_imei"), table_name="stock_items")
    op.drop_index(op.f("ix_stock_items_model"), table_name="stock_items")
    op.drop_index(op.f("ix_stock_items_state"), table_name="stock_items")
    op.drop_table("stock_items")
