"""initial_report_tables

Revision ID: 3e5d7a1c9b20
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3e5d7a1c9b20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "daily_sales",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ship_date", sa.Date(), nullable=False),
        sa.Column("sku", sa.Text(), nullable=False),
        sa.Column("product_name", sa.Text(), nullable=True),
        sa.Column("orders", sa.Integer(), nullable=False),
        sa.Column("qty_sold", sa.Integer(), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_sales", sa.Numeric(12, 2), nullable=False),
        sa.Column("available_qty", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ship_date", "sku", name="daily_sales_date_sku_idx"),
    )
    op.create_index("ix_daily_sales_ship_date", "daily_sales", ["ship_date"], unique=False)
    op.create_index("ix_daily_sales_sku", "daily_sales", ["sku"], unique=False)

    op.create_table(
        "order_pnl",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Text(), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=True),
        sa.Column("ship_date", sa.Date(), nullable=False),
        sa.Column("channel_raw", sa.Text(), nullable=True),
        sa.Column("company", sa.Text(), nullable=True),
        sa.Column("channel", sa.Text(), nullable=False),
        sa.Column("qty", sa.Integer(), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("grand_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("items_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("shipping_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("commission", sa.Numeric(12, 2), nullable=False),
        sa.Column("transaction_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("posting_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_fees", sa.Numeric(12, 2), nullable=False),
        sa.Column("accrual_profit", sa.Numeric(12, 2), nullable=False),
        sa.Column("cash_profit", sa.Numeric(12, 2), nullable=False),
        sa.Column("accrual_margin", sa.Numeric(8, 2), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_order_pnl_order_id", "order_pnl", ["order_id"], unique=True)
    op.create_index("ix_order_pnl_ship_date", "order_pnl", ["ship_date"], unique=False)
    op.create_index("ix_order_pnl_channel", "order_pnl", ["channel"], unique=False)

    op.create_table(
        "inventory_current",
        sa.Column("sku", sa.Text(), nullable=False),
        sa.Column("product_name", sa.Text(), nullable=True),
        sa.Column("warehouse", sa.Text(), nullable=True),
        sa.Column("physical", sa.Integer(), nullable=False),
        sa.Column("reserved", sa.Integer(), nullable=False),
        sa.Column("available", sa.Integer(), nullable=False),
        sa.Column("cost", sa.Numeric(10, 2), nullable=False),
        sa.Column("value", sa.Numeric(12, 2), nullable=False),
        sa.Column("list_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("site_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("last_received", sa.Text(), nullable=True),
        sa.Column("prefix", sa.Text(), nullable=True),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("grade", sa.Text(), nullable=True),
        sa.Column("bucket", sa.Text(), nullable=True),
        sa.Column("product_family", sa.Text(), nullable=True),
        sa.Column("snapshot_date", sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint("sku"),
    )
    op.create_index("ix_inventory_current_product_family", "inventory_current", ["product_family"], unique=False)

    op.create_table(
        "channel_sales",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("report_date", sa.Date(), nullable=False),
        sa.Column("sku", sa.Text(), nullable=False),
        sa.Column("product_name", sa.Text(), nullable=True),
        sa.Column("total_units", sa.Integer(), nullable=False),
        sa.Column("total_orders", sa.Integer(), nullable=False),
        sa.Column("total_sales", sa.Numeric(12, 2), nullable=False),
        sa.Column("channel_data", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("report_date", "sku", name="channel_sales_date_sku_idx"),
    )
    op.create_index("ix_channel_sales_report_date", "channel_sales", ["report_date"], unique=False)
    op.create_index("ix_channel_sales_sku", "channel_sales", ["sku"], unique=False)

    op.create_table(
        "product_names",
        sa.Column("sku", sa.Text(), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("name_source", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("sku"),
    )

    op.create_table(
        "email_fetch_log",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("fetched_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("days_back", sa.Integer(), nullable=True),
        sa.Column("emails_scanned", sa.Integer(), nullable=False),
        sa.Column("reports_imported", sa.Integer(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_email_fetch_log_fetched_at", "email_fetch_log", ["fetched_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_email_fetch_log_fetched_at", table_name="email_fetch_log")
    op.drop_table("email_fetch_log")
    op.drop_table("product_names")
    op.drop_index("ix_channel_sales_sku", table_name="channel_sales")
    op.drop_index("ix_channel_sales_report_date", table_name="channel_sales")
    op.drop_table("channel_sales")
    op.drop_index("ix_inventory_current_product_family", table_name="inventory_current")
    op.drop_table("inventory_current")
    op.drop_index("ix_order_pnl_channel", table_name="order_pnl")
    op.drop_index("ix_order_pnl_ship_date", table_name="order_pnl")
    op.drop_index("ix_order_pnl_order_id", table_name="order_pnl")
    op.drop_table("order_pnl")
    op.drop_index("ix_daily_sales_sku", table_name="daily_sales")
    op.drop_index("ix_daily_sales_ship_date", table_name="daily_sales")
    op.drop_table("daily_sales")
