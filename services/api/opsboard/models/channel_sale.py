"""ChannelSale model.

Per-SKU units/orders/sales split by marketplace channel for a report date.
`channel_data` maps a ChannelCode value to {units, orders, sales}.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Date, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from opsboard.stores.postgres import Base


class ChannelSale(Base):
    """Channel breakdown row."""

    __tablename__ = "channel_sales"
    __table_args__ = (
        UniqueConstraint("report_date", "sku", name="channel_sales_date_sku_idx"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    report_date: Mapped[date] = mapped_column(Date, index=True)
    sku: Mapped[str] = mapped_column(Text, index=True)
    product_name: Mapped[str | None] = mapped_column(Text)

    total_units: Mapped[int] = mapped_column(Integer, default=0)
    total_orders: Mapped[int] = mapped_column(Integer, default=0)
    total_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    channel_data: Mapped[dict[str, Any] | None] = mapped_column(JSONB)

    def __repr__(self) -> str:
        return f"<ChannelSale {self.report_date} {self.sku}>"
