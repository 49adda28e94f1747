"""DailySale model.

One row per (ship_date, sku): units and revenue shipped that day.
Re-importing a report replaces the values for the same key.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from opsboard.stores.postgres import Base


class DailySale(Base):
    """Per-SKU, per-day sales row."""

    __tablename__ = "daily_sales"
    __table_args__ = (
        UniqueConstraint("ship_date", "sku", name="daily_sales_date_sku_idx"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    ship_date: Mapped[date] = mapped_column(Date, index=True)
    sku: Mapped[str] = mapped_column(Text, index=True)
    product_name: Mapped[str | None] = mapped_column(Text)

    orders: Mapped[int] = mapped_column(Integer, default=0)
    qty_sold: Mapped[int] = mapped_column(Integer, default=0)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    total_sales: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    # Available quantity reported alongside the sale (not the live snapshot)
    available_qty: Mapped[int | None] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<DailySale {self.ship_date} {self.sku} x{self.qty_sold}>"
