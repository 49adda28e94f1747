"""InventoryItem model.

Point-in-time inventory snapshot: at most one row per SKU. Every inventory
import wipes and reloads the whole table.

The classification columns (prefix .. product_family) are copied from
parse_sku() at import time so the table can be browsed directly.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from opsboard.stores.postgres import Base


class InventoryItem(Base):
    """Current stock for a SKU."""

    __tablename__ = "inventory_current"

    sku: Mapped[str] = mapped_column(Text, primary_key=True)
    product_name: Mapped[str | None] = mapped_column(Text)
    warehouse: Mapped[str | None] = mapped_column(Text)

    # Quantities (available = physical - reserved, as exported)
    physical: Mapped[int] = mapped_column(Integer, default=0)
    reserved: Mapped[int] = mapped_column(Integer, default=0)
    available: Mapped[int] = mapped_column(Integer, default=0)

    # Money
    cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    list_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    site_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    last_received: Mapped[str | None] = mapped_column(Text)

    # Parsed SKU
    prefix: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(Text)
    grade: Mapped[str | None] = mapped_column(Text)
    bucket: Mapped[str | None] = mapped_column(Text)  # sellable / intake / failed
    product_family: Mapped[str | None] = mapped_column(Text, index=True)

    snapshot_date: Mapped[date | None] = mapped_column(Date)

    def __repr__(self) -> str:
        return f"<InventoryItem {self.sku} avail={self.available}>"
