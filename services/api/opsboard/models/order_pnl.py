"""OrderPnl model.

One row per order line from the profit-by-order report. `channel` is the
canonical marketplace name derived from (channel_raw, company).
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from opsboard.stores.postgres import Base


class OrderPnl(Base):
    """Order-level profit and loss row."""

    __tablename__ = "order_pnl"

    id: Mapped[int] = mapped_column(primary_key=True)

    order_id: Mapped[str] = mapped_column(Text, unique=True, index=True)
    order_date: Mapped[date | None] = mapped_column(Date)
    ship_date: Mapped[date] = mapped_column(Date, index=True)

    # Channel
    channel_raw: Mapped[str | None] = mapped_column(Text)
    company: Mapped[str | None] = mapped_column(Text)
    channel: Mapped[str] = mapped_column(Text, index=True)

    # Money
    qty: Mapped[int] = mapped_column(Integer, default=0)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    grand_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    items_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    commission: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    transaction_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    posting_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    total_fees: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    accrual_profit: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    cash_profit: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    accrual_margin: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), default=0)

    def __repr__(self) -> str:
        return f"<OrderPnl {self.order_id} {self.channel}>"
