"""Read-side repository for dashboard aggregates.

AnalyticsStore is the storage collaborator consumed by the view services:
windowed sums keyed by SKU, the inventory snapshot, display names and
order history. Each method opens its own session so a view can gather
several independent aggregates concurrently.

Rows are returned as plain frozen dataclasses with floats (Numeric columns
are converted here), so services never touch ORM objects.

No business/classification logic in stores - that belongs in services.
"""

from dataclasses import dataclass
from datetime import date
from functools import lru_cache

from sqlalchemy import Date, cast, func, select

from opsboard.models import ChannelSale, DailySale, InventoryItem, OrderPnl, ProductName
from opsboard.stores.postgres import get_session


@dataclass(frozen=True)
class SkuSums:
    """Units/revenue for one SKU over a window."""

    qty: int = 0
    revenue: float = 0.0
    product_name: str | None = None


@dataclass(frozen=True)
class InventoryRow:
    """One live inventory row."""

    sku: str
    product_name: str | None
    warehouse: str | None
    physical: int
    reserved: int
    available: int
    cost: float
    value: float
    list_price: float
    site_price: float
    last_received: str | None
    category: str | None
    grade: str | None
    bucket: str | None
    product_family: str | None


@dataclass(frozen=True)
class OrderRow:
    """Order line summary used by product detail."""

    order_id: str
    ship_date: date
    channel: str
    revenue: float
    profit: float
    qty: int


@dataclass(frozen=True)
class DailyPoint:
    """One day of sales for a SKU."""

    day: date
    qty: int
    revenue: float


@dataclass(frozen=True)
class PnlTotals:
    """Order P&L sums over a window."""

    revenue: float = 0.0
    profit: float = 0.0
    fees: float = 0.0
    cost: float = 0.0
    orders: int = 0
    units: int = 0


@dataclass(frozen=True)
class ChannelTotals:
    """Order P&L sums for one channel."""

    channel: str
    totals: PnlTotals


@dataclass(frozen=True)
class MonthTotals:
    """Order P&L revenue/profit for one calendar month (YYYY-MM)."""

    month: str
    revenue: float
    profit: float


# Sales-shaped tables: (date column, qty column, revenue column, name column)
_SALES_TABLES = {
    "daily_sales": (DailySale.ship_date, DailySale.qty_sold, DailySale.subtotal, DailySale.product_name),
    "channel_sales": (ChannelSale.report_date, ChannelSale.total_units, ChannelSale.total_sales, ChannelSale.product_name),
}


def _f(value: object) -> float:
    return float(value) if value is not None else 0.0


def _pnl_columns():
    return (
        func.coalesce(func.sum(OrderPnl.grand_total), 0).label("revenue"),
        func.coalesce(func.sum(OrderPnl.accrual_profit), 0).label("profit"),
        func.coalesce(func.sum(OrderPnl.total_fees), 0).label("fees"),
        func.coalesce(func.sum(OrderPnl.items_cost), 0).label("cost"),
        func.count(func.distinct(OrderPnl.order_id)).label("orders"),
        func.coalesce(func.sum(OrderPnl.qty), 0).label("units"),
    )


def _pnl_totals(row) -> PnlTotals:
    return PnlTotals(
        revenue=_f(row.revenue),
        profit=_f(row.profit),
        fees=_f(row.fees),
        cost=_f(row.cost),
        orders=int(row.orders or 0),
        units=int(row.units or 0),
    )


def _inventory_row(item: InventoryItem) -> InventoryRow:
    return InventoryRow(
        sku=item.sku,
        product_name=item.product_name,
        warehouse=item.warehouse,
        physical=item.physical or 0,
        reserved=item.reserved or 0,
        available=item.available or 0,
        cost=_f(item.cost),
        value=_f(item.value),
        list_price=_f(item.list_price),
        site_price=_f(item.site_price),
        last_received=item.last_received,
        category=item.category,
        grade=item.grade,
        bucket=item.bucket,
        product_family=item.product_family,
    )


class AnalyticsStore:
    """PostgreSQL-backed aggregate queries."""

    async def sums_by_sku_in_range(
        self,
        date_from: date,
        date_to: date,
        table: str = "daily_sales",
    ) -> dict[str, SkuSums]:
        """Sum units and revenue per SKU for an inclusive date range.

        Args:
            date_from: First day (inclusive).
            date_to: Last day (inclusive).
            table: "daily_sales" or "channel_sales".

        Returns:
            Map of SKU -> SkuSums. SKUs without rows in the window are absent.
        """
        day_col, qty_col, rev_col, name_col = _SALES_TABLES[table]
        sku_col = day_col.class_.sku
        query = (
            select(
                sku_col,
                func.max(name_col).label("product_name"),
                func.coalesce(func.sum(qty_col), 0).label("qty"),
                func.coalesce(func.sum(rev_col), 0).label("revenue"),
            )
            .where(day_col >= date_from, day_col <= date_to)
            .group_by(sku_col)
        )
        async with get_session() as session:
            result = await session.execute(query)
            return {
                row.sku: SkuSums(qty=int(row.qty), revenue=_f(row.revenue), product_name=row.product_name)
                for row in result
            }

    async def sku_sums_in_range(self, sku: str, date_from: date, date_to: date) -> SkuSums:
        """Daily-sales sums for a single SKU."""
        query = select(
            func.coalesce(func.sum(DailySale.qty_sold), 0).label("qty"),
            func.coalesce(func.sum(DailySale.subtotal), 0).label("revenue"),
        ).where(
            DailySale.sku == sku,
            DailySale.ship_date >= date_from,
            DailySale.ship_date <= date_to,
        )
        async with get_session() as session:
            row = (await session.execute(query)).one()
            return SkuSums(qty=int(row.qty), revenue=_f(row.revenue))

    async def inventory_snapshot(self) -> list[InventoryRow]:
        """Full inventory table scan."""
        async with get_session() as session:
            result = await session.execute(select(InventoryItem))
            return [_inventory_row(item) for item in result.scalars().all()]

    async def inventory_row(self, sku: str) -> InventoryRow | None:
        """Inventory row for one SKU, if stocked."""
        async with get_session() as session:
            result = await session.execute(select(InventoryItem).where(InventoryItem.sku == sku).limit(1))
            item = result.scalar_one_or_none()
            return _inventory_row(item) if item else None

    async def display_names(self) -> dict[str, str]:
        """Resolved display names from the product-name cache."""
        async with get_session() as session:
            result = await session.execute(select(ProductName.sku, ProductName.display_name))
            return {row.sku: row.display_name for row in result}

    async def display_name(self, sku: str) -> str | None:
        """Resolved display name for one SKU."""
        async with get_session() as session:
            result = await session.execute(
                select(ProductName.display_name).where(ProductName.sku == sku).limit(1)
            )
            return result.scalar_one_or_none()

    async def sales_skus(self) -> set[str]:
        """Every SKU that ever appeared in daily sales."""
        async with get_session() as session:
            result = await session.execute(select(DailySale.sku).distinct())
            return set(result.scalars().all())

    async def product_name_sources(self) -> tuple[dict[str, str | None], dict[str, str | None]]:
        """Candidate names for the display-name cache.

        Returns:
            (inventory names, sales names): every inventory SKU and every
            daily-sales SKU, mapped to its raw product name (max() per SKU
            for sales). Names may be empty or None.
        """
        sales_query = (
            select(DailySale.sku, func.max(DailySale.product_name).label("product_name"))
            .group_by(DailySale.sku)
        )
        async with get_session() as session:
            inventory = await session.execute(select(InventoryItem.sku, InventoryItem.product_name))
            sales = await session.execute(sales_query)
            return (
                {row.sku: row.product_name for row in inventory},
                {row.sku: row.product_name for row in sales},
            )

    async def orders_matching_sku(self, sku: str, limit: int = 10) -> list[OrderRow]:
        """Best-effort order history: order ids containing the SKU, newest first."""
        query = (
            select(OrderPnl)
            .where(OrderPnl.order_id.contains(sku, autoescape=True))
            .order_by(OrderPnl.ship_date.desc())
            .limit(limit)
        )
        async with get_session() as session:
            result = await session.execute(query)
            return [
                OrderRow(
                    order_id=o.order_id,
                    ship_date=o.ship_date,
                    channel=o.channel,
                    revenue=_f(o.grand_total),
                    profit=_f(o.accrual_profit),
                    qty=o.qty or 0,
                )
                for o in result.scalars().all()
            ]

    async def daily_history(self, sku: str, since: date) -> list[DailyPoint]:
        """Per-day sales rows for a SKU from `since` onwards, oldest first."""
        query = (
            select(DailySale.ship_date, DailySale.qty_sold, DailySale.subtotal)
            .where(DailySale.sku == sku, DailySale.ship_date >= since)
            .order_by(DailySale.ship_date.asc())
        )
        async with get_session() as session:
            result = await session.execute(query)
            return [
                DailyPoint(day=row.ship_date, qty=row.qty_sold or 0, revenue=_f(row.subtotal))
                for row in result
            ]

    # ============================================================
    # Order P&L
    # ============================================================

    async def pnl_totals(self, date_from: date, date_to: date) -> PnlTotals:
        """Order P&L sums for an inclusive ship-date range."""
        query = select(*_pnl_columns()).where(
            OrderPnl.ship_date >= date_from,
            OrderPnl.ship_date <= date_to,
        )
        async with get_session() as session:
            return _pnl_totals((await session.execute(query)).one())

    async def pnl_by_channel(self, date_from: date, date_to: date) -> list[ChannelTotals]:
        """Order P&L sums per canonical channel, revenue descending."""
        revenue = func.coalesce(func.sum(OrderPnl.grand_total), 0)
        query = (
            select(OrderPnl.channel, *_pnl_columns())
            .where(OrderPnl.ship_date >= date_from, OrderPnl.ship_date <= date_to)
            .group_by(OrderPnl.channel)
            .order_by(revenue.desc())
        )
        async with get_session() as session:
            result = await session.execute(query)
            return [ChannelTotals(channel=row.channel, totals=_pnl_totals(row)) for row in result]

    async def pnl_by_day(self, date_from: date, date_to: date) -> dict[date, PnlTotals]:
        """Order P&L sums per ship date (days without orders are absent)."""
        day = cast(OrderPnl.ship_date, Date).label("day")
        query = (
            select(day, *_pnl_columns())
            .where(OrderPnl.ship_date >= date_from, OrderPnl.ship_date <= date_to)
            .group_by(day)
        )
        async with get_session() as session:
            result = await session.execute(query)
            return {row.day: _pnl_totals(row) for row in result}

    async def pnl_by_month(self, since: date) -> list[MonthTotals]:
        """Revenue/profit per calendar month from `since`, oldest first."""
        month = func.to_char(OrderPnl.ship_date, "YYYY-MM").label("month")
        query = (
            select(
                month,
                func.coalesce(func.sum(OrderPnl.grand_total), 0).label("revenue"),
                func.coalesce(func.sum(OrderPnl.accrual_profit), 0).label("profit"),
            )
            .where(OrderPnl.ship_date >= since)
            .group_by(month)
            .order_by(month.asc())
        )
        async with get_session() as session:
            result = await session.execute(query)
            return [MonthTotals(month=row.month, revenue=_f(row.revenue), profit=_f(row.profit)) for row in result]


@lru_cache
def get_analytics_store() -> AnalyticsStore:
    """Get the shared store instance (FastAPI dependency)."""
    return AnalyticsStore()
