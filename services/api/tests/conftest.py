"""Shared fixtures: an in-memory AnalyticsStore and row builders."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date

import pytest

from opsboard.services.sku import parse_sku
from opsboard.stores.analytics import (
    ChannelTotals,
    DailyPoint,
    InventoryRow,
    MonthTotals,
    OrderRow,
    PnlTotals,
    SkuSums,
)


@dataclass
class SaleLine:
    day: date
    sku: str
    qty: int
    revenue: float
    product_name: str | None = None


@dataclass
class PnlLine:
    order_id: str
    ship_date: date
    channel: str
    revenue: float
    profit: float = 0.0
    fees: float = 0.0
    cost: float = 0.0
    qty: int = 1


def inventory_row(
    sku: str,
    available: int,
    cost: float = 100.0,
    product_name: str | None = None,
    site_price: float = 0.0,
    list_price: float = 0.0,
) -> InventoryRow:
    parsed = parse_sku(sku)
    return InventoryRow(
        sku=sku,
        product_name=product_name,
        warehouse="AW Main",
        physical=max(0, available),
        reserved=0,
        available=available,
        cost=cost,
        value=max(0, available) * cost,
        list_price=list_price,
        site_price=site_price,
        last_received=None,
        category=parsed.category,
        grade=parsed.grade,
        bucket=parsed.bucket,
        product_family=parsed.product_family,
    )


def _totals(lines: list[PnlLine]) -> PnlTotals:
    return PnlTotals(
        revenue=sum(line.revenue for line in lines),
        profit=sum(line.profit for line in lines),
        fees=sum(line.fees for line in lines),
        cost=sum(line.cost for line in lines),
        orders=len(lines),
        units=sum(line.qty for line in lines),
    )


class FakeStore:
    """Same read contract as AnalyticsStore, backed by lists."""

    def __init__(
        self,
        sales: list[SaleLine] | None = None,
        inventory: list[InventoryRow] | None = None,
        names: dict[str, str] | None = None,
        pnl: list[PnlLine] | None = None,
    ):
        self.sales = sales or []
        self.inventory = inventory or []
        self.names = names or {}
        self.pnl = pnl or []

    async def sums_by_sku_in_range(self, date_from: date, date_to: date, table: str = "daily_sales") -> dict[str, SkuSums]:
        qty: dict[str, int] = defaultdict(int)
        revenue: dict[str, float] = defaultdict(float)
        name: dict[str, str | None] = {}
        for line in self.sales:
            if date_from <= line.day <= date_to:
                qty[line.sku] += line.qty
                revenue[line.sku] += line.revenue
                if line.product_name and (name.get(line.sku) or "") < line.product_name:
                    name[line.sku] = line.product_name
        return {sku: SkuSums(qty=qty[sku], revenue=revenue[sku], product_name=name.get(sku)) for sku in qty}

    async def sku_sums_in_range(self, sku: str, date_from: date, date_to: date) -> SkuSums:
        sums = await self.sums_by_sku_in_range(date_from, date_to)
        return sums.get(sku, SkuSums())

    async def inventory_snapshot(self) -> list[InventoryRow]:
        return list(self.inventory)

    async def inventory_row(self, sku: str) -> InventoryRow | None:
        return next((row for row in self.inventory if row.sku == sku), None)

    async def display_names(self) -> dict[str, str]:
        return dict(self.names)

    async def display_name(self, sku: str) -> str | None:
        return self.names.get(sku)

    async def sales_skus(self) -> set[str]:
        return {line.sku for line in self.sales}

    async def product_name_sources(self) -> tuple[dict[str, str | None], dict[str, str | None]]:
        inventory_names = {row.sku: row.product_name for row in self.inventory}
        sales_names: dict[str, str | None] = {}
        for line in self.sales:
            if line.product_name and (sales_names.get(line.sku) or "") < line.product_name:
                sales_names[line.sku] = line.product_name
            sales_names.setdefault(line.sku, None)
        return inventory_names, sales_names

    async def orders_matching_sku(self, sku: str, limit: int = 10) -> list[OrderRow]:
        matches = sorted(
            (line for line in self.pnl if sku in line.order_id),
            key=lambda line: line.ship_date,
            reverse=True,
        )
        return [
            OrderRow(
                order_id=line.order_id,
                ship_date=line.ship_date,
                channel=line.channel,
                revenue=line.revenue,
                profit=line.profit,
                qty=line.qty,
            )
            for line in matches[:limit]
        ]

    async def daily_history(self, sku: str, since: date) -> list[DailyPoint]:
        qty: dict[date, int] = defaultdict(int)
        revenue: dict[date, float] = defaultdict(float)
        for line in self.sales:
            if line.sku == sku and line.day >= since:
                qty[line.day] += line.qty
                revenue[line.day] += line.revenue
        return [DailyPoint(day=day, qty=qty[day], revenue=revenue[day]) for day in sorted(qty)]

    def _pnl_in(self, date_from: date, date_to: date) -> list[PnlLine]:
        return [line for line in self.pnl if date_from <= line.ship_date <= date_to]

    async def pnl_totals(self, date_from: date, date_to: date) -> PnlTotals:
        return _totals(self._pnl_in(date_from, date_to))

    async def pnl_by_channel(self, date_from: date, date_to: date) -> list[ChannelTotals]:
        grouped: dict[str, list[PnlLine]] = defaultdict(list)
        for line in self._pnl_in(date_from, date_to):
            grouped[line.channel].append(line)
        rows = [ChannelTotals(channel=channel, totals=_totals(lines)) for channel, lines in grouped.items()]
        return sorted(rows, key=lambda row: -row.totals.revenue)

    async def pnl_by_day(self, date_from: date, date_to: date) -> dict[date, PnlTotals]:
        grouped: dict[date, list[PnlLine]] = defaultdict(list)
        for line in self._pnl_in(date_from, date_to):
            grouped[line.ship_date].append(line)
        return {day: _totals(lines) for day, lines in grouped.items()}

    async def pnl_by_month(self, since: date) -> list[MonthTotals]:
        grouped: dict[str, list[PnlLine]] = defaultdict(list)
        for line in self.pnl:
            if line.ship_date >= since:
                grouped[line.ship_date.strftime("%Y-%m")].append(line)
        return [
            MonthTotals(month=month, revenue=_totals(lines).revenue, profit=_totals(lines).profit)
            for month, lines in sorted(grouped.items())
        ]


@pytest.fixture
def today() -> date:
    """Fixed reference day: 10 March 2024 (leap-year February before it)."""
    return date(2024, 3, 10)
