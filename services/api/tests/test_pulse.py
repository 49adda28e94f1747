"""Tests for the daily pulse and P&L views."""

from datetime import date

import pytest

from opsboard.services.pulse import get_channel_breakdown, get_daily_pulse, get_pnl

from tests.conftest import FakeStore, PnlLine


@pytest.fixture
def store() -> FakeStore:
    return FakeStore(
        pnl=[
            PnlLine("SO-1", date(2024, 3, 5), "eBay", 300.0, profit=40.0, fees=30.0, cost=200.0, qty=2),
            PnlLine("SO-2", date(2024, 3, 6), "Amazon", 100.0, profit=10.0, fees=10.0, cost=70.0),
            PnlLine("SO-3", date(2024, 2, 5), "eBay", 200.0, profit=20.0),
            PnlLine("SO-4", date(2024, 2, 20), "eBay", 999.0, profit=20.0),
            PnlLine("SO-5", date(2023, 3, 5), "Amazon", 100.0, profit=5.0),
        ],
    )


@pytest.mark.asyncio
async def test_pulse_kpis(store: FakeStore, today: date):
    pulse = await get_daily_pulse(store, today=today)

    assert pulse.kpis.revenue == 400
    assert pulse.kpis.profit == 50
    assert pulse.kpis.margin == 12.5
    assert pulse.kpis.orders == 2
    assert pulse.kpis.units == 3
    assert pulse.kpis.fees == 40


@pytest.mark.asyncio
async def test_pulse_sparkline_is_zero_filled(store: FakeStore, today: date):
    pulse = await get_daily_pulse(store, today=today)
    points = {p.date: p.revenue for p in pulse.daily_revenue}

    assert len(pulse.daily_revenue) == 14
    assert pulse.daily_revenue[0].date == "2024-02-26"
    assert pulse.daily_revenue[-1].date == "2024-03-10"
    assert points["2024-03-05"] == 300
    assert points["2024-03-07"] == 0


@pytest.mark.asyncio
async def test_pulse_comparisons(store: FakeStore, today: date):
    pulse = await get_daily_pulse(store, today=today)
    revenue, profit, orders = pulse.comparisons

    assert revenue.metric == "Revenue"
    # prior month MTD stops on Feb 10, so the Feb 20 order is left out
    assert revenue.prior_month_mtd == 200
    assert revenue.prior_month_delta == 100
    assert revenue.smly_delta == 300
    assert revenue.ytd == 1599
    assert orders.mtd == 2
    assert orders.prior_month_delta == 100


@pytest.mark.asyncio
async def test_pulse_monthly_trend(store: FakeStore, today: date):
    pulse = await get_daily_pulse(store, today=today)

    assert [m.month for m in pulse.monthly_revenue] == ["2023-03", "2024-02", "2024-03"]
    assert pulse.monthly_revenue[-1].margin == pytest.approx(12.5)


@pytest.mark.asyncio
async def test_channel_breakdown(store: FakeStore, today: date):
    channels = await get_channel_breakdown(store, today=today)

    assert [c.channel for c in channels] == ["eBay", "Amazon"]
    assert channels[0].pct_of_total == pytest.approx(75)
    assert channels[1].pct_of_total == pytest.approx(25)
    assert channels[0].aov == 300
    assert channels[0].fee_rate == pytest.approx(10)


@pytest.mark.asyncio
async def test_pnl_daily_breakdown(store: FakeStore, today: date):
    pnl = await get_pnl(store, today=today)

    assert len(pnl.daily_breakdown) == 10
    assert pnl.daily_breakdown[0].date == "2024-03-10"
    assert pnl.daily_breakdown[-1].date == "2024-03-01"
    day = next(d for d in pnl.daily_breakdown if d.date == "2024-03-05")
    assert day.revenue == 300
    assert day.units == 2
    assert pnl.kpis.fee_rate == 10.0
    assert pnl.kpis.margin == 12.5


@pytest.mark.asyncio
async def test_empty_store_has_no_divide_by_zero(today: date):
    pnl = await get_pnl(FakeStore(), today=today)

    assert pnl.kpis.margin == 0
    assert pnl.channel_pnl == []
    assert all(d.revenue == 0 for d in pnl.daily_breakdown)
