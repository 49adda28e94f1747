"""Daily pulse and P&L views built from order-level profit rows.

Revenue is the order grand total and profit the accrual profit. Day series
are zero-filled here, so a day without orders still shows up as 0.
"""

import asyncio
from datetime import date, timedelta

from opsboard.schemas import (
    ChannelPnl,
    ComparisonRow,
    DailyPnlRow,
    DailyPulseResponse,
    DailyRevenuePoint,
    MonthlyRevenuePoint,
    PnlKpis,
    PnlResponse,
    PulseKpis,
)
from opsboard.services.clock import business_today
from opsboard.services.metrics import pct_change, round_half_up
from opsboard.services.windows import compute_windows, months_back_start
from opsboard.stores.analytics import AnalyticsStore, ChannelTotals, MonthTotals, PnlTotals

SPARKLINE_DAYS = 14
TREND_MONTHS = 14

_NO_ORDERS = PnlTotals()


def ratio_pct(part: float, whole: float) -> float:
    """part / whole in percent; 0 when whole is not positive."""
    return part / whole * 100 if whole > 0 else 0.0


def comparison_row(
    metric: str,
    mtd: float,
    prior_month_mtd: float,
    smly_mtd: float,
    ytd: float,
    prior_ytd: float,
) -> ComparisonRow:
    """One comparison line: current MTD / YTD against the same span earlier."""
    return ComparisonRow(
        metric=metric,
        mtd=mtd,
        prior_month_mtd=prior_month_mtd,
        prior_month_delta=pct_change(mtd, prior_month_mtd),
        smly_mtd=smly_mtd,
        smly_delta=pct_change(mtd, smly_mtd),
        ytd=ytd,
        prior_ytd=prior_ytd,
        ytd_delta=pct_change(ytd, prior_ytd),
    )


def monthly_trend(months: list[MonthTotals]) -> list[MonthlyRevenuePoint]:
    return [
        MonthlyRevenuePoint(month=m.month, revenue=m.revenue, margin=ratio_pct(m.profit, m.revenue))
        for m in months
    ]


def channel_rows(channels: list[ChannelTotals], total_revenue: float) -> list[ChannelPnl]:
    """Per-channel P&L lines (input is already revenue-descending)."""
    rows: list[ChannelPnl] = []
    for ch in channels:
        t = ch.totals
        rows.append(
            ChannelPnl(
                channel=ch.channel,
                revenue=t.revenue,
                pct_of_total=ratio_pct(t.revenue, total_revenue),
                profit=t.profit,
                margin=ratio_pct(t.profit, t.revenue),
                fees=t.fees,
                fee_rate=ratio_pct(t.fees, t.revenue),
                orders=t.orders,
                aov=t.revenue / t.orders if t.orders > 0 else 0.0,
                cost=t.cost,
                units=t.units,
                profit_per_order=t.profit / t.orders if t.orders > 0 else 0.0,
            )
        )
    return rows


async def get_daily_pulse(store: AnalyticsStore, today: date | None = None) -> DailyPulseResponse:
    """Build the daily pulse: MTD KPIs, 14-day sparkline, monthly trend, comparisons.

    Args:
        store: Aggregate read store.
        today: Reference day (business today when None).

    Returns:
        DailyPulseResponse.
    """
    w = compute_windows(today or business_today())
    sparkline_start = w.today - timedelta(days=SPARKLINE_DAYS - 1)

    mtd, prior_month, smly, ytd, prior_ytd, by_day, by_month = await asyncio.gather(
        store.pnl_totals(w.month_start, w.today),
        store.pnl_totals(w.last_month_start, w.prior_month_same_day),
        store.pnl_totals(w.smly_start, w.smly_same_day),
        store.pnl_totals(w.ytd_start, w.today),
        store.pnl_totals(w.prior_ytd_start, w.prior_ytd_end),
        store.pnl_by_day(sparkline_start, w.today),
        store.pnl_by_month(months_back_start(w.today, TREND_MONTHS - 1)),
    )

    daily_revenue = []
    for offset in range(SPARKLINE_DAYS):
        day = sparkline_start + timedelta(days=offset)
        daily_revenue.append(
            DailyRevenuePoint(date=day.isoformat(), revenue=by_day.get(day, _NO_ORDERS).revenue)
        )

    return DailyPulseResponse(
        kpis=PulseKpis(
            revenue=mtd.revenue,
            profit=mtd.profit,
            margin=round_half_up(ratio_pct(mtd.profit, mtd.revenue), 1),
            orders=mtd.orders,
            units=mtd.units,
            fees=mtd.fees,
        ),
        daily_revenue=daily_revenue,
        monthly_revenue=monthly_trend(by_month),
        comparisons=[
            comparison_row("Revenue", mtd.revenue, prior_month.revenue, smly.revenue, ytd.revenue, prior_ytd.revenue),
            comparison_row("Profit", mtd.profit, prior_month.profit, smly.profit, ytd.profit, prior_ytd.profit),
            comparison_row("Orders", mtd.orders, prior_month.orders, smly.orders, ytd.orders, prior_ytd.orders),
        ],
    )


async def get_pnl(store: AnalyticsStore, today: date | None = None) -> PnlResponse:
    """Build the P&L view: MTD KPIs, channel breakdown, trend, day-by-day rows.

    Args:
        store: Aggregate read store.
        today: Reference day (business today when None).

    Returns:
        PnlResponse; dailyBreakdown runs from today back to the 1st.
    """
    w = compute_windows(today or business_today())

    mtd, channels, by_month, by_day = await asyncio.gather(
        store.pnl_totals(w.month_start, w.today),
        store.pnl_by_channel(w.month_start, w.today),
        store.pnl_by_month(months_back_start(w.today, TREND_MONTHS - 1)),
        store.pnl_by_day(w.month_start, w.today),
    )

    daily_breakdown = []
    day = w.today
    while day >= w.month_start:
        t = by_day.get(day, _NO_ORDERS)
        daily_breakdown.append(
            DailyPnlRow(
                date=day.isoformat(),
                revenue=t.revenue,
                profit=t.profit,
                margin=ratio_pct(t.profit, t.revenue),
                fees=t.fees,
                orders=t.orders,
                units=t.units,
            )
        )
        day -= timedelta(days=1)

    return PnlResponse(
        kpis=PnlKpis(
            revenue=mtd.revenue,
            profit=mtd.profit,
            margin=round_half_up(ratio_pct(mtd.profit, mtd.revenue), 1),
            total_fees=mtd.fees,
            fee_rate=round_half_up(ratio_pct(mtd.fees, mtd.revenue), 1),
            orders=mtd.orders,
        ),
        channel_pnl=channel_rows(channels, mtd.revenue),
        revenue_trend=monthly_trend(by_month),
        daily_breakdown=daily_breakdown,
    )


async def get_channel_breakdown(store: AnalyticsStore, today: date | None = None) -> list[ChannelPnl]:
    """MTD channel P&L lines only (daily pulse drill-down)."""
    w = compute_windows(today or business_today())
    mtd, channels = await asyncio.gather(
        store.pnl_totals(w.month_start, w.today),
        store.pnl_by_channel(w.month_start, w.today),
    )
    return channel_rows(channels, mtd.revenue)
