"""Schemas for the dashboard views (/api/dashboard/*)."""

from pydantic import BaseModel, Field


# ============================================================
# Daily pulse
# ============================================================


class PulseKpis(BaseModel):
    """Month-to-date headline numbers."""

    revenue: float
    profit: float
    margin: float
    orders: int
    units: int
    fees: float


class DailyRevenuePoint(BaseModel):
    """One day of the 14-day revenue series."""

    date: str
    revenue: float


class MonthlyRevenuePoint(BaseModel):
    """One month of the revenue / margin trend."""

    month: str
    revenue: float
    margin: float


class ComparisonRow(BaseModel):
    """Metric compared with prior month, same month last year and prior YTD."""

    metric: str
    mtd: float
    prior_month_mtd: float = Field(alias="priorMonthMtd")
    prior_month_delta: float = Field(alias="priorMonthDelta")
    smly_mtd: float = Field(alias="smlyMtd")
    smly_delta: float = Field(alias="smlyDelta")
    ytd: float
    prior_ytd: float = Field(alias="priorYtd")
    ytd_delta: float = Field(alias="ytdDelta")

    model_config = {"populate_by_name": True}


class DailyPulseResponse(BaseModel):
    """Response payload for GET /api/dashboard/daily-pulse."""

    kpis: PulseKpis
    daily_revenue: list[DailyRevenuePoint] = Field(alias="dailyRevenue")
    monthly_revenue: list[MonthlyRevenuePoint] = Field(alias="monthlyRevenue")
    comparisons: list[ComparisonRow]

    model_config = {"populate_by_name": True}


# ============================================================
# P&L
# ============================================================


class PnlKpis(BaseModel):
    """Month-to-date P&L totals (margin and fee rate in percent, 1 decimal)."""

    revenue: float
    profit: float
    margin: float
    total_fees: float = Field(alias="totalFees")
    fee_rate: float = Field(alias="feeRate")
    orders: int

    model_config = {"populate_by_name": True}


class ChannelPnl(BaseModel):
    """P&L for one marketplace channel."""

    channel: str
    revenue: float
    pct_of_total: float = Field(alias="pctOfTotal")
    profit: float
    margin: float
    fees: float
    fee_rate: float = Field(alias="feeRate")
    orders: int
    aov: float
    cost: float
    units: int
    profit_per_order: float = Field(alias="profitPerOrder")

    model_config = {"populate_by_name": True}


class DailyPnlRow(BaseModel):
    """P&L for one day of the current month."""

    date: str
    revenue: float
    profit: float
    margin: float
    fees: float
    orders: int
    units: int


class PnlResponse(BaseModel):
    """Response payload for GET /api/dashboard/pnl."""

    kpis: PnlKpis
    channel_pnl: list[ChannelPnl] = Field(alias="channelPnl")
    revenue_trend: list[MonthlyRevenuePoint] = Field(alias="revenueTrend")
    daily_breakdown: list[DailyPnlRow] = Field(alias="dailyBreakdown")

    model_config = {"populate_by_name": True}


# ============================================================
# SKU temperature
# ============================================================


class TemperatureItem(BaseModel):
    """Sales momentum for one SKU."""

    sku: str
    product: str
    category: str
    trend: str
    this_week: int = Field(alias="thisWeek")
    last_week: int = Field(alias="lastWeek")
    sold_mtd: int = Field(alias="soldMtd")
    mtd_revenue: float = Field(alias="mtdRevenue")
    sold_lm: int = Field(alias="soldLm")
    lm_revenue: float = Field(alias="lmRevenue")
    mtd_vs_lm: float = Field(alias="mtdVsLm")

    model_config = {"populate_by_name": True}


class TemperatureStats(BaseModel):
    """Trend counts over the filtered SKU set."""

    hot: int = 0
    rising: int = 0
    falling: int = 0
    dead: int = 0
    total_skus: int = Field(alias="totalSkus", default=0)

    model_config = {"populate_by_name": True}


class TemperatureResponse(BaseModel):
    """Response payload for GET /api/dashboard/sku-temperature."""

    stats: TemperatureStats
    items: list[TemperatureItem]


# ============================================================
# Reorder queue
# ============================================================


class ReorderSku(BaseModel):
    """Reorder signal for one SKU."""

    sku: str
    product: str
    grade: str
    category: str
    urgency: str
    on_hand: int = Field(alias="onHand")
    raw_on_hand: int = Field(alias="rawOnHand")
    days_left: float = Field(alias="daysLeft")
    velocity: float
    sold_lw: int = Field(alias="soldLw")
    sold_prior_week: int = Field(alias="soldPriorWeek")
    sold_lw_delta: int = Field(alias="soldLwDelta")
    sold_mtd: int = Field(alias="soldMtd")
    mtd_revenue: float = Field(alias="mtdRevenue")
    last_month: int = Field(alias="lastMonth")
    smly: int
    smly_delta: int = Field(alias="smlyDelta")
    avg_cost: float = Field(alias="avgCost")
    max_buy: float = Field(alias="maxBuy")
    reorder_qty: int = Field(alias="reorderQty")
    capital: float

    model_config = {"populate_by_name": True}


class ReorderFamily(BaseModel):
    """Reorder rollup across the grades of one product family."""

    product_family: str = Field(alias="productFamily")
    product: str
    urgency: str
    on_hand: int = Field(alias="onHand")
    days_left: float = Field(alias="daysLeft")
    velocity: float
    sold_lw: int = Field(alias="soldLw")
    sold_prior_week: int = Field(alias="soldPriorWeek")
    sold_lw_delta: int = Field(alias="soldLwDelta")
    sold_mtd: int = Field(alias="soldMtd")
    mtd_revenue: float = Field(alias="mtdRevenue")
    last_month: int = Field(alias="lastMonth")
    smly: int
    smly_delta: int = Field(alias="smlyDelta")
    avg_cost: float = Field(alias="avgCost")
    max_buy: float = Field(alias="maxBuy")
    reorder_qty: int = Field(alias="reorderQty")
    capital: float
    skus: list[ReorderSku]

    model_config = {"populate_by_name": True}


class ReorderStats(BaseModel):
    """Family counts per urgency tier plus purchase totals."""

    critical: int = 0
    urgent: int = 0
    low: int = 0
    total_reorder_qty: int = Field(alias="totalReorderQty", default=0)
    est_purchase_cost: float = Field(alias="estPurchaseCost", default=0)

    model_config = {"populate_by_name": True}


class ReorderResponse(BaseModel):
    """Response payload for GET /api/dashboard/reorder-queue."""

    target_margin: float = Field(alias="targetMargin")
    stats: ReorderStats
    families: list[ReorderFamily]

    model_config = {"populate_by_name": True}


# ============================================================
# Reprice queue
# ============================================================


class RepriceItem(BaseModel):
    """Stale-pricing candidate."""

    sku: str
    product: str
    category: str
    status: str
    qty: int
    avg_price: float | None = Field(alias="avgPrice", default=None)
    cost: float
    pace: int
    sold_mtd: int = Field(alias="soldMtd")
    sold_lm: int = Field(alias="soldLm")
    capital: int
    break_even: float = Field(alias="breakEven")
    wholesale_floor: float = Field(alias="wholesaleFloor")
    current_margin: float = Field(alias="currentMargin")

    model_config = {"populate_by_name": True}


class RepriceStats(BaseModel):
    """Dead / slow counts and the capital tied up in them."""

    dead_skus: int = Field(alias="deadSkus", default=0)
    dead_capital: int = Field(alias="deadCapital", default=0)
    slow_movers: int = Field(alias="slowMovers", default=0)
    slow_capital: int = Field(alias="slowCapital", default=0)
    total_at_risk: int = Field(alias="totalAtRisk", default=0)

    model_config = {"populate_by_name": True}


class RepriceResponse(BaseModel):
    """Response payload for GET /api/dashboard/reprice-queue."""

    stats: RepriceStats
    items: list[RepriceItem]
