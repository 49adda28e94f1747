"""Metrics engine: velocity, runway, health, urgency, temperature, reprice.

Inputs per SKU are windowed aggregates (MTD, last month, trailing weeks,
SMLY) plus the inventory snapshot. Every function is pure and total:
zero denominators resolve to explicit sentinels, never exceptions.

Two runway policies coexist on purpose and must stay distinct:
- days_left():           zero velocity -> 999 (reorder, temperature, search, detail)
- inventory_days_left(): available <= 0 -> 0, else as days_left() (inventory health)

Two pace formulas coexist as well:
- pace_pct():         last-month rate uses the real length of last month (temperature)
- reprice_pace_pct(): last-month rate uses a flat 30 days (reprice queue)
"""

import math

from opsboard.services.sku import FAILED_GRADES

# Sentinels
DAYS_LEFT_SENTINEL = 999
PACE_SENTINEL = 999

# Runway thresholds (days)
CRITICAL_DAYS = 2
URGENT_DAYS = 5
LOW_DAYS = 14
OVERSTOCK_DAYS = 120

# Momentum thresholds (percent of last month's pace)
HOT_PACE_PCT = 150
FALLING_PACE_PCT = 50
SLOW_PACE_PCT = 30
HOT_MIN_UNITS = 10

# Pricing
FEE_RATE = 0.15  # blended marketplace fees
WHOLESALE_MARKUP = 1.05
REPRICE_MONTH_DAYS = 30
REORDER_TARGET_DAYS = 30

# Health buckets, worst first
HEALTH_DEAD = "dead"
HEALTH_CRITICAL = "critical"
HEALTH_LOW = "low"
HEALTH_HEALTHY = "healthy"
HEALTH_OVERSTOCKED = "overstocked"
HEALTH_ORDER: tuple[str, ...] = (
    HEALTH_DEAD,
    HEALTH_CRITICAL,
    HEALTH_LOW,
    HEALTH_HEALTHY,
    HEALTH_OVERSTOCKED,
)

# Reorder urgency tiers, worst first
URGENCY_CRITICAL = "CRITICAL"
URGENCY_URGENT = "URGENT"
URGENCY_LOW = "LOW"
URGENCY_ORDER: tuple[str, ...] = (URGENCY_CRITICAL, URGENCY_URGENT, URGENCY_LOW)

# Temperature trends, in display order
TREND_HOT = "HOT"
TREND_RISING = "RISING"
TREND_FALLING = "FALLING"
TREND_DEAD = "DEAD"
TREND_STABLE = "STABLE"
TREND_ORDER: dict[str, int] = {
    TREND_HOT: 0,
    TREND_RISING: 1,
    TREND_FALLING: 2,
    TREND_DEAD: 3,
    TREND_STABLE: 4,
}

# Reprice statuses
REPRICE_DEAD = "DEAD"
REPRICE_SLOW = "SLOW"


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves toward positive infinity, like Math.round.

    Python's round() is banker's rounding; displayed dashboard numbers use
    half-up so 2.5 -> 3 and -2.5 -> -2.
    """
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


# ============================================================
# Velocity and runway
# ============================================================


def velocity(mtd_qty: float, day_of_month: int) -> float:
    """Units sold per day, month-to-date basis. day_of_month is floored at 1."""
    return mtd_qty / max(day_of_month, 1)


def days_left(available: float, velocity_per_day: float) -> float:
    """Days of stock at current velocity; 999 when nothing is selling."""
    if velocity_per_day > 0:
        return available / velocity_per_day
    return DAYS_LEFT_SENTINEL


def inventory_days_left(available: float, velocity_per_day: float) -> float:
    """Inventory-view runway: out-of-stock (available <= 0) is 0 days, not 999."""
    if available <= 0:
        return 0
    return days_left(available, velocity_per_day)


def health_bucket(velocity_per_day: float, mtd_qty: float, runway_days: float) -> str:
    """Inventory health bucket.

    Precedence: dead (no MTD sales) short-circuits before any runway check,
    then critical (<=5d), low (<=14d), overstocked (>120d), healthy.
    """
    if velocity_per_day == 0 and mtd_qty == 0:
        return HEALTH_DEAD
    if runway_days <= URGENT_DAYS:
        return HEALTH_CRITICAL
    if runway_days <= LOW_DAYS:
        return HEALTH_LOW
    if runway_days > OVERSTOCK_DAYS:
        return HEALTH_OVERSTOCKED
    return HEALTH_HEALTHY


def urgency_tier(velocity_per_day: float, runway_days: float) -> str | None:
    """Reorder urgency, or None when the SKU does not belong in the reorder queue."""
    if velocity_per_day <= 0 or runway_days > LOW_DAYS:
        return None
    if runway_days <= CRITICAL_DAYS:
        return URGENCY_CRITICAL
    if runway_days <= URGENT_DAYS:
        return URGENCY_URGENT
    return URGENCY_LOW


# ============================================================
# Momentum
# ============================================================


def daily_rate(qty: float, days: int) -> float:
    """Units per day over a window; 0 for an empty window."""
    return qty / days if days > 0 else 0.0


def pace_pct(
    mtd_qty: float,
    day_of_month: int,
    last_month_qty: float,
    days_in_last_month: int,
) -> float:
    """MTD daily rate as a percent of last month's daily rate.

    Returns 999 when last month sold nothing but this month did, 0 when
    neither sold.
    """
    last_month_rate = daily_rate(last_month_qty, days_in_last_month)
    if last_month_rate > 0:
        return daily_rate(mtd_qty, max(day_of_month, 1)) / last_month_rate * 100
    return PACE_SENTINEL if mtd_qty > 0 else 0


def temperature_trend(
    mtd_qty: float,
    last_month_qty: float,
    day_of_month: int,
    days_in_last_month: int,
) -> str:
    """Sales momentum: DEAD, HOT, RISING, FALLING or STABLE."""
    if mtd_qty == 0 and last_month_qty > 0:
        return TREND_DEAD

    if daily_rate(last_month_qty, days_in_last_month) > 0:
        pace = pace_pct(mtd_qty, day_of_month, last_month_qty, days_in_last_month)
        if pace > HOT_PACE_PCT and mtd_qty > HOT_MIN_UNITS:
            return TREND_HOT
        if pace > HOT_PACE_PCT:
            return TREND_RISING
        if pace < FALLING_PACE_PCT:
            return TREND_FALLING
    return TREND_STABLE


def mtd_vs_last_month(
    mtd_qty: float,
    last_month_qty: float,
    day_of_month: int,
    days_in_last_month: int,
) -> float:
    """Pace delta versus last month in percent points (pace - 100)."""
    if last_month_qty > 0:
        return pace_pct(mtd_qty, day_of_month, last_month_qty, days_in_last_month) - 100
    return 100 if mtd_qty > 0 else 0


def reprice_pace_pct(mtd_qty: float, last_month_qty: float, day_of_month: int) -> float:
    """Reprice-queue pace: MTD units vs. expected units from a flat 30-day month."""
    expected_mtd = last_month_qty / REPRICE_MONTH_DAYS * max(day_of_month, 1)
    if expected_mtd > 0:
        return mtd_qty / expected_mtd * 100
    return 100 if mtd_qty > 0 else 0


def reprice_status(
    available: float,
    mtd_qty: float,
    last_month_qty: float,
    pace: float,
) -> str | None:
    """DEAD / SLOW for stale stock, None when the SKU is not a reprice candidate."""
    if available <= 0:
        return None
    if mtd_qty == 0:
        return REPRICE_DEAD
    if pace < SLOW_PACE_PCT and last_month_qty > 0:
        return REPRICE_SLOW
    return None


# ============================================================
# Money
# ============================================================


def reorder_quantity(velocity_per_day: float, available: float) -> int:
    """Units to buy for a month of runway at current velocity (never negative)."""
    return max(0, int(round_half_up(velocity_per_day * REORDER_TARGET_DAYS - available)))


def average_price(revenue: float, qty: float) -> float:
    """Average selling price; 0 when nothing sold."""
    return revenue / qty if qty > 0 else 0.0


def max_buy_price(avg_sell_price: float, target_margin_pct: float) -> float:
    """Highest unit cost that still leaves the target margin."""
    return avg_sell_price * (1 - target_margin_pct / 100)


def break_even_price(cost: float) -> float:
    """Sell price that exactly covers cost after marketplace fees."""
    return cost / (1 - FEE_RATE) if cost > 0 else 0.0


def wholesale_floor(cost: float) -> float:
    """Minimum acceptable wholesale price."""
    return cost * WHOLESALE_MARKUP if cost > 0 else 0.0


def net_margin_pct(price: float, cost: float) -> float:
    """Margin after cost and blended fees, percent of price."""
    if price <= 0:
        return 0.0
    return (price - cost - price * FEE_RATE) / price * 100


def capital_tied_up(available: float, cost: float) -> float:
    """Inventory value at cost, floored at 0 for negative stock anomalies."""
    return max(0.0, available * cost)


def pct_change(current: float, prior: float) -> float:
    """Percent change vs prior; prior 0 -> 100 if current > 0 else 0."""
    if prior == 0:
        return 100 if current > 0 else 0
    return (current - prior) / abs(prior) * 100


# ============================================================
# Merging
# ============================================================


def worst_health(a: str, b: str) -> str:
    """More severe of two health buckets."""
    return a if HEALTH_ORDER.index(a) <= HEALTH_ORDER.index(b) else b


def worst_urgency(a: str, b: str) -> str:
    """More urgent of two reorder tiers."""
    return a if URGENCY_ORDER.index(a) <= URGENCY_ORDER.index(b) else b


def is_excluded_grade(grade: str) -> bool:
    """Failed/scrap grades (XF, XC) never appear in operational views."""
    return grade in FAILED_GRADES
