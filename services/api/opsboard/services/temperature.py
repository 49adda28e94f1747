"""SKU temperature: month-over-month sales momentum per SKU.

Covers every SKU that sold this month or last month. Trend precedence is
DEAD, then HOT / RISING / FALLING against last month's daily pace, else
STABLE. Items are ordered HOT, RISING, FALLING, DEAD, STABLE and then by
MTD units, highest first.
"""

import asyncio
from datetime import date

from opsboard.schemas import TemperatureItem, TemperatureResponse, TemperatureStats
from opsboard.services.clock import business_today
from opsboard.services.metrics import (
    TREND_DEAD,
    TREND_FALLING,
    TREND_HOT,
    TREND_ORDER,
    TREND_RISING,
    is_excluded_grade,
    mtd_vs_last_month,
    round_half_up,
    temperature_trend,
)
from opsboard.services.sku import parse_sku
from opsboard.services.windows import compute_windows
from opsboard.stores.analytics import AnalyticsStore, SkuSums

CATEGORY_ALL = "All"

_EMPTY = SkuSums()


def in_temperature_view(grade: str, mtd_qty: int, last_month_qty: int) -> bool:
    """True when a SKU shows up on the temperature screen (before filters)."""
    if is_excluded_grade(grade):
        return False
    return mtd_qty > 0 or last_month_qty > 0


def matches_filters(sku: str, name: str, category: str, want_category: str | None, search: str | None) -> bool:
    """Category equality (unless All) and case-insensitive substring on SKU or name."""
    if want_category and want_category != CATEGORY_ALL and category != want_category:
        return False
    if search:
        needle = search.lower()
        if needle not in name.lower() and needle not in sku.lower():
            return False
    return True


def temperature_stats(items: list[TemperatureItem]) -> TemperatureStats:
    """Trend counts over the filtered item list."""
    return TemperatureStats(
        hot=sum(1 for i in items if i.trend == TREND_HOT),
        rising=sum(1 for i in items if i.trend == TREND_RISING),
        falling=sum(1 for i in items if i.trend == TREND_FALLING),
        dead=sum(1 for i in items if i.trend == TREND_DEAD),
        total_skus=len(items),
    )


async def get_sku_temperature(
    store: AnalyticsStore,
    category: str | None = None,
    search: str | None = None,
    today: date | None = None,
) -> TemperatureResponse:
    """Build the SKU temperature view.

    Args:
        store: Aggregate read store.
        category: Category filter (None or "All" disables it).
        search: Substring filter on SKU or display name.
        today: Reference day (business today when None).

    Returns:
        TemperatureResponse with stats over the filtered items.
    """
    w = compute_windows(today or business_today())

    mtd, last_month, this_week, last_week, names = await asyncio.gather(
        store.sums_by_sku_in_range(w.month_start, w.today),
        store.sums_by_sku_in_range(w.last_month_start, w.last_month_end),
        store.sums_by_sku_in_range(w.this_week_start, w.today),
        store.sums_by_sku_in_range(w.last_week_start, w.last_week_end),
        store.display_names(),
    )

    items: list[TemperatureItem] = []
    for sku in dict.fromkeys([*mtd, *last_month]):
        m = mtd.get(sku, _EMPTY)
        lm = last_month.get(sku, _EMPTY)
        parsed = parse_sku(sku)
        if not in_temperature_view(parsed.grade, m.qty, lm.qty):
            continue

        name = names.get(sku) or m.product_name or sku
        if not matches_filters(sku, name, parsed.category, category, search):
            continue

        items.append(
            TemperatureItem(
                sku=sku,
                product=name,
                category=parsed.category,
                trend=temperature_trend(m.qty, lm.qty, w.day_of_month, w.days_in_last_month),
                this_week=this_week.get(sku, _EMPTY).qty,
                last_week=last_week.get(sku, _EMPTY).qty,
                sold_mtd=m.qty,
                mtd_revenue=m.revenue,
                sold_lm=lm.qty,
                lm_revenue=lm.revenue,
                mtd_vs_lm=round_half_up(
                    mtd_vs_last_month(m.qty, lm.qty, w.day_of_month, w.days_in_last_month),
                    1,
                ),
            )
        )

    stats = temperature_stats(items)
    items.sort(key=lambda i: (TREND_ORDER.get(i.trend, len(TREND_ORDER)), -i.sold_mtd))

    return TemperatureResponse(stats=stats, items=items)
