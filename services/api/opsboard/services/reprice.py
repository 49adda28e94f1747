"""Reprice queue: in-stock SKUs whose price has gone stale.

DEAD: nothing sold this month (whatever last month did).
SLOW: sold last month but running below 30% of last month's pace, where
pace uses a flat 30-day month.

Every other SKU is left out. Items are ordered by capital tied up,
largest first.
"""

import asyncio
import logging
from datetime import date

from opsboard.schemas import RepriceItem, RepriceResponse, RepriceStats
from opsboard.services.clock import business_today
from opsboard.services.metrics import (
    REPRICE_DEAD,
    REPRICE_SLOW,
    average_price,
    break_even_price,
    capital_tied_up,
    is_excluded_grade,
    net_margin_pct,
    reprice_pace_pct,
    reprice_status,
    round_half_up,
    wholesale_floor,
)
from opsboard.services.sku import BUCKET_FAILED, BUCKET_INTAKE, ParsedSku, parse_sku
from opsboard.services.windows import compute_windows
from opsboard.stores.analytics import AnalyticsStore, InventoryRow, SkuSums

logger = logging.getLogger("uvicorn.error")

_EMPTY = SkuSums()


def reprice_candidate_status(
    parsed: ParsedSku,
    available: int,
    mtd_qty: int,
    last_month_qty: int,
    day_of_month: int,
) -> str | None:
    """DEAD / SLOW for an inventory SKU, or None when it is not in the reprice queue."""
    if parsed.bucket in (BUCKET_FAILED, BUCKET_INTAKE) or is_excluded_grade(parsed.grade):
        return None
    pace = reprice_pace_pct(mtd_qty, last_month_qty, day_of_month)
    return reprice_status(available, mtd_qty, last_month_qty, pace)


def reference_price(inv: InventoryRow, mtd: SkuSums, last_month: SkuSums) -> float | None:
    """Best price estimate: MTD average, last-month average, site price, list price."""
    if mtd.qty > 0:
        return average_price(mtd.revenue, mtd.qty)
    if last_month.qty > 0:
        return average_price(last_month.revenue, last_month.qty)
    if inv.site_price > 0:
        return inv.site_price
    if inv.list_price > 0:
        return inv.list_price
    return None


def stock_capital(available: int, cost: float) -> float:
    """Capital at cost; SKUs without a cost count as zero."""
    return capital_tied_up(available, cost) if cost > 0 else 0.0


async def get_reprice_queue(store: AnalyticsStore, today: date | None = None) -> RepriceResponse:
    """Build the reprice queue.

    Args:
        store: Aggregate read store.
        today: Reference day (business today when None).

    Returns:
        RepriceResponse sorted by capital descending.
    """
    w = compute_windows(today or business_today())

    inventory, mtd, last_month, names = await asyncio.gather(
        store.inventory_snapshot(),
        store.sums_by_sku_in_range(w.month_start, w.today),
        store.sums_by_sku_in_range(w.last_month_start, w.last_month_end),
        store.display_names(),
    )

    items: list[RepriceItem] = []
    dead_skus = slow_movers = 0
    dead_capital = slow_capital = 0.0

    for inv in inventory:
        parsed = parse_sku(inv.sku)
        m = mtd.get(inv.sku, _EMPTY)
        lm = last_month.get(inv.sku, _EMPTY)

        status = reprice_candidate_status(parsed, inv.available, m.qty, lm.qty, w.day_of_month)
        if status is None:
            continue

        capital = stock_capital(inv.available, inv.cost)
        if status == REPRICE_DEAD:
            dead_skus += 1
            dead_capital += capital
        elif status == REPRICE_SLOW:
            slow_movers += 1
            slow_capital += capital

        price = reference_price(inv, m, lm)

        items.append(
            RepriceItem(
                sku=inv.sku,
                product=names.get(inv.sku) or inv.product_name or inv.sku,
                category=parsed.category,
                status=status,
                qty=inv.available,
                avg_price=round_half_up(price, 2) if price is not None else None,
                cost=inv.cost,
                pace=int(round_half_up(reprice_pace_pct(m.qty, lm.qty, w.day_of_month))),
                sold_mtd=m.qty,
                sold_lm=lm.qty,
                capital=int(round_half_up(capital)),
                break_even=round_half_up(break_even_price(inv.cost), 2),
                wholesale_floor=round_half_up(wholesale_floor(inv.cost), 2),
                current_margin=round_half_up(net_margin_pct(price or 0.0, inv.cost), 2),
            )
        )

    items.sort(key=lambda i: -i.capital)
    logger.debug("[reprice] %s dead, %s slow", dead_skus, slow_movers)

    return RepriceResponse(
        stats=RepriceStats(
            dead_skus=dead_skus,
            dead_capital=int(round_half_up(dead_capital)),
            slow_movers=slow_movers,
            slow_capital=int(round_half_up(slow_capital)),
            total_at_risk=int(round_half_up(dead_capital + slow_capital)),
        ),
        items=items,
    )
