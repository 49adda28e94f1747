"""Reorder queue: sellable SKUs that will run out within two weeks.

Only inventory SKUs with MTD sales qualify (velocity > 0) and only when
their runway is at most 14 days. Failed and intake stock never appears.
Rows are grouped by product family, most urgent (smallest daysLeft) first.
"""

import asyncio
from collections import defaultdict
from datetime import date

from opsboard.schemas import ReorderFamily, ReorderResponse, ReorderSku, ReorderStats
from opsboard.services.clock import business_today
from opsboard.services.families import rollup_reorder_family, week_delta_pct
from opsboard.services.metrics import (
    URGENCY_CRITICAL,
    URGENCY_LOW,
    URGENCY_URGENT,
    average_price,
    capital_tied_up,
    days_left,
    is_excluded_grade,
    max_buy_price,
    reorder_quantity,
    round_half_up,
    urgency_tier,
    velocity,
)
from opsboard.services.sku import BUCKET_FAILED, BUCKET_INTAKE, ParsedSku, parse_sku
from opsboard.services.windows import compute_windows
from opsboard.settings import get_settings
from opsboard.stores.analytics import AnalyticsStore, InventoryRow, SkuSums

_EMPTY = SkuSums()


def reorder_urgency(parsed: ParsedSku, available: int, mtd_qty: int, day_of_month: int) -> str | None:
    """Urgency tier for an inventory SKU, or None when it is not in the reorder queue."""
    if parsed.bucket in (BUCKET_FAILED, BUCKET_INTAKE) or is_excluded_grade(parsed.grade):
        return None
    v = velocity(mtd_qty, day_of_month)
    return urgency_tier(v, days_left(max(0, available), v))


def build_reorder_sku(
    inv: InventoryRow,
    parsed: ParsedSku,
    product: str,
    mtd: SkuSums,
    last_month_qty: int,
    this_week_qty: int,
    last_week_qty: int,
    smly_qty: int,
    day_of_month: int,
    target_margin: float,
) -> ReorderSku | None:
    """Reorder row for one inventory SKU, or None when it does not qualify."""
    urgency = reorder_urgency(parsed, inv.available, mtd.qty, day_of_month)
    if urgency is None:
        return None

    on_hand = max(0, inv.available)
    v = velocity(mtd.qty, day_of_month)
    avg_sell = average_price(mtd.revenue, mtd.qty)

    return ReorderSku(
        sku=inv.sku,
        product=product,
        grade=parsed.grade,
        category=parsed.category,
        urgency=urgency,
        on_hand=on_hand,
        raw_on_hand=inv.available,
        days_left=round_half_up(days_left(on_hand, v), 1),
        velocity=round_half_up(v, 2),
        sold_lw=this_week_qty,
        sold_prior_week=last_week_qty,
        sold_lw_delta=week_delta_pct(this_week_qty, last_week_qty),
        sold_mtd=mtd.qty,
        mtd_revenue=round_half_up(mtd.revenue, 2),
        last_month=last_month_qty,
        smly=smly_qty,
        smly_delta=week_delta_pct(mtd.qty, smly_qty),
        avg_cost=inv.cost,
        max_buy=round_half_up(max_buy_price(avg_sell, target_margin), 2),
        reorder_qty=reorder_quantity(v, on_hand),
        capital=round_half_up(capital_tied_up(on_hand, inv.cost), 2),
    )


def reorder_stats(families: list[ReorderFamily]) -> ReorderStats:
    """Urgency counts and purchase totals over the family list."""
    return ReorderStats(
        critical=sum(1 for f in families if f.urgency == URGENCY_CRITICAL),
        urgent=sum(1 for f in families if f.urgency == URGENCY_URGENT),
        low=sum(1 for f in families if f.urgency == URGENCY_LOW),
        total_reorder_qty=sum(f.reorder_qty for f in families),
        est_purchase_cost=round_half_up(sum(f.reorder_qty * f.avg_cost for f in families)),
    )


async def get_reorder_queue(
    store: AnalyticsStore,
    target_margin: float | None = None,
    today: date | None = None,
) -> ReorderResponse:
    """Build the reorder queue.

    Args:
        store: Aggregate read store.
        target_margin: Target margin in percent for max buy price
            (settings default when None).
        today: Reference day (business today when None).

    Returns:
        ReorderResponse with families sorted by ascending daysLeft.
    """
    if target_margin is None:
        target_margin = get_settings().default_target_margin
    w = compute_windows(today or business_today())

    inventory, mtd, last_month, this_week, last_week, smly, names = await asyncio.gather(
        store.inventory_snapshot(),
        store.sums_by_sku_in_range(w.month_start, w.today),
        store.sums_by_sku_in_range(w.last_month_start, w.last_month_end),
        store.sums_by_sku_in_range(w.this_week_start, w.today),
        store.sums_by_sku_in_range(w.last_week_start, w.last_week_end),
        store.sums_by_sku_in_range(w.smly_start, w.smly_end_capped_28),
        store.display_names(),
    )

    grouped: dict[str, list[ReorderSku]] = defaultdict(list)
    for inv in inventory:
        parsed = parse_sku(inv.sku)
        row = build_reorder_sku(
            inv,
            parsed,
            product=names.get(inv.sku) or inv.product_name or inv.sku,
            mtd=mtd.get(inv.sku, _EMPTY),
            last_month_qty=last_month.get(inv.sku, _EMPTY).qty,
            this_week_qty=this_week.get(inv.sku, _EMPTY).qty,
            last_week_qty=last_week.get(inv.sku, _EMPTY).qty,
            smly_qty=smly.get(inv.sku, _EMPTY).qty,
            day_of_month=w.day_of_month,
            target_margin=target_margin,
        )
        if row is not None:
            grouped[parsed.product_family].append(row)

    families = [
        rollup_reorder_family(family, skus, target_margin)
        for family, skus in grouped.items()
    ]
    families.sort(key=lambda f: f.days_left)

    return ReorderResponse(
        target_margin=target_margin,
        stats=reorder_stats(families),
        families=families,
    )
