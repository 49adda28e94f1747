"""Inventory browser: stock health per SKU, rolled up by product family.

Health uses the inventory runway policy: out-of-stock rows (available <= 0)
have 0 days left rather than the 999 "not selling" sentinel. Failed stock
(XF / XC) is hidden; intake stock is shown.
"""

import asyncio
from collections import defaultdict
from datetime import date

from opsboard.schemas import InventoryResponse, InventorySku, InventoryStats
from opsboard.services.clock import business_today
from opsboard.services.families import rollup_inventory_family
from opsboard.services.metrics import (
    capital_tied_up,
    health_bucket,
    inventory_days_left,
    is_excluded_grade,
    round_half_up,
    velocity,
)
from opsboard.services.sku import BUCKET_FAILED, ParsedSku, parse_sku
from opsboard.services.temperature import matches_filters
from opsboard.services.windows import compute_windows
from opsboard.stores.analytics import AnalyticsStore, InventoryRow, SkuSums

_EMPTY = SkuSums()


def in_inventory_view(parsed: ParsedSku) -> bool:
    """True unless the SKU is failed/scrap stock."""
    return parsed.bucket != BUCKET_FAILED and not is_excluded_grade(parsed.grade)


def build_inventory_sku(
    inv: InventoryRow,
    parsed: ParsedSku,
    product: str,
    mtd: SkuSums,
    day_of_month: int,
) -> InventorySku:
    """Health row for one inventory SKU."""
    v = velocity(mtd.qty, day_of_month)
    runway = inventory_days_left(inv.available, v)

    return InventorySku(
        sku=inv.sku,
        product=product,
        grade=parsed.grade,
        category=parsed.category,
        health=health_bucket(v, mtd.qty, runway),
        available=max(0, inv.available),
        raw_available=inv.available,
        capital=int(round_half_up(capital_tied_up(inv.available, inv.cost))),
        velocity=round_half_up(v, 2),
        days_left=int(round_half_up(runway)),
        sold_mtd=mtd.qty,
        rev_mtd=int(round_half_up(mtd.revenue)),
        cost=inv.cost,
    )


async def get_inventory(
    store: AnalyticsStore,
    active_only: bool = True,
    category: str | None = None,
    search: str | None = None,
    today: date | None = None,
) -> InventoryResponse:
    """Build the inventory browser.

    Args:
        store: Aggregate read store.
        active_only: Hide SKUs with no sales this month or last month.
        category: Category filter (None or "All" disables it).
        search: Substring filter on SKU or display name.
        today: Reference day (business today when None).

    Returns:
        InventoryResponse with families sorted by ascending daysLeft and
        health counts per SKU.
    """
    w = compute_windows(today or business_today())

    inventory, mtd, last_month, names = await asyncio.gather(
        store.inventory_snapshot(),
        store.sums_by_sku_in_range(w.month_start, w.today),
        store.sums_by_sku_in_range(w.last_month_start, w.last_month_end),
        store.display_names(),
    )

    stats = InventoryStats()
    grouped: dict[str, list[InventorySku]] = defaultdict(list)

    for inv in inventory:
        parsed = parse_sku(inv.sku)
        if not in_inventory_view(parsed):
            continue

        name = names.get(inv.sku) or inv.product_name or inv.sku
        if not matches_filters(inv.sku, name, parsed.category, category, search):
            continue

        m = mtd.get(inv.sku, _EMPTY)
        if active_only and m.qty == 0 and last_month.get(inv.sku, _EMPTY).qty == 0:
            continue

        row = build_inventory_sku(inv, parsed, name, m, w.day_of_month)
        setattr(stats, row.health, getattr(stats, row.health) + 1)
        grouped[parsed.product_family].append(row)

    families = [rollup_inventory_family(family, skus) for family, skus in grouped.items()]
    families.sort(key=lambda f: f.days_left)

    return InventoryResponse(stats=stats, families=families)
