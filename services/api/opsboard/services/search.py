"""Global search and product detail.

Search matches SKUs from inventory and sales history by SKU or display
name and tells, per hit, which operational screens currently list it.
The screen checks reuse each view's own eligibility rules so a search hit
never disagrees with the screen it links to.
"""

import asyncio
from datetime import date, timedelta

from opsboard.schemas import DailyHistoryPoint, ProductDetail, RecentOrder, SearchResult
from opsboard.services.clock import business_today
from opsboard.services.inventory import in_inventory_view
from opsboard.services.metrics import (
    average_price,
    days_left,
    health_bucket,
    inventory_days_left,
    round_half_up,
    temperature_trend,
    velocity,
)
from opsboard.services.reorder import reorder_urgency
from opsboard.services.reprice import reprice_candidate_status
from opsboard.services.sku import parse_sku
from opsboard.services.temperature import in_temperature_view
from opsboard.services.windows import compute_windows
from opsboard.stores.analytics import AnalyticsStore, InventoryRow, SkuSums

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 25
HISTORY_DAYS = 30
RECENT_ORDERS_LIMIT = 10

SCREEN_REORDER = "Reorder"
SCREEN_TEMPERATURE = "Temperature"
SCREEN_REPRICE = "Reprice"
SCREEN_INVENTORY = "Inventory"

_EMPTY = SkuSums()


def screens_for(
    sku: str,
    inv: InventoryRow | None,
    mtd_qty: int,
    last_month_qty: int,
    day_of_month: int,
) -> list[str]:
    """Screens on which the SKU currently appears, in navigation order."""
    parsed = parse_sku(sku)
    screens: list[str] = []
    if inv is not None and reorder_urgency(parsed, inv.available, mtd_qty, day_of_month):
        screens.append(SCREEN_REORDER)
    if in_temperature_view(parsed.grade, mtd_qty, last_month_qty):
        screens.append(SCREEN_TEMPERATURE)
    if inv is not None and reprice_candidate_status(parsed, inv.available, mtd_qty, last_month_qty, day_of_month):
        screens.append(SCREEN_REPRICE)
    if inv is not None and in_inventory_view(parsed):
        screens.append(SCREEN_INVENTORY)
    return screens


async def global_search(store: AnalyticsStore, q: str | None, today: date | None = None) -> list[SearchResult]:
    """Search SKUs by SKU code or display name.

    Args:
        store: Aggregate read store.
        q: Query text; fewer than 2 non-blank characters returns [].
        today: Reference day (business today when None).

    Returns:
        Up to 25 results ordered by MTD units, then available units,
        highest first.
    """
    needle = (q or "").strip().lower()
    if len(needle) < MIN_QUERY_LENGTH:
        return []

    w = compute_windows(today or business_today())

    inventory, sales_skus, mtd, last_month, names = await asyncio.gather(
        store.inventory_snapshot(),
        store.sales_skus(),
        store.sums_by_sku_in_range(w.month_start, w.today),
        store.sums_by_sku_in_range(w.last_month_start, w.last_month_end),
        store.display_names(),
    )
    by_sku = {row.sku: row for row in inventory}

    matches: list[str] = []
    for sku in dict.fromkeys([*by_sku, *sorted(sales_skus)]):
        inv = by_sku.get(sku)
        name = names.get(sku) or (inv.product_name if inv else None) or ""
        if needle in sku.lower() or needle in name.lower():
            matches.append(sku)

    def rank(sku: str) -> tuple[int, int]:
        inv = by_sku.get(sku)
        return (-mtd.get(sku, _EMPTY).qty, -(inv.available if inv else 0))

    results: list[SearchResult] = []
    for sku in sorted(matches, key=rank)[:MAX_RESULTS]:
        inv = by_sku.get(sku)
        parsed = parse_sku(sku)
        m = mtd.get(sku, _EMPTY)
        lm = last_month.get(sku, _EMPTY)
        available = inv.available if inv else 0
        v = velocity(m.qty, w.day_of_month)

        results.append(
            SearchResult(
                sku=sku,
                display_name=names.get(sku) or (inv.product_name if inv else None) or sku,
                category=(inv.category if inv else None) or parsed.category,
                grade=parsed.grade,
                available=available,
                sold_mtd=m.qty,
                sold_lm=lm.qty,
                velocity=round_half_up(v, 2),
                days_left=int(round_half_up(days_left(available, v))),
                health=health_bucket(v, m.qty, inventory_days_left(available, v)),
                temperature=temperature_trend(m.qty, lm.qty, w.day_of_month, w.days_in_last_month),
                cost=inv.cost if inv else 0.0,
                rev_mtd=m.revenue,
                screens=screens_for(sku, inv, m.qty, lm.qty, w.day_of_month),
                in_inventory=inv is not None,
            )
        )

    return results


async def get_product_detail(store: AnalyticsStore, sku: str, today: date | None = None) -> ProductDetail:
    """Facts, recent history and orders for one SKU.

    Unknown SKUs still resolve: inventory fields are zero and the name
    falls back to the SKU itself.
    """
    w = compute_windows(today or business_today())

    inv, mtd, last_month, history, orders, cached_name = await asyncio.gather(
        store.inventory_row(sku),
        store.sku_sums_in_range(sku, w.month_start, w.today),
        store.sku_sums_in_range(sku, w.last_month_start, w.last_month_end),
        store.daily_history(sku, w.today - timedelta(days=HISTORY_DAYS)),
        store.orders_matching_sku(sku, limit=RECENT_ORDERS_LIMIT),
        store.display_name(sku),
    )

    parsed = parse_sku(sku)
    available = max(0, inv.available) if inv else 0
    v = velocity(mtd.qty, w.day_of_month)

    return ProductDetail(
        sku=sku,
        display_name=cached_name or (inv.product_name if inv else None) or sku,
        category=(inv.category if inv else None) or parsed.category,
        grade=parsed.grade,
        bucket=(inv.bucket if inv else None) or parsed.bucket,
        in_inventory=inv is not None,
        warehouse=inv.warehouse if inv else None,
        last_received=(inv.last_received or None) if inv else None,
        available=available,
        physical=inv.physical if inv else 0,
        reserved=inv.reserved if inv else 0,
        cost=inv.cost if inv else 0.0,
        list_price=inv.list_price if inv else 0.0,
        site_price=inv.site_price if inv else 0.0,
        value=inv.value if inv else 0.0,
        velocity=round_half_up(v, 2),
        days_left=int(round_half_up(days_left(available, v))),
        sold_mtd=mtd.qty,
        rev_mtd=mtd.revenue,
        sold_lm=last_month.qty,
        rev_lm=last_month.revenue,
        avg_price=round_half_up(average_price(mtd.revenue, mtd.qty), 2),
        daily_history=[
            DailyHistoryPoint(day=point.day, qty=point.qty, revenue=point.revenue)
            for point in history
        ],
        recent_orders=[
            RecentOrder(
                order_id=order.order_id,
                ship_date=order.ship_date,
                channel=order.channel,
                revenue=order.revenue,
                profit=order.profit,
                qty=order.qty,
            )
            for order in orders
        ],
    )
