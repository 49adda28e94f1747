"""Product-family rollups.

SKUs that differ only by grade share a product family. The reorder queue
and the inventory browser show one row per family with its SKUs nested
underneath; the family row merges them:

- counts, units and capital are summed
- urgency / health take the worst SKU value
- daysLeft takes the minimum
- the display name comes from the SKU that sold the most this month
  (first one wins on ties)

A family with a single SKU reproduces that SKU's numbers exactly.
"""

from collections.abc import Sequence
from typing import TypeVar

from opsboard.schemas import InventoryFamily, InventorySku, ReorderFamily, ReorderSku
from opsboard.services.metrics import (
    average_price,
    max_buy_price,
    round_half_up,
    worst_health,
    worst_urgency,
)

_Row = TypeVar("_Row", ReorderSku, InventorySku)


def best_seller(skus: Sequence[_Row]) -> _Row:
    """SKU with the highest MTD units; the earliest one wins ties."""
    best = skus[0]
    for sku in skus[1:]:
        if sku.sold_mtd > best.sold_mtd:
            best = sku
    return best


def week_delta_pct(current: int, prior: int) -> int:
    """Whole-percent change vs a prior window; 0 when the prior window is empty."""
    if prior <= 0:
        return 0
    return int(round_half_up((current - prior) / prior * 100))


def capital_weighted_cost(skus: Sequence[ReorderSku]) -> float:
    """Average unit cost weighted by on-hand units.

    Falls back to the first SKU with a non-zero cost when nothing is on hand.
    """
    on_hand = sum(sku.on_hand for sku in skus)
    if on_hand > 0:
        total_cost = sum(sku.avg_cost * max(0, sku.on_hand) for sku in skus)
        return round_half_up(total_cost / on_hand, 2)
    for sku in skus:
        if sku.avg_cost > 0:
            return sku.avg_cost
    return 0.0


def rollup_reorder_family(
    product_family: str,
    skus: Sequence[ReorderSku],
    target_margin: float,
) -> ReorderFamily:
    """Merge the reorder rows of one family.

    Args:
        product_family: Family key (SKU without grade).
        skus: Non-empty list of SKU rows, in inventory order.
        target_margin: Target margin in percent, for the family max buy price.

    Returns:
        ReorderFamily with the SKU rows nested.
    """
    sold_lw = sum(sku.sold_lw for sku in skus)
    sold_prior_week = sum(sku.sold_prior_week for sku in skus)
    sold_mtd = sum(sku.sold_mtd for sku in skus)
    mtd_revenue = sum(sku.mtd_revenue for sku in skus)
    smly = sum(sku.smly for sku in skus)

    urgency = skus[0].urgency
    for sku in skus[1:]:
        urgency = worst_urgency(urgency, sku.urgency)

    avg_sell = average_price(mtd_revenue, sold_mtd)

    return ReorderFamily(
        product_family=product_family,
        product=best_seller(skus).product,
        urgency=urgency,
        on_hand=sum(sku.on_hand for sku in skus),
        days_left=min(sku.days_left for sku in skus),
        velocity=round_half_up(sum(sku.velocity for sku in skus), 2),
        sold_lw=sold_lw,
        sold_prior_week=sold_prior_week,
        sold_lw_delta=week_delta_pct(sold_lw, sold_prior_week),
        sold_mtd=sold_mtd,
        mtd_revenue=round_half_up(mtd_revenue, 2),
        last_month=sum(sku.last_month for sku in skus),
        smly=smly,
        smly_delta=week_delta_pct(sold_mtd, smly),
        avg_cost=capital_weighted_cost(skus),
        max_buy=round_half_up(max_buy_price(avg_sell, target_margin), 2),
        reorder_qty=sum(sku.reorder_qty for sku in skus),
        capital=round_half_up(sum(sku.capital for sku in skus), 2),
        skus=list(skus),
    )


def rollup_inventory_family(product_family: str, skus: Sequence[InventorySku]) -> InventoryFamily:
    """Merge the inventory rows of one family.

    Health is seeded from the first SKU, so a family is never reported
    healthier than all of its members.
    """
    health = skus[0].health
    for sku in skus[1:]:
        health = worst_health(health, sku.health)

    return InventoryFamily(
        product_family=product_family,
        product=best_seller(skus).product,
        category=skus[0].category,
        health=health,
        available=sum(sku.available for sku in skus),
        capital=sum(sku.capital for sku in skus),
        velocity=round_half_up(sum(sku.velocity for sku in skus), 2),
        days_left=min(sku.days_left for sku in skus),
        sold_mtd=sum(sku.sold_mtd for sku in skus),
        rev_mtd=sum(sku.rev_mtd for sku in skus),
        skus=list(skus),
    )
