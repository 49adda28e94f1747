"""Display-name cache rebuild.

Every SKU known from inventory or sales gets exactly one display name:
the inventory product name wins over the sales product name, which wins
over a name reconstructed from SKU tokens.
"""

import logging

from opsboard.services.sku import build_name_from_sku
from opsboard.stores import imports
from opsboard.stores.analytics import AnalyticsStore

logger = logging.getLogger("uvicorn.error")

SOURCE_INVENTORY = "inventory"
SOURCE_SALES = "sales"
SOURCE_PARSED = "parsed"


def resolve_display_names(
    inventory_names: dict[str, str | None],
    sales_names: dict[str, str | None],
) -> list[dict[str, str]]:
    """Pick the best name per SKU.

    Args:
        inventory_names: SKU -> product name from the inventory snapshot.
        sales_names: SKU -> product name from daily sales.

    Returns:
        Rows for the product_names table, inventory SKUs first.
    """
    rows: list[dict[str, str]] = []
    for sku in dict.fromkeys([*inventory_names, *sales_names]):
        inventory_name = (inventory_names.get(sku) or "").strip()
        sales_name = (sales_names.get(sku) or "").strip()
        if inventory_name:
            name, source = inventory_name, SOURCE_INVENTORY
        elif sales_name:
            name, source = sales_name, SOURCE_SALES
        else:
            name, source = build_name_from_sku(sku), SOURCE_PARSED
        rows.append({"sku": sku, "display_name": name, "name_source": source})
    return rows


async def refresh_product_names(store: AnalyticsStore) -> int:
    """Rebuild the product_names table from current inventory and sales.

    Returns:
        Number of cached names.
    """
    inventory_names, sales_names = await store.product_name_sources()
    rows = resolve_display_names(inventory_names, sales_names)
    count = await imports.replace_product_names(rows)
    logger.info("[names] Rebuilt %s display names", count)
    return count
