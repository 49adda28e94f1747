"""Inventory endpoints.

GET /api/inventory - stock health per SKU, rolled up by product family.
"""

from fastapi import APIRouter, Depends, Query

from opsboard.routes.dashboard import CategoryFilter
from opsboard.schemas import InventoryResponse
from opsboard.services.inventory import get_inventory
from opsboard.stores.analytics import AnalyticsStore, get_analytics_store

router = APIRouter()


@router.get("", response_model=InventoryResponse)
async def inventory(
    active_only: bool = Query(
        default=True,
        alias="activeOnly",
        description="Hide SKUs with no sales this month or last month",
    ),
    category: CategoryFilter | None = Query(default=None, description="Category filter"),
    search: str | None = Query(default=None, description="Substring of SKU or product name"),
    store: AnalyticsStore = Depends(get_analytics_store),
) -> InventoryResponse:
    """Get the inventory browser.

    Returns:
        InventoryResponse with health counts and families sorted by days left.
    """
    return await get_inventory(store, active_only=active_only, category=category, search=search)
