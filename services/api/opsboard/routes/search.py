"""Search endpoints.

GET /api/search?q=...     - SKUs matching code or display name
GET /api/product/{sku}    - product detail
"""

from fastapi import APIRouter, Depends, Query

from opsboard.schemas import ProductDetail, SearchResult
from opsboard.services.search import get_product_detail, global_search
from opsboard.stores.analytics import AnalyticsStore, get_analytics_store

router = APIRouter()


@router.get("/search", response_model=list[SearchResult])
async def search(
    q: str | None = Query(default=None, description="SKU or product name fragment (2+ characters)"),
    store: AnalyticsStore = Depends(get_analytics_store),
) -> list[SearchResult]:
    """Search SKUs; short queries return an empty list."""
    return await global_search(store, q)


@router.get("/product/{sku}", response_model=ProductDetail)
async def product_detail(
    sku: str,
    store: AnalyticsStore = Depends(get_analytics_store),
) -> ProductDetail:
    return await get_product_detail(store, sku)
