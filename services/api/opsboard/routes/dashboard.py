"""Dashboard endpoints.

GET /api/dashboard/daily-pulse                     - MTD KPIs, sparkline, trend, comparisons
GET /api/dashboard/daily-pulse/channel-breakdown   - MTD channel P&L lines
GET /api/dashboard/pnl                             - P&L view
GET /api/dashboard/sku-temperature                 - sales momentum per SKU
GET /api/dashboard/reorder-queue                   - reorder families by urgency
GET /api/dashboard/reprice-queue                   - dead / slow stock

Routers are thin: call services for business logic.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query

from opsboard.schemas import (
    ChannelPnl,
    DailyPulseResponse,
    PnlResponse,
    ReorderResponse,
    RepriceResponse,
    TemperatureResponse,
)
from opsboard.services.pulse import get_channel_breakdown, get_daily_pulse, get_pnl
from opsboard.services.reorder import get_reorder_queue
from opsboard.services.reprice import get_reprice_queue
from opsboard.services.temperature import get_sku_temperature
from opsboard.stores.analytics import AnalyticsStore, get_analytics_store

router = APIRouter()

CategoryFilter = Literal["All", "Phone", "Tablet", "Laptop", "Accessory"]


@router.get("/daily-pulse", response_model=DailyPulseResponse)
async def daily_pulse(store: AnalyticsStore = Depends(get_analytics_store)) -> DailyPulseResponse:
    return await get_daily_pulse(store)


@router.get("/daily-pulse/channel-breakdown", response_model=list[ChannelPnl])
async def daily_pulse_channel_breakdown(
    store: AnalyticsStore = Depends(get_analytics_store),
) -> list[ChannelPnl]:
    return await get_channel_breakdown(store)


@router.get("/pnl", response_model=PnlResponse)
async def pnl(store: AnalyticsStore = Depends(get_analytics_store)) -> PnlResponse:
    return await get_pnl(store)


@router.get("/sku-temperature", response_model=TemperatureResponse)
async def sku_temperature(
    category: CategoryFilter | None = Query(default=None, description="Category filter"),
    search: str | None = Query(default=None, description="Substring of SKU or product name"),
    store: AnalyticsStore = Depends(get_analytics_store),
) -> TemperatureResponse:
    """SKUs sold this month or last month with their trend."""
    return await get_sku_temperature(store, category=category, search=search)


@router.get("/reorder-queue", response_model=ReorderResponse)
async def reorder_queue(
    target_margin: float | None = Query(
        default=None,
        alias="targetMargin",
        ge=0,
        lt=100,
        description="Target margin in percent (e.g. 20)",
    ),
    store: AnalyticsStore = Depends(get_analytics_store),
) -> ReorderResponse:
    """Product families that will run out within two weeks."""
    return await get_reorder_queue(store, target_margin=target_margin)


@router.get("/reprice-queue", response_model=RepriceResponse)
async def reprice_queue(store: AnalyticsStore = Depends(get_analytics_store)) -> RepriceResponse:
    return await get_reprice_queue(store)
