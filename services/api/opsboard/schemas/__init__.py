"""Pydantic schemas for API request/response validation."""

from opsboard.schemas.common import ErrorDetail, ErrorResponse, SuccessResponse
from opsboard.schemas.dashboard import (
    ChannelPnl,
    ComparisonRow,
    DailyPnlRow,
    DailyPulseResponse,
    DailyRevenuePoint,
    MonthlyRevenuePoint,
    PnlKpis,
    PnlResponse,
    PulseKpis,
    ReorderFamily,
    ReorderResponse,
    ReorderSku,
    ReorderStats,
    RepriceItem,
    RepriceResponse,
    RepriceStats,
    TemperatureItem,
    TemperatureResponse,
    TemperatureStats,
)
from opsboard.schemas.inventory import (
    InventoryFamily,
    InventoryResponse,
    InventorySku,
    InventoryStats,
)
from opsboard.schemas.search import (
    DailyHistoryPoint,
    ProductDetail,
    RecentOrder,
    SearchResult,
)
from opsboard.schemas.uploads import (
    ClearTableRequest,
    DataStatusResponse,
    EmailFetchResult,
    EmailReportResult,
    ImportResult,
    RefreshNamesResponse,
    UploadResponse,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "SuccessResponse",
    "ChannelPnl",
    "ComparisonRow",
    "DailyPnlRow",
    "DailyPulseResponse",
    "DailyRevenuePoint",
    "MonthlyRevenuePoint",
    "PnlKpis",
    "PnlResponse",
    "PulseKpis",
    "ReorderFamily",
    "ReorderResponse",
    "ReorderSku",
    "ReorderStats",
    "RepriceItem",
    "RepriceResponse",
    "RepriceStats",
    "TemperatureItem",
    "TemperatureResponse",
    "TemperatureStats",
    "InventoryFamily",
    "InventoryResponse",
    "InventorySku",
    "InventoryStats",
    "DailyHistoryPoint",
    "ProductDetail",
    "RecentOrder",
    "SearchResult",
    "ClearTableRequest",
    "DataStatusResponse",
    "EmailFetchResult",
    "EmailReportResult",
    "ImportResult",
    "RefreshNamesResponse",
    "UploadResponse",
]
