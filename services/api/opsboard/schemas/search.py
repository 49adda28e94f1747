"""Schemas for global search (/api/search) and product detail (/api/product/{sku})."""

from datetime import date

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """One SKU match with its operational signals."""

    sku: str
    display_name: str = Field(alias="displayName")
    category: str
    grade: str
    available: int
    sold_mtd: int = Field(alias="soldMtd")
    sold_lm: int = Field(alias="soldLm")
    velocity: float
    days_left: int = Field(alias="daysLeft")
    health: str
    temperature: str
    cost: float
    rev_mtd: float = Field(alias="revMtd")
    screens: list[str] = Field(default_factory=list)
    in_inventory: bool = Field(alias="inInventory")

    model_config = {"populate_by_name": True}


class DailyHistoryPoint(BaseModel):
    """Units/revenue shipped on one day."""

    day: date = Field(alias="date")
    qty: int
    revenue: float

    model_config = {"populate_by_name": True}


class RecentOrder(BaseModel):
    """Order line whose id references the SKU."""

    order_id: str = Field(alias="orderId")
    ship_date: date = Field(alias="shipDate")
    channel: str
    revenue: float
    profit: float
    qty: int

    model_config = {"populate_by_name": True}


class ProductDetail(BaseModel):
    """Response payload for GET /api/product/{sku}."""

    sku: str
    display_name: str = Field(alias="displayName")
    category: str
    grade: str
    bucket: str
    in_inventory: bool = Field(alias="inInventory")
    warehouse: str | None = None
    last_received: str | None = Field(alias="lastReceived", default=None)

    available: int
    physical: int
    reserved: int
    cost: float
    list_price: float = Field(alias="listPrice")
    site_price: float = Field(alias="sitePrice")
    value: float

    velocity: float
    days_left: int = Field(alias="daysLeft")
    sold_mtd: int = Field(alias="soldMtd")
    rev_mtd: float = Field(alias="revMtd")
    sold_lm: int = Field(alias="soldLm")
    rev_lm: float = Field(alias="revLm")
    avg_price: float = Field(alias="avgPrice")

    daily_history: list[DailyHistoryPoint] = Field(alias="dailyHistory", default_factory=list)
    recent_orders: list[RecentOrder] = Field(alias="recentOrders", default_factory=list)

    model_config = {"populate_by_name": True}
