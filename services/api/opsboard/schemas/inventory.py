"""Schemas for the inventory browser (/api/inventory)."""

from pydantic import BaseModel, Field


class InventorySku(BaseModel):
    """Stock health for one SKU."""

    sku: str
    product: str
    grade: str
    category: str
    health: str
    available: int
    raw_available: int = Field(alias="rawAvailable")
    capital: int
    velocity: float
    days_left: int = Field(alias="daysLeft")
    sold_mtd: int = Field(alias="soldMtd")
    rev_mtd: int = Field(alias="revMtd")
    cost: float

    model_config = {"populate_by_name": True}


class InventoryFamily(BaseModel):
    """Stock health rolled up across the grades of one product family."""

    product_family: str = Field(alias="productFamily")
    product: str
    category: str
    health: str
    available: int
    capital: int
    velocity: float
    days_left: int = Field(alias="daysLeft")
    sold_mtd: int = Field(alias="soldMtd")
    rev_mtd: int = Field(alias="revMtd")
    skus: list[InventorySku]

    model_config = {"populate_by_name": True}


class InventoryStats(BaseModel):
    """SKU counts per health bucket."""

    dead: int = 0
    critical: int = 0
    low: int = 0
    healthy: int = 0
    overstocked: int = 0


class InventoryResponse(BaseModel):
    """Response payload for GET /api/inventory."""

    stats: InventoryStats
    families: list[InventoryFamily]
