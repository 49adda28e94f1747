"""Schemas for report ingestion endpoints (upload, email fetch, data status)."""

from pydantic import BaseModel, Field


class ImportResult(BaseModel):
    """Row accounting for one imported report."""

    report_type: str = Field(alias="type")
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    total_parsed: int = Field(alias="totalParsed", default=0)
    date_range: str | None = Field(alias="dateRange", default=None)

    model_config = {"populate_by_name": True}


class UploadResponse(ImportResult):
    """Response payload for POST /api/upload."""

    success: bool = True


class EmailReportResult(BaseModel):
    """Outcome for one spreadsheet attachment."""

    filename: str
    report_type: str = Field(alias="reportType")
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    total_parsed: int = Field(alias="totalParsed", default=0)
    date_range: str | None = Field(alias="dateRange", default=None)
    error: str | None = None

    model_config = {"populate_by_name": True}


class EmailFetchResult(BaseModel):
    """Response payload for POST /api/fetch-email."""

    success: bool = True
    emails_scanned: int = Field(alias="emailsScanned", default=0)
    reports_imported: int = Field(alias="reportsImported", default=0)
    reports: list[EmailReportResult] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class DataStatusResponse(BaseModel):
    """Row counts per report table (GET /api/data-status)."""

    daily_sales: int = 0
    order_pnl: int = 0
    inventory_current: int = 0
    channel_sales: int = 0


class ClearTableRequest(BaseModel):
    """Request body for POST /api/clear-table."""

    table: str


class RefreshNamesResponse(BaseModel):
    """Response payload for POST /api/refresh-product-names."""

    success: bool = True
    count: int
