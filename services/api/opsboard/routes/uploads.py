"""Report ingestion and data management endpoints.

POST /api/upload                   - import one XLSX export (multipart "file")
GET  /api/data-status              - row counts per report table
POST /api/clear-table              - empty one report table
POST /api/fetch-email              - import report attachments from the mailbox
POST /api/refresh-product-names    - rebuild the display-name cache

In production, consider adding authentication (API key or admin token).
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from opsboard.routes import errors
from opsboard.routes.errors import ApiError
from opsboard.schemas import (
    ClearTableRequest,
    DataStatusResponse,
    EmailFetchResult,
    ErrorResponse,
    RefreshNamesResponse,
    SuccessResponse,
    UploadResponse,
)
from opsboard.services.email_pipeline import EmailNotConfiguredError, fetch_email_reports
from opsboard.services.ingestion import ImportInProgressError, UnknownReportTypeError, import_report
from opsboard.services.parsers import ReportParseError
from opsboard.services.product_names import refresh_product_names
from opsboard.settings import get_settings
from opsboard.stores import imports
from opsboard.stores.analytics import AnalyticsStore, get_analytics_store

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


def _too_large(size: int, max_bytes: int) -> ApiError:
    return ApiError(
        413,
        errors.FILE_TOO_LARGE,
        f"File exceeds the {max_bytes} byte upload limit",
        detail={"size": size, "limit": max_bytes},
    )


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
)
async def upload_report(
    file: UploadFile | None = File(default=None),
    store: AnalyticsStore = Depends(get_analytics_store),
) -> UploadResponse:
    """Import one report export.

    The report type is detected from the file name.

    Raises:
        ApiError: 400 for a missing file, unknown report type or unreadable
            workbook, 413 when the file is too large, 409 when the same
            report type is already being imported.
    """
    if file is None or not file.filename:
        raise ApiError(400, errors.NO_FILE, "No file uploaded")

    max_bytes = get_settings().upload_max_bytes
    if file.size is not None and file.size > max_bytes:
        raise _too_large(file.size, max_bytes)
    content = await file.read()
    if len(content) > max_bytes:
        raise _too_large(len(content), max_bytes)

    try:
        result = await import_report(content, file.filename, store=store)
    except UnknownReportTypeError as e:
        raise ApiError(400, errors.UNKNOWN_REPORT_TYPE, str(e))
    except ReportParseError as e:
        raise ApiError(400, errors.UNREADABLE_WORKBOOK, str(e))
    except ImportInProgressError as e:
        raise ApiError(409, errors.IMPORT_IN_PROGRESS, str(e))

    return UploadResponse(**result.model_dump())


@router.get("/data-status", response_model=DataStatusResponse)
async def data_status() -> DataStatusResponse:
    counts = await imports.table_counts()
    return DataStatusResponse(**counts)


@router.post("/clear-table", response_model=SuccessResponse, responses={400: {"model": ErrorResponse}})
async def clear_table(request: ClearTableRequest) -> SuccessResponse:
    """Delete every row of one report table."""
    if request.table not in imports.CLEARABLE_TABLES:
        raise ApiError(
            400,
            errors.INVALID_TABLE,
            "Invalid table name",
            detail={"allowed": list(imports.CLEARABLE_TABLES)},
        )
    await imports.clear_table(request.table)
    logger.info("[ingest] Cleared table %s", request.table)
    return SuccessResponse()


@router.post("/fetch-email", response_model=EmailFetchResult, responses={400: {"model": ErrorResponse}})
async def fetch_email(store: AnalyticsStore = Depends(get_analytics_store)) -> EmailFetchResult:
    """Scan the mailbox (last 3 days) and import report attachments."""
    try:
        return await fetch_email_reports(store=store)
    except EmailNotConfiguredError as e:
        raise ApiError(400, errors.EMAIL_NOT_CONFIGURED, str(e))


@router.post("/refresh-product-names", response_model=RefreshNamesResponse)
async def refresh_names(store: AnalyticsStore = Depends(get_analytics_store)) -> RefreshNamesResponse:
    count = await refresh_product_names(store)
    return RefreshNamesResponse(count=count)
