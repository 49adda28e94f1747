"""Report import: detect, parse, persist.

Used by the upload endpoint and the email pipeline. One import per report
type runs at a time when Redis is available (lock key "import:<type>").
After a successful import the display-name cache is rebuilt; a failed
rebuild is logged and never fails the import itself.
"""

import asyncio
import logging
from datetime import date

from opsboard.schemas import ImportResult
from opsboard.services import parsers
from opsboard.services.clock import business_today
from opsboard.services.parsers import ParsedReport, ReportType
from opsboard.services.product_names import refresh_product_names
from opsboard.stores import imports
from opsboard.stores.analytics import AnalyticsStore, get_analytics_store
from opsboard.stores.redis import TTL_IMPORT_LOCK, try_acquire_lock, try_release_lock

logger = logging.getLogger("uvicorn.error")


class UnknownReportTypeError(ValueError):
    """Raised when the file name matches no known report export."""

    def __init__(self, filename: str):
        super().__init__(f"Cannot detect report type from filename: {filename}")
        self.filename = filename


class ImportInProgressError(RuntimeError):
    """Raised when another import of the same report type holds the lock."""

    def __init__(self, report_type: str):
        super().__init__(f"An import of {report_type} is already running")
        self.report_type = report_type


def _parse(report_type: ReportType, content: bytes, today: date) -> ParsedReport:
    if report_type == ReportType.DAILY_SALES:
        return parsers.parse_daily_sales(content)
    if report_type == ReportType.ORDER_PNL:
        return parsers.parse_order_pnl(content)
    if report_type == ReportType.INVENTORY:
        return parsers.parse_inventory(content, today)
    return parsers.parse_channel_sales(content, today)


async def _persist(report_type: ReportType, rows: list[dict]) -> imports.UpsertResult:
    if report_type == ReportType.DAILY_SALES:
        return await imports.upsert_daily_sales(rows)
    if report_type == ReportType.ORDER_PNL:
        return await imports.upsert_order_pnl(rows)
    if report_type == ReportType.INVENTORY:
        return await imports.replace_inventory(rows)
    return await imports.upsert_channel_sales(rows)


async def refresh_names_quietly(store: AnalyticsStore) -> None:
    """Rebuild display names, logging instead of raising on failure."""
    try:
        await refresh_product_names(store)
    except Exception:
        logger.exception("[names] Product names refresh failed")


async def import_report(
    content: bytes,
    filename: str,
    store: AnalyticsStore | None = None,
    today: date | None = None,
    refresh_names: bool = True,
) -> ImportResult:
    """Import one report workbook.

    Args:
        content: Raw workbook bytes.
        filename: Original file name (drives report type detection).
        store: Read store used for the name-cache rebuild.
        today: Snapshot / report date for inventory and channel rows.
        refresh_names: Rebuild the display-name cache afterwards.

    Returns:
        ImportResult with row accounting and, for dated reports, the date range.

    Raises:
        UnknownReportTypeError: File name matches no report.
        ImportInProgressError: Same report type is being imported elsewhere.
        ReportParseError: Workbook cannot be read.
    """
    report_type = parsers.detect_report_type(filename)
    if report_type == ReportType.UNKNOWN:
        raise UnknownReportTypeError(filename)

    lock_key = f"import:{report_type.value}"
    acquired = await try_acquire_lock(lock_key, ttl=TTL_IMPORT_LOCK)
    if acquired is False:
        raise ImportInProgressError(report_type.value)

    try:
        parsed = await asyncio.to_thread(_parse, report_type, content, today or business_today())
        counts = await _persist(report_type, parsed.rows)
    finally:
        if acquired:
            await try_release_lock(lock_key)

    logger.info(
        "[ingest] %s (%s): %s parsed, %s inserted, %s updated",
        filename,
        report_type.value,
        len(parsed.rows),
        counts.inserted,
        counts.updated,
    )

    if refresh_names:
        await refresh_names_quietly(store or get_analytics_store())

    return ImportResult(
        report_type=report_type.value,
        inserted=counts.inserted,
        updated=counts.updated,
        unchanged=counts.unchanged,
        total_parsed=len(parsed.rows),
        date_range=parsed.date_range,
    )
