"""XLSX report parsers.

Four exports from the order-management system are understood; the report
type is detected from the file name. Each parser reads the first sheet
with pandas and returns plain row dicts keyed by model column names,
ready for the import store.

Cell coercion is forgiving: money and counts strip "," and "$" and fall
back to 0; dates accept datetimes, Excel serial numbers and ISO / US
strings. Rows without their natural key (date, SKU, order #) are dropped.
"""

import io
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any

import pandas as pd
from pydantic import BaseModel

from opsboard.services.sku import map_channel, parse_sku
from opsboard.settings import get_settings


class ReportParseError(Exception):
    """Raised when an upload cannot be read as a spreadsheet."""

    pass


class ReportType(str, Enum):
    """Known report exports."""

    DAILY_SALES = "daily_sales"
    ORDER_PNL = "order_pnl"
    INVENTORY = "inventory"
    CHANNEL_SALES = "channel_sales"
    UNKNOWN = "unknown"


class ChannelCode(str, Enum):
    """Channel column prefixes in the per-channel quantity export."""

    AMAZON = "Amazon"
    BACK_MARKET = "BackMarket"
    EBAY = "eBayOrder"
    FBA = "FBA"
    LOCAL_STORE = "Local_Store"
    NEWEGG = "NewEggdotcom"
    TANGA = "Tanga"
    WALMART = "Walmart_Marketplace"
    WEBSITE = "Website"
    WHOLESALE = "Wholesale"


class ChannelMetrics(BaseModel):
    """Units / orders / sales for one channel on one SKU row."""

    units: int = 0
    orders: int = 0
    sales: float = 0.0


@dataclass
class ParsedReport:
    """Normalized rows plus the shipped-date span they cover."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    date_range: str | None = None


# File-name markers, matched after lowercasing and dropping "_", "-" and spaces
_REPORT_MARKERS: tuple[tuple[ReportType, tuple[str, ...]], ...] = (
    (ReportType.DAILY_SALES, ("productquantitysold", "quantitysoldbyproductbyday", "quantitysoldbyproduct")),
    (ReportType.ORDER_PNL, ("profitbyorderdetail",)),
    (ReportType.INVENTORY, ("inventorybyproductdetail", "inventoryproductdetailreport")),
    (ReportType.CHANNEL_SALES, ("productqtybychanneldetail",)),
)

NO_DATE_RANGE = "none"

_CENTS = Decimal("0.01")
_EXCEL_EPOCH = date(1899, 12, 30)
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_US_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})")


def detect_report_type(filename: str) -> ReportType:
    """Detect the report type from an export file name.

    Example:
        >>> detect_report_type("Profit_By_Order_Detail 2024-05.xlsx")
        <ReportType.ORDER_PNL: 'order_pnl'>
    """
    key = re.sub(r"[_\s-]+", "", (filename or "").lower())
    for report_type, markers in _REPORT_MARKERS:
        if any(marker in key for marker in markers):
            return report_type
    return ReportType.UNKNOWN


# ============================================================
# Cell coercion
# ============================================================


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def to_text(value: Any) -> str:
    """Cell as stripped text; blanks become ""."""
    if _is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def to_money(value: Any) -> Decimal:
    """Cell as a 2-decimal amount; unparseable cells become 0.00."""
    if _is_blank(value) or isinstance(value, bool):
        return Decimal("0.00")
    try:
        if isinstance(value, (int, float)):
            number = Decimal(str(value))
        else:
            number = Decimal(str(value).replace(",", "").replace("$", "").strip())
    except InvalidOperation:
        return Decimal("0.00")
    if not number.is_finite():
        return Decimal("0.00")
    return number.quantize(_CENTS, rounding=ROUND_HALF_UP)


def to_int(value: Any) -> int:
    """Cell as a whole count; numbers round half up, text truncates, junk is 0."""
    if _is_blank(value) or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    match = re.match(r"^\s*([+-]?\d+)", str(value).replace(",", "").replace("$", ""))
    return int(match.group(1)) if match else 0


def to_date(value: Any) -> date | None:
    """Cell as a calendar date, or None when it is not a date."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        try:
            return _EXCEL_EPOCH + timedelta(days=int(value))
        except OverflowError:
            return None

    text = str(value).strip()
    if _ISO_DATE.match(text):
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    us = _US_DATE.match(text)
    if us:
        month, day, year = (int(part) for part in us.groups())
        if year < 100:
            year += 2000
        try:
            return date(year, month, day)
        except ValueError:
            return None

    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def _date_range(days: list[date]) -> str:
    if not days:
        return NO_DATE_RANGE
    return f"{min(days).isoformat()} to {max(days).isoformat()}"


# ============================================================
# Workbook access
# ============================================================


def read_first_sheet(content: bytes) -> Iterator[dict[str, Any]]:
    """Yield the first sheet's rows as {header: cell} dicts.

    Raises:
        ReportParseError: If the bytes are not a readable workbook.
    """
    try:
        frame = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object)
    except Exception as e:
        raise ReportParseError(f"Unreadable workbook: {e}") from e

    frame.columns = [str(col).strip() for col in frame.columns]
    yield from frame.to_dict(orient="records")


# ============================================================
# Report parsers
# ============================================================


def aggregate_daily_sales(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Merge rows sharing (ship_date, sku).

    Orders, units and both money columns are summed; name and available
    quantity come from the first row of each key.
    """
    merged: dict[tuple[date, str], dict[str, Any]] = {}
    for row in rows:
        key = (row["ship_date"], row["sku"])
        existing = merged.get(key)
        if existing is None:
            merged[key] = dict(row)
            continue
        existing["orders"] += row["orders"]
        existing["qty_sold"] += row["qty_sold"]
        existing["subtotal"] += row["subtotal"]
        existing["total_sales"] += row["total_sales"]
    return list(merged.values())


def parse_daily_sales(content: bytes) -> ParsedReport:
    """Parse the quantity-sold-by-product-by-day export."""
    rows: list[dict[str, Any]] = []
    for raw in read_first_sheet(content):
        ship_date = to_date(raw.get("Ship Date"))
        sku = to_text(raw.get("SKU"))
        if ship_date is None or not sku:
            continue
        rows.append(
            {
                "ship_date": ship_date,
                "sku": sku,
                "product_name": to_text(raw.get("Product Name")),
                "orders": to_int(raw.get("Orders")),
                "qty_sold": to_int(raw.get("Qty Sold")),
                "subtotal": to_money(raw.get("SubTotal")),
                "total_sales": to_money(raw.get("Total Sales")),
                "available_qty": to_int(raw.get("Available Qty")),
            }
        )

    return ParsedReport(
        rows=aggregate_daily_sales(rows),
        date_range=_date_range([row["ship_date"] for row in rows]),
    )


_PNL_MONEY_COLUMNS: dict[str, str] = {
    "subtotal": "SubTotal",
    "grand_total": "Grand Total",
    "items_cost": "Items Cost",
    "shipping_cost": "Shipping Cost",
    "commission": "Commission",
    "transaction_fee": "Transaction Fee",
    "posting_fee": "Posting Fee",
    "total_fees": "Total Fees",
    "accrual_profit": "Accrual Profit",
    "cash_profit": "Cash Profit",
    "accrual_margin": "Accrual Profit Margin(%)",
}


def parse_order_pnl(content: bytes) -> ParsedReport:
    """Parse the profit-by-order-detail export."""
    rows: list[dict[str, Any]] = []
    for raw in read_first_sheet(content):
        ship_date = to_date(raw.get("Ship Date"))
        order_id = to_text(raw.get("Order #"))
        if ship_date is None or not order_id:
            continue

        channel_raw = to_text(raw.get("Channel"))
        company = to_text(raw.get("Company"))
        row = {
            "order_id": order_id,
            "order_date": to_date(raw.get("Order Date")),
            "ship_date": ship_date,
            "channel_raw": channel_raw,
            "company": company,
            "channel": map_channel(channel_raw, company),
            "qty": to_int(raw.get("Qty")),
        }
        for column, header in _PNL_MONEY_COLUMNS.items():
            row[column] = to_money(raw.get(header))
        rows.append(row)

    return ParsedReport(rows=rows, date_range=_date_range([row["ship_date"] for row in rows]))


def parse_inventory(content: bytes, today: date, warehouse: str | None = None) -> ParsedReport:
    """Parse the inventory-by-product-detail export.

    Only rows of the tracked warehouse are kept; SKU classification
    columns are filled from parse_sku().
    """
    warehouse = warehouse or get_settings().inventory_warehouse
    rows: list[dict[str, Any]] = []
    for raw in read_first_sheet(content):
        if to_text(raw.get("Warehouse")) != warehouse:
            continue
        sku = to_text(raw.get("SKU"))
        if not sku:
            continue

        parsed = parse_sku(sku)
        received = raw.get("Last Received")
        rows.append(
            {
                "sku": sku,
                "product_name": to_text(raw.get("Product Name")),
                "warehouse": warehouse,
                "physical": to_int(raw.get("Physical")),
                "reserved": to_int(raw.get("Reserved")),
                "available": to_int(raw.get("Available")),
                "cost": to_money(raw.get("Cost")),
                "value": to_money(raw.get("Value")),
                "list_price": to_money(raw.get("List Price")),
                "site_price": to_money(raw.get("Site Price")),
                "last_received": received.date().isoformat() if isinstance(received, datetime) else to_text(received),
                "prefix": parsed.prefix,
                "category": parsed.category,
                "grade": parsed.grade,
                "bucket": parsed.bucket,
                "product_family": parsed.product_family,
                "snapshot_date": today,
            }
        )
    return ParsedReport(rows=rows)


def channel_metrics(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Per-channel metrics of one export row; channels with no units and no orders are omitted."""
    data: dict[str, dict[str, Any]] = {}
    for code in ChannelCode:
        metrics = ChannelMetrics(
            units=to_int(raw.get(f"{code.value}_Units")),
            orders=to_int(raw.get(f"{code.value}_Orders")),
            sales=float(to_money(raw.get(f"{code.value}_Sales"))),
        )
        if metrics.units > 0 or metrics.orders > 0:
            data[code.value] = metrics.model_dump()
    return data


def parse_channel_sales(content: bytes, today: date) -> ParsedReport:
    """Parse the product-qty-by-channel-detail export (stamped with today's date)."""
    rows: list[dict[str, Any]] = []
    for raw in read_first_sheet(content):
        sku = to_text(raw.get("Product"))
        if not sku:
            continue
        rows.append(
            {
                "report_date": today,
                "sku": sku,
                "product_name": to_text(raw.get("ProductName")),
                "total_units": to_int(raw.get("TotalUnits")),
                "total_orders": to_int(raw.get("TotalOrders")),
                "total_sales": to_money(raw.get("TotalSales")),
                "channel_data": channel_metrics(raw),
            }
        )
    return ParsedReport(rows=rows)
