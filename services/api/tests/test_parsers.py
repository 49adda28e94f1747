"""Tests for XLSX report parsing and cell coercion."""

import io
from datetime import date, datetime
from decimal import Decimal

import pandas as pd
import pytest

from opsboard.services.parsers import (
    NO_DATE_RANGE,
    ReportParseError,
    ReportType,
    channel_metrics,
    detect_report_type,
    parse_channel_sales,
    parse_daily_sales,
    parse_inventory,
    parse_order_pnl,
    to_date,
    to_int,
    to_money,
    to_text,
)


def workbook(rows: list[dict]) -> bytes:
    """In-memory single-sheet XLSX."""
    buffer = io.BytesIO()
    pd.DataFrame(rows).to_excel(buffer, index=False)
    return buffer.getvalue()


# ============================================================
# Report type detection
# ============================================================


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("Product_Quantity_Sold_2024-03-10.xlsx", ReportType.DAILY_SALES),
        ("Quantity Sold By Product By Day.xlsx", ReportType.DAILY_SALES),
        ("Profit_By_Order_Detail 2024-05.xlsx", ReportType.ORDER_PNL),
        ("Inventory-By-Product-Detail.xlsx", ReportType.INVENTORY),
        ("inventory product detail report.xls", ReportType.INVENTORY),
        ("ProductQtyByChannelDetail.xlsx", ReportType.CHANNEL_SALES),
        ("quarterly_summary.xlsx", ReportType.UNKNOWN),
        ("", ReportType.UNKNOWN),
    ],
)
def test_detect_report_type(filename: str, expected: ReportType):
    assert detect_report_type(filename) == expected


# ============================================================
# Cell coercion
# ============================================================


def test_to_text():
    assert to_text(None) == ""
    assert to_text(float("nan")) == ""
    assert to_text(12345.0) == "12345"
    assert to_text("  PA-BLU-64-CA ") == "PA-BLU-64-CA"


def test_to_money():
    assert to_money("$1,234.567") == Decimal("1234.57")
    assert to_money(10.005) == Decimal("10.01")
    assert to_money(7) == Decimal("7.00")
    assert to_money("n/a") == Decimal("0.00")
    assert to_money(None) == Decimal("0.00")


def test_to_int():
    assert to_int("12.7") == 12
    assert to_int(12.5) == 13
    assert to_int("1,200 units") == 1200
    assert to_int("abc") == 0
    assert to_int(None) == 0


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (datetime(2024, 3, 5, 14, 30), date(2024, 3, 5)),
        (date(2024, 3, 5), date(2024, 3, 5)),
        (pd.Timestamp("2024-03-05 08:00"), date(2024, 3, 5)),
        (45356, date(2024, 3, 5)),
        ("2024-03-05", date(2024, 3, 5)),
        ("2024-03-05T10:00:00", date(2024, 3, 5)),
        ("3/5/2024", date(2024, 3, 5)),
        ("3/5/24", date(2024, 3, 5)),
        ("March 5, 2024", date(2024, 3, 5)),
        ("13/45/2024", None),
        ("not a date", None),
        ("", None),
        (None, None),
    ],
)
def test_to_date(value, expected):
    assert to_date(value) == expected


# ============================================================
# Parsers
# ============================================================


def test_unreadable_workbook_raises():
    with pytest.raises(ReportParseError):
        parse_daily_sales(b"this is not a spreadsheet")


def test_parse_daily_sales_merges_and_drops_keyless_rows():
    content = workbook(
        [
            {"Ship Date": datetime(2024, 3, 5), "SKU": "PA-BLU-64-CA", "Product Name": "iPhone 11 Blue",
             "Orders": 1, "Qty Sold": 2, "SubTotal": 100.5, "Total Sales": 107.5, "Available Qty": 3},
            {"Ship Date": datetime(2024, 3, 5), "SKU": "PA-BLU-64-CA", "Product Name": "iPhone 11 Blue",
             "Orders": 1, "Qty Sold": 1, "SubTotal": 50, "Total Sales": 53.5, "Available Qty": 3},
            {"Ship Date": "03/06/2024", "SKU": "PA-RED-128-CA", "Product Name": "iPhone 11 Red",
             "Orders": 2, "Qty Sold": 2, "SubTotal": "$1,000.00", "Total Sales": "1070", "Available Qty": 0},
            {"Ship Date": datetime(2024, 3, 7), "SKU": None, "Product Name": "orphan",
             "Orders": 1, "Qty Sold": 1, "SubTotal": 10, "Total Sales": 10, "Available Qty": 0},
            {"Ship Date": None, "SKU": "PA-BLU-64-CA", "Product Name": "undated",
             "Orders": 1, "Qty Sold": 1, "SubTotal": 10, "Total Sales": 10, "Available Qty": 0},
        ]
    )

    parsed = parse_daily_sales(content)
    by_sku = {row["sku"]: row for row in parsed.rows}

    assert len(parsed.rows) == 2
    blue = by_sku["PA-BLU-64-CA"]
    assert blue["ship_date"] == date(2024, 3, 5)
    assert blue["orders"] == 2
    assert blue["qty_sold"] == 3
    assert blue["subtotal"] == Decimal("150.50")
    assert blue["total_sales"] == Decimal("161.00")
    assert by_sku["PA-RED-128-CA"]["subtotal"] == Decimal("1000.00")
    assert parsed.date_range == "2024-03-05 to 2024-03-06"


def test_parse_daily_sales_without_rows_has_no_date_range():
    content = workbook([{"Ship Date": None, "SKU": None, "Qty Sold": 1}])
    parsed = parse_daily_sales(content)
    assert parsed.rows == []
    assert parsed.date_range == NO_DATE_RANGE


def test_parse_order_pnl_maps_channels():
    content = workbook(
        [
            {"Order #": "SO-1", "Order Date": datetime(2024, 3, 4), "Ship Date": datetime(2024, 3, 5),
             "Channel": "Website", "Company": "Reebelo Inc", "Qty": 1, "Grand Total": 300,
             "Accrual Profit": 40, "Total Fees": 30},
            {"Order #": "SO-2", "Order Date": None, "Ship Date": datetime(2024, 3, 6),
             "Channel": "eBayOrder", "Company": None, "Qty": 2, "Grand Total": "$250.00",
             "Accrual Profit": -5, "Total Fees": 25},
            {"Order #": None, "Order Date": None, "Ship Date": datetime(2024, 3, 6),
             "Channel": "Amazon", "Company": None, "Qty": 1, "Grand Total": 10,
             "Accrual Profit": 1, "Total Fees": 1},
        ]
    )

    parsed = parse_order_pnl(content)

    assert [row["order_id"] for row in parsed.rows] == ["SO-1", "SO-2"]
    first, second = parsed.rows
    assert first["channel"] == "Rebello"
    assert first["channel_raw"] == "Website"
    assert first["grand_total"] == Decimal("300.00")
    assert first["commission"] == Decimal("0.00")
    assert second["channel"] == "eBay"
    assert second["order_date"] is None
    assert second["accrual_profit"] == Decimal("-5.00")
    assert parsed.date_range == "2024-03-05 to 2024-03-06"


def test_parse_inventory_keeps_tracked_warehouse_only(today: date):
    content = workbook(
        [
            {"Warehouse": "AW Main", "SKU": "PA-BLU-64-CA", "Product Name": "iPhone 11 Blue",
             "Physical": 5, "Reserved": 1, "Available": 4, "Cost": 100, "Value": 500,
             "List Price": 199, "Site Price": 189, "Last Received": datetime(2024, 3, 1, 9, 0)},
            {"Warehouse": "Returns", "SKU": "PA-BLU-64-SD", "Product Name": "iPhone 11 Blue",
             "Physical": 2, "Reserved": 0, "Available": 2, "Cost": 80, "Value": 160,
             "List Price": 149, "Site Price": 139, "Last Received": None},
            {"Warehouse": "AW Main", "SKU": "LA-MBA-256-INTAKE", "Product Name": None,
             "Physical": 1, "Reserved": 0, "Available": 1, "Cost": 300, "Value": 300,
             "List Price": 0, "Site Price": 0, "Last Received": None},
        ]
    )

    parsed = parse_inventory(content, today, warehouse="AW Main")

    assert [row["sku"] for row in parsed.rows] == ["PA-BLU-64-CA", "LA-MBA-256-INTAKE"]
    blue, intake = parsed.rows
    assert blue["last_received"] == "2024-03-01"
    assert blue["category"] == "Phone"
    assert blue["product_family"] == "PA-BLU-64"
    assert blue["snapshot_date"] == today
    assert blue["site_price"] == Decimal("189.00")
    assert intake["bucket"] == "intake"
    assert intake["last_received"] == ""
    assert parsed.date_range is None


def test_channel_metrics_omits_idle_channels():
    raw = {
        "Amazon_Units": 2,
        "Amazon_Orders": 1,
        "Amazon_Sales": "$200.00",
        "eBayOrder_Units": 0,
        "eBayOrder_Orders": 0,
        "eBayOrder_Sales": 0,
        "FBA_Units": 0,
        "FBA_Orders": 1,
    }
    assert channel_metrics(raw) == {
        "Amazon": {"units": 2, "orders": 1, "sales": 200.0},
        "FBA": {"units": 0, "orders": 1, "sales": 0.0},
    }


def test_parse_channel_sales(today: date):
    content = workbook(
        [
            {"Product": "PA-BLU-64-CA", "ProductName": "iPhone 11 Blue", "TotalUnits": 3, "TotalOrders": 2,
             "TotalSales": 450, "Amazon_Units": 3, "Amazon_Orders": 2, "Amazon_Sales": 450},
            {"Product": None, "ProductName": "blank", "TotalUnits": 1, "TotalOrders": 1,
             "TotalSales": 1, "Amazon_Units": 1, "Amazon_Orders": 1, "Amazon_Sales": 1},
        ]
    )

    parsed = parse_channel_sales(content, today)

    assert len(parsed.rows) == 1
    row = parsed.rows[0]
    assert row["report_date"] == today
    assert row["total_sales"] == Decimal("450.00")
    assert row["channel_data"] == {"Amazon": {"units": 3, "orders": 2, "sales": 450.0}}
