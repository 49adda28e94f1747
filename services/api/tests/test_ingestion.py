"""Tests for the report import flow (storage and locks faked)."""

import io
from datetime import date, datetime

import pandas as pd
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from opsboard.services import ingestion
from opsboard.services.ingestion import ImportInProgressError, UnknownReportTypeError, import_report
from opsboard.services.parsers import ReportParseError
from opsboard.stores import imports
from opsboard.stores import redis as redis_store
from opsboard.stores.imports import UpsertResult

from tests.conftest import FakeStore


def daily_sales_workbook() -> bytes:
    buffer = io.BytesIO()
    pd.DataFrame(
        [
            {"Ship Date": datetime(2024, 3, 5), "SKU": "PA-A-CA", "Qty Sold": 2, "SubTotal": 200},
            {"Ship Date": datetime(2024, 3, 6), "SKU": "PA-B-CA", "Qty Sold": 1, "SubTotal": 90},
        ]
    ).to_excel(buffer, index=False)
    return buffer.getvalue()


@pytest.fixture
def saved(monkeypatch: pytest.MonkeyPatch) -> list[list[dict]]:
    batches: list[list[dict]] = []

    async def fake_upsert(rows: list[dict]) -> UpsertResult:
        batches.append(rows)
        return UpsertResult(inserted=len(rows) - 1, updated=1)

    monkeypatch.setattr(imports, "upsert_daily_sales", fake_upsert)
    return batches


@pytest.fixture
def refreshed(monkeypatch: pytest.MonkeyPatch) -> list[object]:
    calls: list[object] = []

    async def fake_refresh(store) -> int:
        calls.append(store)
        return 0

    monkeypatch.setattr(ingestion, "refresh_product_names", fake_refresh)
    return calls


@pytest.mark.asyncio
async def test_import_daily_sales(saved, refreshed, today: date):
    store = FakeStore()
    result = await import_report(daily_sales_workbook(), "Product_Quantity_Sold.xlsx", store=store, today=today)

    assert result.report_type == "daily_sales"
    assert result.total_parsed == 2
    assert result.inserted == 1
    assert result.updated == 1
    assert result.unchanged == 0
    assert result.date_range == "2024-03-05 to 2024-03-06"
    assert len(saved[0]) == 2
    assert refreshed == [store]


@pytest.mark.asyncio
async def test_refresh_can_be_skipped(saved, refreshed, today: date):
    await import_report(daily_sales_workbook(), "Product_Quantity_Sold.xlsx", store=FakeStore(), refresh_names=False)
    assert refreshed == []


@pytest.mark.asyncio
async def test_failed_name_refresh_does_not_fail_import(saved, monkeypatch: pytest.MonkeyPatch, today: date):
    async def broken_refresh(store) -> int:
        raise RuntimeError("db down")

    monkeypatch.setattr(ingestion, "refresh_product_names", broken_refresh)

    result = await import_report(daily_sales_workbook(), "Product_Quantity_Sold.xlsx", store=FakeStore(), today=today)
    assert result.total_parsed == 2


@pytest.mark.asyncio
async def test_unknown_report_type():
    with pytest.raises(UnknownReportTypeError, match="Cannot detect report type from filename: notes.xlsx"):
        await import_report(b"", "notes.xlsx")


@pytest.mark.asyncio
async def test_unreadable_workbook(saved, refreshed):
    with pytest.raises(ReportParseError):
        await import_report(b"garbage", "Product_Quantity_Sold.xlsx", store=FakeStore())
    assert saved == []
    assert refreshed == []


@pytest.mark.asyncio
async def test_locked_report_type(saved, monkeypatch: pytest.MonkeyPatch):
    async def locked(key: str, ttl: int = 0) -> bool:
        assert key == "import:daily_sales"
        return False

    monkeypatch.setattr(ingestion, "try_acquire_lock", locked)

    with pytest.raises(ImportInProgressError):
        await import_report(daily_sales_workbook(), "Product_Quantity_Sold.xlsx", store=FakeStore())
    assert saved == []


@pytest.mark.asyncio
async def test_lock_released_after_import(saved, refreshed, monkeypatch: pytest.MonkeyPatch):
    released: list[str] = []

    async def acquired(key: str, ttl: int = 0) -> bool:
        return True

    async def release(key: str) -> None:
        released.append(key)

    monkeypatch.setattr(ingestion, "try_acquire_lock", acquired)
    monkeypatch.setattr(ingestion, "try_release_lock", release)

    await import_report(daily_sales_workbook(), "Product_Quantity_Sold.xlsx", store=FakeStore())
    assert released == ["import:daily_sales"]


class FlakyRedis:
    """Redis client whose lock commands fail after startup."""

    def __init__(self, set_fails: bool = True):
        self.set_fails = set_fails
        self.deleted: list[str] = []

    async def set(self, key: str, value: str, nx: bool = False, ex: int | None = None):
        if self.set_fails:
            raise RedisConnectionError("Connection refused")
        return True

    async def delete(self, key: str) -> int:
        self.deleted.append(key)
        raise RedisConnectionError("Connection refused")


@pytest.mark.asyncio
async def test_import_runs_unlocked_when_redis_drops(saved, refreshed, monkeypatch: pytest.MonkeyPatch, today: date):
    monkeypatch.setattr(redis_store, "_client", FlakyRedis())

    result = await import_report(daily_sales_workbook(), "Product_Quantity_Sold.xlsx", store=FakeStore(), today=today)

    assert result.total_parsed == 2
    assert len(saved) == 1


@pytest.mark.asyncio
async def test_failed_lock_release_keeps_import_result(saved, refreshed, monkeypatch: pytest.MonkeyPatch, today: date):
    client = FlakyRedis(set_fails=False)
    monkeypatch.setattr(redis_store, "_client", client)

    result = await import_report(daily_sales_workbook(), "Product_Quantity_Sold.xlsx", store=FakeStore(), today=today)

    assert result.inserted == 1
    assert client.deleted == ["lock:import:daily_sales"]
