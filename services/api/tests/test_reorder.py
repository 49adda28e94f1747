"""Tests for the reorder queue."""

from datetime import date

import pytest

from opsboard.services.reorder import get_reorder_queue
from opsboard.settings import get_settings

from tests.conftest import FakeStore, SaleLine, inventory_row


@pytest.fixture
def store() -> FakeStore:
    return FakeStore(
        inventory=[
            inventory_row("PA-BLU-64-CA", 3, cost=100.0, product_name="iPhone 11 Blue 64GB"),
            inventory_row("PA-BLU-64-CAB", 0, cost=90.0, product_name="iPhone 11 Blue 64GB (batt)"),
            inventory_row("PA-RED-128-CA", 12, cost=100.0),
            inventory_row("PA-BLU-64-XF", 1),
            inventory_row("LA-MBA-256-INTAKE", 1),
            inventory_row("PA-GRN-64-CA", 1),
            inventory_row("PA-BIG-CA", 100),
        ],
        sales=[
            SaleLine(date(2024, 3, 8), "PA-BLU-64-CA", 10, 1000.0),
            SaleLine(date(2024, 3, 2), "PA-BLU-64-CAB", 5, 400.0),
            SaleLine(date(2024, 3, 5), "PA-RED-128-CA", 10, 500.0),
            SaleLine(date(2024, 3, 5), "PA-BLU-64-XF", 5, 100.0),
            SaleLine(date(2024, 3, 5), "LA-MBA-256-INTAKE", 5, 100.0),
            SaleLine(date(2024, 3, 5), "PA-BIG-CA", 10, 100.0),
            SaleLine(date(2023, 3, 5), "PA-BLU-64-CA", 5, 450.0),
        ],
    )


@pytest.mark.asyncio
async def test_reorder_queue_families_and_order(store: FakeStore, today: date):
    """Families sort by runway and exclude failed, intake and unsold stock."""
    response = await get_reorder_queue(store, target_margin=20, today=today)

    assert [f.product_family for f in response.families] == ["PA-BLU-64", "PA-RED-128"]
    skus = [s.sku for f in response.families for s in f.skus]
    assert "PA-BLU-64-XF" not in skus
    assert "LA-MBA-256-INTAKE" not in skus
    assert "PA-GRN-64-CA" not in skus
    assert "PA-BIG-CA" not in skus


@pytest.mark.asyncio
async def test_reorder_sku_signals(store: FakeStore, today: date):
    response = await get_reorder_queue(store, target_margin=20, today=today)
    blue = response.families[0]
    ca, cab = blue.skus

    assert ca.urgency == "URGENT"
    assert ca.days_left == 3.0
    assert ca.velocity == 1.0
    assert ca.sold_lw == 10
    assert ca.sold_lw_delta == 0
    assert ca.smly == 5
    assert ca.smly_delta == 100
    assert ca.max_buy == 80.0
    assert ca.reorder_qty == 27
    assert ca.capital == 300.0

    assert cab.urgency == "CRITICAL"
    assert cab.on_hand == 0
    assert cab.days_left == 0.0
    assert cab.reorder_qty == 15


@pytest.mark.asyncio
async def test_reorder_family_rollup(store: FakeStore, today: date):
    response = await get_reorder_queue(store, target_margin=20, today=today)
    blue = response.families[0]

    assert blue.urgency == "CRITICAL"
    assert blue.days_left == 0.0
    assert blue.product == "iPhone 11 Blue 64GB"
    assert blue.reorder_qty == 42
    assert blue.avg_cost == 100.0
    assert blue.max_buy == 74.67
    assert blue.smly_delta == 200


@pytest.mark.asyncio
async def test_reorder_stats(store: FakeStore, today: date):
    response = await get_reorder_queue(store, target_margin=20, today=today)

    assert response.stats.critical == 1
    assert response.stats.urgent == 0
    assert response.stats.low == 1
    assert response.stats.total_reorder_qty == 60
    assert response.stats.est_purchase_cost == 6000


@pytest.mark.asyncio
async def test_reorder_default_target_margin(store: FakeStore, today: date):
    response = await get_reorder_queue(store, today=today)
    assert response.target_margin == get_settings().default_target_margin


@pytest.mark.asyncio
async def test_reorder_serializes_camel_case(store: FakeStore, today: date):
    response = await get_reorder_queue(store, target_margin=20, today=today)
    data = response.model_dump(by_alias=True)

    assert data["targetMargin"] == 20
    assert "totalReorderQty" in data["stats"]
    assert "productFamily" in data["families"][0]
    assert "reorderQty" in data["families"][0]["skus"][0]
