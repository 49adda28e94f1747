"""Tests for the inventory browser."""

from datetime import date

import pytest

from opsboard.services.inventory import get_inventory

from tests.conftest import FakeStore, SaleLine, inventory_row

MARCH = date(2024, 3, 5)
FEBRUARY = date(2024, 2, 15)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore(
        inventory=[
            inventory_row("PA-A-CA", 0, cost=100.0),
            inventory_row("LA-E-INTAKE", 50, cost=300.0),
            inventory_row("PA-B-CA", 10, cost=100.0),
            inventory_row("PA-B-SD", 20, cost=80.0),
            inventory_row("PA-C-CA", 5, cost=100.0),
            inventory_row("PA-X-XF", 5, cost=100.0),
        ],
        sales=[
            SaleLine(MARCH, "PA-A-CA", 5, 500.0),
            SaleLine(MARCH, "LA-E-INTAKE", 10, 4000.0),
            SaleLine(FEBRUARY, "PA-B-CA", 5, 500.0),
            SaleLine(MARCH, "PA-B-SD", 3, 240.0),
            SaleLine(MARCH, "PA-X-XF", 3, 30.0),
        ],
    )


@pytest.mark.asyncio
async def test_families_sorted_by_runway(store: FakeStore, today: date):
    response = await get_inventory(store, today=today)

    assert [(f.product_family, f.health, f.days_left) for f in response.families] == [
        ("PA-A", "critical", 0),
        ("LA-E", "healthy", 50),
        ("PA-B", "dead", 67),
    ]


@pytest.mark.asyncio
async def test_health_stats_count_skus(store: FakeStore, today: date):
    response = await get_inventory(store, today=today)

    assert response.stats.critical == 1
    assert response.stats.healthy == 2
    assert response.stats.dead == 1
    assert response.stats.low == 0
    assert response.stats.overstocked == 0


@pytest.mark.asyncio
async def test_dead_sku_keeps_not_selling_sentinel(store: FakeStore, today: date):
    response = await get_inventory(store, today=today)
    family = next(f for f in response.families if f.product_family == "PA-B")
    dead = next(s for s in family.skus if s.sku == "PA-B-CA")

    assert dead.days_left == 999
    assert dead.capital == 1000


@pytest.mark.asyncio
async def test_active_only_off_shows_unsold_stock(store: FakeStore, today: date):
    response = await get_inventory(store, active_only=False, today=today)
    families = {f.product_family for f in response.families}

    assert "PA-C" in families
    assert "PA-X" not in families
    assert response.stats.dead == 2


@pytest.mark.asyncio
async def test_category_filter(store: FakeStore, today: date):
    response = await get_inventory(store, category="Laptop", today=today)

    assert [f.product_family for f in response.families] == ["LA-E"]
    assert response.families[0].skus[0].grade == "INTAKE"
