import math

import pytest

from opsboard.services.metrics import (
    DAYS_LEFT_SENTINEL,
    break_even_price,
    capital_tied_up,
    days_left,
    health_bucket,
    inventory_days_left,
    max_buy_price,
    mtd_vs_last_month,
    net_margin_pct,
    pace_pct,
    pct_change,
    reorder_quantity,
    reprice_pace_pct,
    reprice_status,
    round_half_up,
    temperature_trend,
    urgency_tier,
    velocity,
    wholesale_floor,
    worst_health,
    worst_urgency,
)


def test_velocity_on_first_day_has_no_divide_by_zero():
    assert velocity(5, 1) == 5.0
    assert velocity(5, 0) == 5.0


def test_days_left_sentinel_when_not_selling():
    result = days_left(10, 0)
    assert result == DAYS_LEFT_SENTINEL
    assert not math.isinf(result)


def test_days_left_divides_by_velocity():
    assert days_left(10, 2) == 5


def test_inventory_days_left_is_zero_when_out_of_stock():
    assert inventory_days_left(0, 0) == 0
    assert inventory_days_left(-3, 1.5) == 0
    assert inventory_days_left(10, 0) == DAYS_LEFT_SENTINEL


@pytest.mark.parametrize(
    ("v", "mtd", "runway", "expected"),
    [
        (0, 0, 3, "dead"),
        (0, 0, 0, "dead"),
        (0.5, 5, 5, "critical"),
        (1, 5, 14, "low"),
        (1, 30, 60, "healthy"),
        (1, 30, 120, "healthy"),
        (0.1, 3, 121, "overstocked"),
    ],
)
def test_health_bucket(v: float, mtd: int, runway: float, expected: str):
    assert health_bucket(v, mtd, runway) == expected


@pytest.mark.parametrize(
    ("v", "runway", "expected"),
    [
        (0, 0, None),
        (1, 0, "CRITICAL"),
        (1, 2, "CRITICAL"),
        (1, 5, "URGENT"),
        (1, 14, "LOW"),
        (1, 14.1, None),
    ],
)
def test_urgency_tier(v: float, runway: float, expected: str | None):
    assert urgency_tier(v, runway) == expected


def test_temperature_dead_takes_precedence():
    assert temperature_trend(0, 12, 15, 30) == "DEAD"


def test_temperature_hot_needs_pace_and_volume():
    # 2/day vs 1/day last month
    assert temperature_trend(20, 30, 10, 30) == "HOT"
    # fast pace but only 6 units
    assert temperature_trend(6, 5, 10, 31) == "RISING"


def test_temperature_falling_and_stable():
    assert temperature_trend(2, 30, 10, 30) == "FALLING"
    assert temperature_trend(10, 30, 10, 30) == "STABLE"
    assert temperature_trend(5, 0, 10, 30) == "STABLE"
    assert temperature_trend(0, 0, 10, 30) == "STABLE"


def test_pace_pct_sentinels():
    assert pace_pct(5, 10, 0, 30) == 999
    assert pace_pct(0, 10, 0, 30) == 0


def test_mtd_vs_last_month():
    assert mtd_vs_last_month(10, 30, 10, 30) == pytest.approx(0)
    assert mtd_vs_last_month(3, 0, 10, 30) == 100
    assert mtd_vs_last_month(0, 0, 10, 30) == 0


def test_reprice_pace_uses_flat_thirty_day_month():
    # expected by day 10: 30 / 30 * 10 = 10 units
    assert reprice_pace_pct(3, 30, 10) == pytest.approx(30)
    assert reprice_pace_pct(0, 0, 10) == 0
    assert reprice_pace_pct(2, 0, 10) == 100


def test_reprice_status():
    assert reprice_status(0, 0, 5, 0) is None
    assert reprice_status(5, 0, 0, 100) == "DEAD"
    assert reprice_status(5, 2, 30, 20) == "SLOW"
    assert reprice_status(5, 2, 30, 30) is None
    assert reprice_status(5, 2, 0, 0) is None


def test_reorder_quantity_targets_thirty_days():
    assert reorder_quantity(1.0, 10) == 20
    assert reorder_quantity(0.5, 40) == 0


def test_money_helpers():
    assert max_buy_price(100, 20) == pytest.approx(80)
    assert break_even_price(85) == pytest.approx(100)
    assert break_even_price(0) == 0
    assert wholesale_floor(100) == pytest.approx(105)
    assert net_margin_pct(100, 50) == pytest.approx(35)
    assert net_margin_pct(0, 50) == 0
    assert capital_tied_up(-2, 10) == 0
    assert capital_tied_up(3, 10) == 30


def test_pct_change():
    assert pct_change(0, 0) == 0
    assert pct_change(5, 0) == 100
    assert pct_change(150, 100) == pytest.approx(50)
    assert pct_change(50, -100) == pytest.approx(150)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(0.125, 2) == 0.13


def test_worst_of():
    assert worst_health("healthy", "low") == "low"
    assert worst_health("dead", "critical") == "dead"
    assert worst_urgency("LOW", "CRITICAL") == "CRITICAL"
    assert worst_urgency("URGENT", "LOW") == "URGENT"
