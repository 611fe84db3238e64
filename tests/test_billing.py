from datetime import date

import pytest

from bizsubs.core.billing import (
    add_cycles,
    annual_equivalent,
    calculate_accumulated_cost,
    calculate_next_billing_date,
    calculate_pro_rated_amount,
    current_period_start,
    monthly_equivalent,
    pro_rated_tax_savings,
    realized_gain,
)


@pytest.mark.parametrize(
    "cost, cycle, expected",
    [
        (120, "annual", 10.0),
        (30, "quarterly", 10.0),
        (10, "weekly", 43.3),
        (25, "monthly", 25.0),
        (25, "fortnightly", 25.0),
    ],
)
def test_monthly_equivalent(cost, cycle, expected) -> None:
    assert monthly_equivalent(cost, cycle) == pytest.approx(expected)


@pytest.mark.parametrize(
    "cost, cycle, expected",
    [
        (10, "weekly", 520.0),
        (10, "monthly", 120.0),
        (10, "quarterly", 40.0),
        (10, "annual", 10.0),
        (10, None, 120.0),
    ],
)
def test_annual_equivalent(cost, cycle, expected) -> None:
    assert annual_equivalent(cost, cycle) == pytest.approx(expected)


def test_add_cycles_clamps_to_month_end_without_drift() -> None:
    start = date(2024, 1, 31)
    assert add_cycles(start, "monthly", 1) == date(2024, 2, 29)
    assert add_cycles(start, "monthly", 2) == date(2024, 3, 31)
    assert add_cycles(start, "quarterly", 1) == date(2024, 4, 30)
    assert add_cycles(date(2024, 2, 29), "annual", 1) == date(2025, 2, 28)
    assert add_cycles(start, "weekly", 2) == date(2024, 2, 14)


def test_next_billing_date_is_strictly_after_today() -> None:
    start = date(2025, 1, 15)
    assert calculate_next_billing_date(start, "monthly", date(2025, 3, 14)) == date(2025, 3, 15)
    assert calculate_next_billing_date(start, "monthly", date(2025, 3, 15)) == date(2025, 4, 15)
    assert calculate_next_billing_date(start, "annual", date(2025, 6, 1)) == date(2026, 1, 15)
    assert calculate_next_billing_date("2025-01-01", "weekly", date(2025, 1, 15)) == date(2025, 1, 22)


def test_next_billing_date_for_future_start_is_the_start() -> None:
    assert calculate_next_billing_date(date(2025, 9, 1), "monthly", date(2025, 8, 4)) == date(2025, 9, 1)


def test_next_billing_date_requires_start() -> None:
    with pytest.raises(ValueError):
        calculate_next_billing_date(None, "monthly", date(2025, 1, 1))


def test_current_period_start() -> None:
    assert current_period_start(date(2025, 1, 31), "monthly", date(2025, 3, 5)) == date(2025, 2, 28)
    assert current_period_start(date(2025, 1, 31), "monthly", date(2025, 3, 31)) == date(2025, 3, 31)
    assert current_period_start(date(2025, 5, 1), "monthly", date(2025, 4, 1)) is None


def test_pro_rated_amount() -> None:
    start = date(2025, 1, 1)
    assert calculate_pro_rated_amount(30.44, start, "monthly", date(2025, 1, 11)) == pytest.approx(10.0)
    assert calculate_pro_rated_amount(100, start, "weekly", date(2025, 1, 20)) == 100.0
    assert calculate_pro_rated_amount(100, start, "monthly", date(2024, 12, 31)) == 0.0


def test_accumulated_cost() -> None:
    assert calculate_accumulated_cost(30.44, "2025-01-01", "monthly", date(2025, 1, 31)) == pytest.approx(30.0)
    # Weekly uses 30.44 / 7 weeks per month
    assert calculate_accumulated_cost(7, "2025-01-01", "weekly", date(2025, 1, 15)) == pytest.approx(14.0)
    assert calculate_accumulated_cost(10, "2025-02-01", "monthly", date(2025, 1, 1)) == 0.0


@pytest.mark.parametrize("cycle", ["weekly", "monthly", "quarterly", "annual"])
def test_pro_rated_tax_savings_never_exceed_full_cycle(cycle) -> None:
    for reference in (date(2025, 1, 2), date(2025, 3, 1), date(2026, 6, 1)):
        savings = pro_rated_tax_savings(99.0, date(2025, 1, 1), cycle, 30, reference)
        assert 0 <= savings <= 99.0 * 30 / 100


def test_realized_gain() -> None:
    assert realized_gain(100, 150) == 50.0
    assert realized_gain(100, 40) == -60.0
    assert realized_gain(100, None) is None
