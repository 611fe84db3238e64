"""
Billing-cycle arithmetic.

Normalization factors match the database RPCs (weekly = 4.33 months, 52 weeks
per year). Pro-ration and accumulation work on an average month of 30.44 days.
"""

import calendar
from datetime import date, timedelta
from typing import Optional

from bizsubs.core.dates import DateLike, parse_date

AVERAGE_MONTH_DAYS = 30.44
WEEKS_PER_MONTH = 4.33

_MONTHLY_FACTORS = {
    "weekly": WEEKS_PER_MONTH,
    "monthly": 1.0,
    "quarterly": 1 / 3,
    "annual": 1 / 12,
}

_ANNUAL_FACTORS = {
    "weekly": 52.0,
    "monthly": 12.0,
    "quarterly": 4.0,
    "annual": 1.0,
}

_PERIOD_DAYS = {
    "weekly": 7.0,
    "monthly": AVERAGE_MONTH_DAYS,
    "quarterly": 91.31,
    "annual": 365.25,
}

_CYCLE_MONTHS = {
    "monthly": 1,
    "quarterly": 3,
    "annual": 12,
}


def monthly_equivalent(cost: float, billing_cycle: Optional[str]) -> float:
    """Unknown cycles are treated as monthly."""
    return float(cost or 0) * _MONTHLY_FACTORS.get(billing_cycle, 1.0)


def annual_equivalent(cost: float, billing_cycle: Optional[str]) -> float:
    """Unknown cycles are treated as monthly (x12)."""
    return float(cost or 0) * _ANNUAL_FACTORS.get(billing_cycle, 12.0)


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_cycles(start: date, billing_cycle: Optional[str], count: int = 1) -> date:
    """Date that lies `count` billing cycles after `start`."""
    if billing_cycle == "weekly":
        return start + timedelta(days=7 * count)
    return _add_months(start, _CYCLE_MONTHS.get(billing_cycle, 1) * count)


def _cycles_elapsed(start: date, billing_cycle: Optional[str], today: date) -> int:
    """Largest k such that start + k cycles <= today (start <= today)."""
    # Jump close to today first, then step; every candidate is computed from start
    if billing_cycle == "weekly":
        count = (today - start).days // 7
    else:
        months_between = (today.year - start.year) * 12 + (today.month - start.month)
        count = max(months_between // _CYCLE_MONTHS.get(billing_cycle, 1) - 1, 0)
    while add_cycles(start, billing_cycle, count + 1) <= today:
        count += 1
    return count


def calculate_next_billing_date(start_date: DateLike, billing_cycle: Optional[str], today: Optional[date] = None) -> date:
    """First billing date strictly after today; a future start date is its own next billing date."""
    start = parse_date(start_date)
    if start is None:
        raise ValueError("start_date is required")
    today = today or date.today()
    if start > today:
        return start
    return add_cycles(start, billing_cycle, _cycles_elapsed(start, billing_cycle, today) + 1)


def current_period_start(start_date: DateLike, billing_cycle: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """Most recent billing date on or before today, None if billing has not started."""
    start = parse_date(start_date)
    today = today or date.today()
    if start is None or start > today:
        return None
    return add_cycles(start, billing_cycle, _cycles_elapsed(start, billing_cycle, today))


def _elapsed_days(start: date, end: date) -> int:
    return (end - start).days


def calculate_pro_rated_amount(
    full_amount: float,
    start_date: DateLike,
    billing_cycle: Optional[str],
    reference_date: Optional[date] = None,
) -> float:
    """Share of one billing period elapsed between start and reference, capped at the full amount."""
    start = parse_date(start_date)
    reference = reference_date or date.today()
    if start is None or start > reference:
        return 0.0

    period_days = _PERIOD_DAYS.get(billing_cycle, AVERAGE_MONTH_DAYS)
    days_since_start = _elapsed_days(start, reference)
    if days_since_start >= period_days:
        return float(full_amount)
    return max(0.0, (days_since_start / period_days) * float(full_amount))


def calculate_accumulated_cost(
    cost: float,
    start_date: DateLike,
    billing_cycle: Optional[str],
    end_date: Optional[date] = None,
) -> float:
    """Total cost accrued between start and end at the cycle's monthly rate."""
    start = parse_date(start_date)
    end = end_date or date.today()
    if start is None or start > end:
        return 0.0

    if billing_cycle == "weekly":
        monthly = float(cost) * (AVERAGE_MONTH_DAYS / 7)
    else:
        monthly = monthly_equivalent(cost, billing_cycle)
    months = _elapsed_days(start, end) / AVERAGE_MONTH_DAYS
    return max(0.0, months * monthly)


def pro_rated_tax_savings(
    cost: float,
    start_date: DateLike,
    billing_cycle: Optional[str],
    tax_rate: float,
    reference_date: Optional[date] = None,
) -> float:
    return calculate_pro_rated_amount(cost, start_date, billing_cycle, reference_date) * (float(tax_rate or 0) / 100)


def realized_gain(original_cost: float, resold_price: Optional[float]) -> Optional[float]:
    if resold_price is None:
        return None
    return float(resold_price) - float(original_cost)
