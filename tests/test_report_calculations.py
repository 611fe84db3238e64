from datetime import date

import pytest

from bizsubs.modules.reports.calculations import (
    category_breakdown,
    client_cost_report,
    effective_tax_rate,
    monthly_expense_report,
    tax_year_summary,
)
from bizsubs.modules.reports.schemas import ReportFilters

FILTERS = ReportFilters(start=date(2025, 1, 1), end=date(2025, 12, 31))


def _sub(**overrides):
    row = {
        "service_name": "Notion",
        "cost": 30.44,
        "billing_cycle": "monthly",
        "start_date": None,
        "next_billing_date": "2025-03-10",
        "business_expense": True,
        "tax_deductible": True,
        "tax_rate": 25,
        "category": "software",
        "client_id": None,
        "project_id": None,
    }
    row.update(overrides)
    return row


def _deal(**overrides):
    row = {
        "service_name": "Lifetime tool",
        "original_cost": 200,
        "purchase_date": "2025-02-14",
        "business_expense": True,
        "tax_deductible": True,
        "tax_rate": 30,
        "category": "marketing",
        "client_id": None,
        "project_id": None,
    }
    row.update(overrides)
    return row


def test_explicit_zero_rate_is_kept() -> None:
    assert effective_tax_rate({"tax_rate": 0}, 30) == 0.0
    assert effective_tax_rate({"tax_rate": None}, 30) == 30.0


def test_monthly_report_buckets_by_start_month() -> None:
    subs = [
        _sub(),
        # Starts mid-month: accrues from the start to month end
        _sub(service_name="Slack", start_date="2025-04-01", next_billing_date="2025-05-01"),
        _sub(service_name="Personal", business_expense=False),
    ]
    report = monthly_expense_report(subs, [_deal()], FILTERS, default_rate=30)

    assert [m.month for m in report.monthly_totals] == ["2025-02", "2025-03", "2025-04"]
    feb, mar, apr = report.monthly_totals
    assert feb.total == pytest.approx(200)
    assert feb.tax_savings == pytest.approx(60)
    assert mar.total == pytest.approx(30.44)
    assert mar.tax_savings == pytest.approx(30.44 * 0.25)
    assert apr.total == pytest.approx(29.0)
    assert report.total_expenses == pytest.approx(200 + 30.44 + 29.0)
    assert report.subscription_count == 3
    assert report.lifetime_deal_count == 1


def test_monthly_report_applies_filters() -> None:
    subs = [_sub(client_id="c1"), _sub(service_name="Other", client_id="c2")]
    deals = [_deal(client_id="c2"), _deal(purchase_date="2024-06-01", client_id="c1")]
    filters = ReportFilters(start=date(2025, 1, 1), end=date(2025, 12, 31), client_id="c1", category="all")
    report = monthly_expense_report(subs, deals, filters, default_rate=30)
    assert report.subscription_count == 1
    assert report.lifetime_deal_count == 0


def test_non_deductible_items_count_as_expense_only() -> None:
    report = monthly_expense_report([_sub(tax_deductible=False)], [], FILTERS, default_rate=30)
    assert report.total_expenses == pytest.approx(30.44)
    assert report.total_tax_deductible == 0
    assert report.total_tax_savings == 0


def test_tax_summary_accrues_over_the_overlap_only() -> None:
    fy_start, fy_end = date(2024, 7, 1), date(2025, 6, 30)
    subs = [
        # Started long before the financial year: only the in-year span counts
        _sub(start_date="2023-01-01", cost=30.44, tax_rate=50),
        _sub(service_name="Gone", start_date="2023-01-01", cancelled_date="2024-01-31"),
    ]
    deals = [_deal(purchase_date="2024-08-01"), _deal(purchase_date="2024-06-30")]
    summary = tax_year_summary(subs, deals, fy_start, fy_end, default_rate=30, today=date(2024, 7, 31))

    assert summary.total_business_expenses == pytest.approx(30.0 + 200)
    assert summary.total_tax_deductible == pytest.approx(230.0)
    assert summary.total_tax_savings == pytest.approx(15.0 + 60)
    assert summary.average_tax_rate == pytest.approx(75 / 230 * 100)


def test_tax_summary_average_falls_back_to_profile_rate() -> None:
    summary = tax_year_summary([], [], date(2025, 1, 1), date(2025, 12, 31), default_rate=22, today=date(2025, 5, 1))
    assert summary.total_business_expenses == 0
    assert summary.average_tax_rate == 22


def test_client_cost_report_annualizes_and_sorts() -> None:
    clients = [
        {"id": "c1", "name": "Small", "status": "active"},
        {"id": "c2", "name": "Big", "status": "active"},
        {"id": "c3", "name": "Gone", "status": "inactive"},
    ]
    subs = [_sub(client_id="c1", cost=10), _sub(client_id="c2", cost=100), _sub(client_id="c3", cost=999)]
    report = client_cost_report(clients, subs, [_deal(client_id="c1")], FILTERS)

    assert [c.name for c in report.client_costs] == ["Big", "Small"]
    big, small = report.client_costs
    assert big.total_cost == pytest.approx(1200)
    assert small.subscription_cost == pytest.approx(120)
    assert small.lifetime_deal_cost == pytest.approx(200)
    assert report.total_costs == pytest.approx(1520)


def test_category_breakdown_groups_and_defaults_to_other() -> None:
    subs = [_sub(cost=10), _sub(cost=5, category=None), _sub(cost=1000, business_expense=False)]
    report = category_breakdown(subs, [_deal()], FILTERS)

    assert [(c.category, c.count) for c in report.categories] == [("marketing", 1), ("software", 1), ("other", 1)]
    assert report.total_expenses == pytest.approx(200 + 120 + 60)
