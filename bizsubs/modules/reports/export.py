"""CSV renderings of the computed reports."""

from typing import Callable, Dict, List

from bizsubs.core.csv_export import render_csv
from bizsubs.core.dates import format_date_for_display
from bizsubs.modules.reports.schemas import (
    CategoryBreakdownReport, ClientCostReport, MonthlyExpenseReport, TaxYearSummary,
)


def _money(value: float) -> str:
    return f"{value:.2f}"


def monthly_csv(report: MonthlyExpenseReport, date_format: str) -> str:
    rows: List[list] = []
    for month in report.monthly_totals:
        for item in month.items:
            rows.append([
                month.month,
                format_date_for_display(item.item_date, date_format) if item.item_date else "",
                item.service_name,
                "Subscription" if item.item_type == "subscription" else "Lifetime Deal",
                item.category or "",
                _money(item.amount),
                "Yes" if item.tax_deductible else "No",
                _money(item.tax_savings),
            ])
        rows.append([month.month, "", "Month total", "", "", _money(month.total),
                     _money(month.tax_deductible), _money(month.tax_savings)])
    rows.append(["", "", "Total", "", "", _money(report.total_expenses),
                 _money(report.total_tax_deductible), _money(report.total_tax_savings)])
    return render_csv(
        ["Month", "Date", "Service Name", "Type", "Category", "Amount", "Tax Deductible", "Tax Savings"], rows
    )


def tax_csv(summary: TaxYearSummary, date_format: str) -> str:
    return render_csv(
        ["Financial Year Start", "Financial Year End", "Total Business Expenses",
         "Total Tax Deductible", "Total Tax Savings", "Average Tax Rate"],
        [[
            format_date_for_display(summary.financial_year_start, date_format),
            format_date_for_display(summary.financial_year_end, date_format),
            _money(summary.total_business_expenses),
            _money(summary.total_tax_deductible),
            _money(summary.total_tax_savings),
            f"{summary.average_tax_rate:.1f}",
        ]],
    )


def client_csv(report: ClientCostReport, date_format: str) -> str:
    rows = [
        [c.name, _money(c.subscription_cost), _money(c.lifetime_deal_cost), _money(c.total_cost),
         c.subscription_count, c.lifetime_deal_count]
        for c in report.client_costs
    ]
    rows.append(["Total", "", "", _money(report.total_costs), "", ""])
    return render_csv(
        ["Client", "Subscription Cost (Annual)", "Lifetime Deal Cost", "Total Cost", "Subscriptions", "Lifetime Deals"],
        rows,
    )


def category_csv(report: CategoryBreakdownReport, date_format: str) -> str:
    rows = [[c.category, _money(c.total), c.count] for c in report.categories]
    rows.append(["Total", _money(report.total_expenses), sum(c.count for c in report.categories)])
    return render_csv(["Category", "Total", "Items"], rows)


RENDERERS: Dict[str, Callable[..., str]] = {
    "monthly": monthly_csv,
    "tax": tax_csv,
    "client": client_csv,
    "category": category_csv,
}
