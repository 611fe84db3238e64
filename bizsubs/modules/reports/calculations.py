"""
Report arithmetic over already-fetched subscription and lifetime deal rows.

Everything here is pure: callers load rows, pick the date range and profile
defaults, and pass them in. Only business expenses are ever counted.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bizsubs.core.billing import annual_equivalent, calculate_accumulated_cost, monthly_equivalent
from bizsubs.core.dates import month_bounds, parse_date
from bizsubs.modules.reports.schemas import (
    CategoryBreakdownReport, CategoryTotal, ClientCost, ClientCostReport, MonthlyExpenseReport,
    MonthlyItem, MonthlyTotal, ReportFilters, ReportsOverview, TaxYearSummary,
)

Row = Dict[str, Any]


def _matches(value: Optional[str], wanted: Optional[str]) -> bool:
    return not wanted or wanted == "all" or value == wanted


def _in_range(value: Any, start: date, end: date) -> bool:
    d = parse_date(value)
    return d is not None and start <= d <= end


def filter_items(
    subscriptions: Iterable[Row],
    lifetime_deals: Iterable[Row],
    filters: ReportFilters,
    use_category: bool = True,
) -> Tuple[List[Row], List[Row]]:
    """Subscriptions by next billing date and deals by purchase date, then client/category/project."""
    def keep(row: Row) -> bool:
        return (
            _matches(row.get("client_id"), filters.client_id)
            and (not use_category or _matches(row.get("category"), filters.category))
            and _matches(row.get("project_id"), filters.project_id)
        )

    subs = [s for s in subscriptions if _in_range(s.get("next_billing_date"), filters.start, filters.end) and keep(s)]
    deals = [d for d in lifetime_deals if _in_range(d.get("purchase_date"), filters.start, filters.end) and keep(d)]
    return subs, deals


def effective_tax_rate(row: Row, default_rate: float) -> float:
    """The row's own rate wins, including an explicit 0."""
    rate = row.get("tax_rate")
    return float(default_rate) if rate is None else float(rate)


def subscription_month_amount(sub: Row, month_start: date, month_end: date) -> float:
    """What a subscription contributes to one calendar month."""
    start = parse_date(sub.get("start_date"))
    cycle = sub.get("billing_cycle")
    if start is None or start < month_start:
        return monthly_equivalent(sub["cost"], cycle)
    if start > month_end:
        return 0.0
    return calculate_accumulated_cost(sub["cost"], start, cycle, month_end)


def monthly_totals(subscriptions: Iterable[Row], lifetime_deals: Iterable[Row], default_rate: float) -> List[MonthlyTotal]:
    months: Dict[str, MonthlyTotal] = {}

    def add(month_key: str, item: MonthlyItem) -> None:
        bucket = months.setdefault(month_key, MonthlyTotal(month=month_key))
        bucket.total += item.amount
        if item.tax_deductible:
            bucket.tax_deductible += item.amount
            bucket.tax_savings += item.tax_savings
        bucket.items.append(item)

    for sub in subscriptions:
        if not sub.get("business_expense"):
            continue
        anchor = parse_date(sub.get("start_date")) or parse_date(sub.get("next_billing_date"))
        if anchor is None:
            continue
        month_start, month_end = month_bounds(anchor)
        amount = subscription_month_amount(sub, month_start, month_end)
        deductible = bool(sub.get("tax_deductible"))
        add(anchor.strftime("%Y-%m"), MonthlyItem(
            service_name=sub["service_name"],
            item_type="subscription",
            category=sub.get("category"),
            item_date=anchor,
            amount=amount,
            tax_deductible=deductible,
            tax_savings=amount * effective_tax_rate(sub, default_rate) / 100 if deductible else 0.0,
        ))

    for deal in lifetime_deals:
        if not deal.get("business_expense"):
            continue
        purchased = parse_date(deal.get("purchase_date"))
        if purchased is None:
            continue
        amount = float(deal["original_cost"])
        deductible = bool(deal.get("tax_deductible"))
        add(purchased.strftime("%Y-%m"), MonthlyItem(
            service_name=deal["service_name"],
            item_type="lifetime_deal",
            category=deal.get("category"),
            item_date=purchased,
            amount=amount,
            tax_deductible=deductible,
            tax_savings=amount * effective_tax_rate(deal, default_rate) / 100 if deductible else 0.0,
        ))

    return [months[key] for key in sorted(months)]


def monthly_expense_report(
    subscriptions: Iterable[Row],
    lifetime_deals: Iterable[Row],
    filters: ReportFilters,
    default_rate: float,
) -> MonthlyExpenseReport:
    subs, deals = filter_items(subscriptions, lifetime_deals, filters)
    totals = monthly_totals(subs, deals, default_rate)
    return MonthlyExpenseReport(
        start=filters.start,
        end=filters.end,
        monthly_totals=totals,
        total_expenses=sum(m.total for m in totals),
        total_tax_deductible=sum(m.tax_deductible for m in totals),
        total_tax_savings=sum(m.tax_savings for m in totals),
        subscription_count=len(subs),
        lifetime_deal_count=len(deals),
    )


def tax_year_summary(
    subscriptions: Iterable[Row],
    lifetime_deals: Iterable[Row],
    fy_start: date,
    fy_end: date,
    default_rate: float,
    today: Optional[date] = None,
) -> TaxYearSummary:
    """Business expenses falling inside one financial year."""
    today = today or date.today()
    expenses = deductible = savings = 0.0

    for sub in subscriptions:
        if not sub.get("business_expense"):
            continue
        started = parse_date(sub.get("start_date")) or parse_date(sub.get("created_at"))
        if started is None:
            continue
        stopped = parse_date(sub.get("cancelled_date")) or today
        effective_start = max(started, fy_start)
        effective_end = min(stopped, fy_end)
        if effective_start > effective_end:
            continue
        amount = calculate_accumulated_cost(sub["cost"], effective_start, sub.get("billing_cycle"), effective_end)
        expenses += amount
        if sub.get("tax_deductible"):
            deductible += amount
            savings += amount * effective_tax_rate(sub, default_rate) / 100

    for deal in lifetime_deals:
        if not deal.get("business_expense") or not _in_range(deal.get("purchase_date"), fy_start, fy_end):
            continue
        amount = float(deal["original_cost"])
        expenses += amount
        if deal.get("tax_deductible"):
            deductible += amount
            savings += amount * effective_tax_rate(deal, default_rate) / 100

    return TaxYearSummary(
        financial_year_start=fy_start,
        financial_year_end=fy_end,
        total_business_expenses=expenses,
        total_tax_deductible=deductible,
        total_tax_savings=savings,
        average_tax_rate=(savings / deductible * 100) if deductible > 0 else float(default_rate),
    )


def client_cost_report(clients: Iterable[Row], subscriptions: Iterable[Row], lifetime_deals: Iterable[Row],
                       filters: ReportFilters) -> ClientCostReport:
    """Annualized subscription cost plus deal cost per active client."""
    subs, deals = filter_items(subscriptions, lifetime_deals, ReportFilters(start=filters.start, end=filters.end))
    rows = []
    for client in clients:
        if client.get("status", "active") != "active":
            continue
        client_subs = [s for s in subs if s.get("client_id") == client["id"] and s.get("business_expense")]
        client_deals = [d for d in deals if d.get("client_id") == client["id"] and d.get("business_expense")]
        subscription_cost = sum(annual_equivalent(s["cost"], s.get("billing_cycle")) for s in client_subs)
        deal_cost = sum(float(d["original_cost"]) for d in client_deals)
        rows.append(ClientCost(
            id=client["id"],
            name=client["name"],
            color_hex=client.get("color_hex"),
            total_cost=subscription_cost + deal_cost,
            subscription_cost=subscription_cost,
            lifetime_deal_cost=deal_cost,
            subscription_count=len(client_subs),
            lifetime_deal_count=len(client_deals),
        ))
    rows.sort(key=lambda r: r.total_cost, reverse=True)
    return ClientCostReport(client_costs=rows, total_costs=sum(r.total_cost for r in rows))


def category_breakdown(subscriptions: Iterable[Row], lifetime_deals: Iterable[Row],
                       filters: ReportFilters) -> CategoryBreakdownReport:
    subs, deals = filter_items(subscriptions, lifetime_deals, filters, use_category=False)
    groups: Dict[str, CategoryTotal] = {}

    def group_for(row: Row) -> CategoryTotal:
        name = row.get("category") or "other"
        return groups.setdefault(name, CategoryTotal(category=name, total=0.0, count=0))

    for sub in subs:
        if not sub.get("business_expense"):
            continue
        group = group_for(sub)
        group.total += annual_equivalent(sub["cost"], sub.get("billing_cycle"))
        group.count += 1
    for deal in deals:
        if not deal.get("business_expense"):
            continue
        group = group_for(deal)
        group.total += float(deal["original_cost"])
        group.count += 1
    categories = sorted(groups.values(), key=lambda g: g.total, reverse=True)
    return CategoryBreakdownReport(categories=categories, total_expenses=sum(g.total for g in categories))


def reports_overview(monthly: MonthlyExpenseReport, tax: TaxYearSummary, categories: CategoryBreakdownReport,
                     clients: ClientCostReport, top: int = 5) -> ReportsOverview:
    return ReportsOverview(
        start=monthly.start,
        end=monthly.end,
        total_expenses=monthly.total_expenses,
        total_tax_deductible=monthly.total_tax_deductible,
        total_tax_savings=monthly.total_tax_savings,
        tax_summary=tax,
        top_categories=categories.categories[:top],
        top_clients=clients.client_costs[:top],
    )
