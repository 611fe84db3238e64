from supabase import Client
from bizsubs.core import cache as cache_keys
from bizsubs.core.cache import QueryCache, freeze, get_query_cache
from bizsubs.core.dates import financial_year_window
from bizsubs.modules.lifetime_deals.service import LifetimeDealService
from bizsubs.modules.preferences.service import PreferencesService
from bizsubs.modules.reports import calculations
from bizsubs.modules.reports.export import RENDERERS
from bizsubs.modules.reports.schemas import (
    CategoryBreakdownReport, ClientCostReport, MonthlyExpenseReport, ReportFilters, ReportsOverview, TaxYearSummary
)
from bizsubs.modules.subscriptions.service import SubscriptionService
from bizsubs.modules.users.service import UserService
from typing import Any, Callable, Dict, List, Optional, Tuple
from fastapi import HTTPException
from datetime import date
import logging

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, supabase: Client, cache: Optional[QueryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_query_cache()
        self.subscriptions = SubscriptionService(supabase, self.cache)
        self.lifetime_deals = LifetimeDealService(supabase, self.cache)
        self.users = UserService(supabase, self.cache)

    def _items(self, user_id: str) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        return self.subscriptions.list_rows(user_id), self.lifetime_deals.list_rows(user_id)

    def _active_clients(self, user_id: str) -> List[Dict[str, Any]]:
        result = self.supabase.table("clients")\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("status", "active")\
            .order("name", desc=False)\
            .execute()
        return result.data or []

    def _cached(self, user_id: str, report: str, key: Any, loader: Callable[[], Any]) -> Any:
        try:
            return self.cache.get_or_load((user_id, cache_keys.REPORTS, report, key), loader)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to build {report} report for {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def monthly_report(self, user_id: str, filters: ReportFilters) -> MonthlyExpenseReport:
        """Business expenses bucketed by month"""
        def load():
            defaults = self.users.get_tax_defaults(user_id)
            subs, deals = self._items(user_id)
            return calculations.monthly_expense_report(subs, deals, filters, defaults["tax_rate"])

        return self._cached(user_id, "monthly", freeze(filters.model_dump()), load)

    def tax_year_summary(self, user_id: str, today: Optional[date] = None) -> TaxYearSummary:
        """Totals for the financial year containing today"""
        today = today or date.today()

        def load():
            defaults = self.users.get_tax_defaults(user_id)
            try:
                fy_start, fy_end = financial_year_window(defaults["financial_year_end"], today)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            subs, deals = self._items(user_id)
            return calculations.tax_year_summary(subs, deals, fy_start, fy_end, defaults["tax_rate"], today)

        return self._cached(user_id, "tax", today.isoformat(), load)

    def client_costs(self, user_id: str, filters: ReportFilters) -> ClientCostReport:
        """Annualized cost per active client"""
        def load():
            subs, deals = self._items(user_id)
            return calculations.client_cost_report(self._active_clients(user_id), subs, deals, filters)

        return self._cached(user_id, "client", freeze(filters.model_dump()), load)

    def category_breakdown(self, user_id: str, filters: ReportFilters) -> CategoryBreakdownReport:
        """Business expenses grouped by category"""
        def load():
            subs, deals = self._items(user_id)
            return calculations.category_breakdown(subs, deals, filters)

        return self._cached(user_id, "category", freeze(filters.model_dump()), load)

    def overview(self, user_id: str, filters: ReportFilters) -> ReportsOverview:
        return calculations.reports_overview(
            self.monthly_report(user_id, filters),
            self.tax_year_summary(user_id),
            self.category_breakdown(user_id, filters),
            self.client_costs(user_id, filters),
        )

    def export_csv(self, user_id: str, report_type: str, filters: ReportFilters) -> Tuple[str, str]:
        """CSV body and filename for one report type"""
        builders = {
            "monthly": lambda: self.monthly_report(user_id, filters),
            "tax": lambda: self.tax_year_summary(user_id),
            "client": lambda: self.client_costs(user_id, filters),
            "category": lambda: self.category_breakdown(user_id, filters),
        }
        if report_type not in builders:
            raise HTTPException(status_code=400, detail=f"Unknown report type: {report_type}")

        date_format = PreferencesService(self.supabase).get_date_format(user_id)
        content = RENDERERS[report_type](builders[report_type](), date_format)
        return content, f"{report_type}_report_{date.today().isoformat()}.csv"
