from supabase import Client
from bizsubs.config.settings import settings
from bizsubs.core import cache as cache_keys
from bizsubs.core.billing import annual_equivalent, monthly_equivalent
from bizsubs.core.cache import QueryCache, get_query_cache
from bizsubs.core.dates import month_bounds, parse_date
from bizsubs.modules.activity.schemas import ActivityLogResponse
from bizsubs.modules.activity.service import ActivityService
from bizsubs.modules.dashboard.schemas import DashboardMetrics, UpcomingRenewal
from bizsubs.modules.subscriptions.service import flatten_joins
from typing import Any, Dict, Iterable, List, Optional
from fastapi import HTTPException
from datetime import date, timedelta
import logging

logger = logging.getLogger(__name__)


def compute_metrics(subscriptions: Iterable[Dict[str, Any]], currency: Optional[str],
                    today: Optional[date] = None) -> DashboardMetrics:
    """Headline numbers over active subscriptions"""
    subs = [s for s in subscriptions if s.get("status") == "active"]
    first, last = month_bounds(today or date.today())

    renewals = 0
    for sub in subs:
        next_billing = parse_date(sub.get("next_billing_date"))
        if next_billing and first <= next_billing <= last:
            renewals += 1

    return DashboardMetrics(
        total_monthly_recurring=sum(monthly_equivalent(s["cost"], s.get("billing_cycle")) for s in subs),
        annual_business_spend=sum(
            annual_equivalent(s["cost"], s.get("billing_cycle")) for s in subs if s.get("business_expense")
        ),
        tax_deductible_amount=sum(
            annual_equivalent(s["cost"], s.get("billing_cycle")) * float(s.get("tax_rate") or 0) / 100
            for s in subs if s.get("tax_deductible")
        ),
        this_month_renewals=renewals,
        currency=currency or settings.default_currency,
    )


class DashboardService:
    def __init__(self, supabase: Client, cache: Optional[QueryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_query_cache()

    def _currency(self, user_id: str) -> Optional[str]:
        result = self.supabase.table("users")\
            .select("currency_preference")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        return result.data.get("currency_preference") if result and result.data else None

    def get_metrics(self, user_id: str, today: Optional[date] = None) -> DashboardMetrics:
        """Monthly recurring, annual business spend, deductible amount and renewals this month"""
        try:
            def load():
                result = self.supabase.table("subscriptions")\
                    .select("*")\
                    .eq("user_id", user_id)\
                    .eq("status", "active")\
                    .execute()
                return compute_metrics(result.data or [], self._currency(user_id), today)

            return self.cache.get_or_load((user_id, cache_keys.DASHBOARD, "metrics"), load)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_upcoming_renewals(self, user_id: str, days: int = 30,
                              today: Optional[date] = None) -> List[UpcomingRenewal]:
        """Active subscriptions billing within the next `days` days, soonest first"""
        end_date = (today or date.today()) + timedelta(days=days)
        try:
            def load():
                result = self.supabase.table("subscriptions")\
                    .select("*, clients(name, color_hex)")\
                    .eq("user_id", user_id)\
                    .eq("status", "active")\
                    .lte("next_billing_date", end_date.isoformat())\
                    .order("next_billing_date", desc=False)\
                    .execute()
                return [UpcomingRenewal(**flatten_joins(row)) for row in (result.data or [])]

            return self.cache.get_or_load((user_id, cache_keys.DASHBOARD, "renewals", days), load)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_recent_activity(self, user_id: str, limit: int = 10) -> List[ActivityLogResponse]:
        return ActivityService(self.supabase).list_activity(user_id, limit)
