from supabase import Client
from bizsubs.config.settings import settings
from bizsubs.core import cache as cache_keys
from bizsubs.core.billing import (
    annual_equivalent, calculate_accumulated_cost, calculate_next_billing_date,
    calculate_pro_rated_amount, current_period_start, monthly_equivalent
)
from bizsubs.core.cache import QueryCache, freeze, get_query_cache
from bizsubs.core.dates import parse_date, validate_start_date
from bizsubs.modules.activity.service import ActivityService
from bizsubs.modules.subscriptions.schemas import (
    SubscriptionCreate, SubscriptionUpdate, SubscriptionResponse, SubscriptionCostSummary
)
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from datetime import date, datetime, timezone
import logging

logger = logging.getLogger(__name__)

SELECT_WITH_JOINS = "*, clients(name, color_hex), projects(name)"


def flatten_joins(row: Dict[str, Any]) -> Dict[str, Any]:
    """Lift joined client/project columns onto the row"""
    data = dict(row)
    client = data.pop("clients", None) or {}
    project = data.pop("projects", None) or {}
    data["client_name"] = client.get("name")
    data["client_color"] = client.get("color_hex")
    data["project_name"] = project.get("name")
    return data


def apply_list_filters(query, filters: Dict[str, Optional[str]]):
    """Equality filters; empty values and 'all' are ignored"""
    for column, value in filters.items():
        if value and value != "all":
            query = query.eq(column, value)
    return query


class SubscriptionService:
    def __init__(self, supabase: Client, cache: Optional[QueryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_query_cache()
        self.activity = ActivityService(supabase)

    def _default_tax_rate(self, user_id: str) -> float:
        result = self.supabase.table("users")\
            .select("tax_rate")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if result and result.data and result.data.get("tax_rate") is not None:
            return float(result.data["tax_rate"])
        return settings.default_tax_rate

    def _fetch_row(self, subscription_id: str, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("subscriptions")\
            .select(SELECT_WITH_JOINS)\
            .eq("id", subscription_id)\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Subscription not found")
        return result.data

    def list_rows(self, user_id: str, status: Optional[str] = None, client_id: Optional[str] = None,
                  category: Optional[str] = None, project_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Raw joined rows, ordered by next billing date"""
        query = self.supabase.table("subscriptions")\
            .select(SELECT_WITH_JOINS)\
            .eq("user_id", user_id)
        query = apply_list_filters(query, {
            "status": status, "client_id": client_id, "category": category, "project_id": project_id,
        })
        result = query.order("next_billing_date", desc=False).execute()
        return result.data or []

    def list_subscriptions(self, user_id: str, status: Optional[str] = None, client_id: Optional[str] = None,
                           category: Optional[str] = None) -> List[SubscriptionResponse]:
        """List the user's subscriptions with client/project names"""
        filters = {"status": status, "client_id": client_id, "category": category}
        try:
            return self.cache.get_or_load(
                (user_id, cache_keys.SUBSCRIPTIONS, "list", freeze(filters)),
                lambda: [SubscriptionResponse(**flatten_joins(row)) for row in self.list_rows(user_id, **filters)],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_subscription(self, subscription_id: str, user_id: str) -> SubscriptionResponse:
        """Get subscription by ID"""
        try:
            return SubscriptionResponse(**flatten_joins(self._fetch_row(subscription_id, user_id)))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_subscription(self, subscription_data: SubscriptionCreate, user: Dict,
                            today: Optional[date] = None) -> SubscriptionResponse:
        """Create a subscription; next billing date is derived from the start date when omitted"""
        today = today or date.today()
        try:
            if subscription_data.start_date:
                is_valid, error = validate_start_date(subscription_data.start_date, today)
                if not is_valid:
                    raise HTTPException(status_code=400, detail=error)

            insert_data = subscription_data.model_dump(mode="json")
            insert_data["user_id"] = user["id"]
            if subscription_data.start_date and not subscription_data.next_billing_date:
                insert_data["next_billing_date"] = calculate_next_billing_date(
                    subscription_data.start_date, subscription_data.billing_cycle, today
                ).isoformat()
            if subscription_data.status == "cancelled" and not subscription_data.cancelled_date:
                insert_data["cancelled_date"] = today.isoformat()
            if subscription_data.tax_rate is None:
                insert_data["tax_rate"] = self._default_tax_rate(user["id"])

            result = self.supabase.table("subscriptions").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create subscription")

            created = result.data[0]
            self.activity.log_activity(
                user, "create", "subscription", created["id"], f"Created subscription: {subscription_data.service_name}"
            )
            self.cache.invalidate_after_change(user["id"], "subscription")
            return self.get_subscription(created["id"], user["id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_subscription(self, subscription_id: str, subscription_data: SubscriptionUpdate, user: Dict,
                            today: Optional[date] = None) -> SubscriptionResponse:
        """Partial update; changing start date or cycle recalculates the next billing date"""
        today = today or date.today()
        try:
            existing = self._fetch_row(subscription_id, user["id"])
            update_data = subscription_data.model_dump(mode="json", exclude_unset=True)
            if not update_data:
                return SubscriptionResponse(**flatten_joins(existing))

            if "start_date" in update_data or "billing_cycle" in update_data:
                start = parse_date(update_data.get("start_date", existing.get("start_date")))
                cycle = update_data.get("billing_cycle") or existing.get("billing_cycle")
                if start and "next_billing_date" not in update_data:
                    update_data["next_billing_date"] = calculate_next_billing_date(start, cycle, today).isoformat()

            if update_data.get("status") == "cancelled" and not update_data.get("cancelled_date") \
                    and not existing.get("cancelled_date"):
                update_data["cancelled_date"] = today.isoformat()

            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("subscriptions")\
                .update(update_data)\
                .eq("id", subscription_id)\
                .eq("user_id", user["id"])\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Subscription not found")

            name = update_data.get("service_name") or existing.get("service_name")
            self.activity.log_activity(user, "update", "subscription", subscription_id, f"Updated subscription: {name}")
            self.cache.invalidate_after_change(user["id"], "subscription")
            return self.get_subscription(subscription_id, user["id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_subscription(self, subscription_id: str, user: Dict) -> bool:
        """Delete subscription"""
        try:
            existing = self._fetch_row(subscription_id, user["id"])
            result = self.supabase.table("subscriptions")\
                .delete()\
                .eq("id", subscription_id)\
                .eq("user_id", user["id"])\
                .execute()

            self.activity.log_activity(
                user, "delete", "subscription", subscription_id,
                f"Deleted subscription: {existing.get('service_name') or 'Unknown'}"
            )
            self.cache.invalidate_after_change(user["id"], "subscription")
            return len(result.data or []) > 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_cost_summary(self, subscription_id: str, user_id: str,
                         today: Optional[date] = None) -> SubscriptionCostSummary:
        """Normalized, accumulated and current-period figures for one subscription"""
        today = today or date.today()
        row = self.get_subscription(subscription_id, user_id)
        cycle = row.billing_cycle
        tax_rate = row.tax_rate if row.tax_rate is not None else settings.default_tax_rate
        start = row.start_date or (row.created_at.date() if row.created_at else None)
        end = min(row.cancelled_date, today) if row.cancelled_date else today
        period_start = current_period_start(start, cycle, today) if start else None
        current = calculate_pro_rated_amount(row.cost, period_start, cycle, today) if period_start else 0.0
        return SubscriptionCostSummary(
            id=row.id,
            service_name=row.service_name,
            cost=row.cost,
            billing_cycle=cycle,
            monthly_equivalent=monthly_equivalent(row.cost, cycle),
            annual_equivalent=annual_equivalent(row.cost, cycle),
            accumulated_cost=calculate_accumulated_cost(row.cost, start, cycle, end) if start else 0.0,
            current_period_amount=current,
            pro_rated_tax_savings=current * tax_rate / 100,
            tax_rate=tax_rate,
            next_billing_date=row.next_billing_date,
        )
