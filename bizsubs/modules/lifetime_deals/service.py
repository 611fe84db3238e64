from supabase import Client
from bizsubs.config.settings import settings
from bizsubs.core import cache as cache_keys
from bizsubs.core.billing import realized_gain
from bizsubs.core.cache import QueryCache, freeze, get_query_cache
from bizsubs.modules.activity.service import ActivityService
from bizsubs.modules.subscriptions.service import SELECT_WITH_JOINS, apply_list_filters, flatten_joins
from bizsubs.modules.lifetime_deals.schemas import (
    LifetimeDealCreate, LifetimeDealUpdate, LifetimeDealResponse, PortfolioSummary
)
from typing import Any, Dict, Iterable, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def summarize_portfolio(deals: Iterable[Dict[str, Any]]) -> PortfolioSummary:
    """Investment, resale and gain totals over a user's lifetime deals"""
    deals = list(deals)
    resold = [d for d in deals if d.get("status") == "resold" and d.get("resold_price") is not None]
    active = [d for d in deals if d.get("status") == "active"]

    resold_basis = sum(float(d["original_cost"]) for d in resold)
    gains = sum(realized_gain(d["original_cost"], d["resold_price"]) for d in resold)
    return PortfolioSummary(
        total_invested=sum(float(d.get("original_cost") or 0) for d in deals),
        total_resold=sum(float(d["resold_price"]) for d in resold),
        realized_gains=gains,
        active_deals_value=sum(float(d.get("original_cost") or 0) for d in active),
        total_deals=len(deals),
        active_deals=len(active),
        resold_deals=len(resold),
        roi_percent=(gains / resold_basis * 100) if resold_basis > 0 else 0.0,
    )


def to_response(row: Dict[str, Any]) -> LifetimeDealResponse:
    data = flatten_joins(row)
    if data.get("profit_loss") is None:
        data["profit_loss"] = realized_gain(data["original_cost"], data.get("resold_price"))
    return LifetimeDealResponse(**data)


class LifetimeDealService:
    def __init__(self, supabase: Client, cache: Optional[QueryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_query_cache()
        self.activity = ActivityService(supabase)

    def _fetch_row(self, deal_id: str, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("lifetime_deals")\
            .select(SELECT_WITH_JOINS)\
            .eq("id", deal_id)\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Lifetime deal not found")
        return result.data

    def list_rows(self, user_id: str, status: Optional[str] = None, client_id: Optional[str] = None,
                  category: Optional[str] = None, project_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Raw joined rows, newest purchase first"""
        query = self.supabase.table("lifetime_deals")\
            .select(SELECT_WITH_JOINS)\
            .eq("user_id", user_id)
        query = apply_list_filters(query, {
            "status": status, "client_id": client_id, "category": category, "project_id": project_id,
        })
        result = query.order("purchase_date", desc=True).execute()
        return result.data or []

    def list_deals(self, user_id: str, status: Optional[str] = None, client_id: Optional[str] = None,
                   category: Optional[str] = None) -> List[LifetimeDealResponse]:
        filters = {"status": status, "client_id": client_id, "category": category}
        try:
            return self.cache.get_or_load(
                (user_id, cache_keys.LIFETIME_DEALS, "list", freeze(filters)),
                lambda: [to_response(row) for row in self.list_rows(user_id, **filters)],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_deal(self, deal_id: str, user_id: str) -> LifetimeDealResponse:
        """Get lifetime deal by ID"""
        try:
            return to_response(self._fetch_row(deal_id, user_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_deal(self, deal_data: LifetimeDealCreate, user: Dict) -> LifetimeDealResponse:
        """Record a lifetime deal purchase"""
        try:
            insert_data = deal_data.model_dump(mode="json")
            insert_data["user_id"] = user["id"]
            if deal_data.tax_rate is None:
                insert_data["tax_rate"] = settings.default_tax_rate

            result = self.supabase.table("lifetime_deals").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create lifetime deal")

            created = result.data[0]
            self.activity.log_activity(
                user, "create", "lifetime_deal", created["id"], f"Created lifetime deal: {deal_data.service_name}"
            )
            self.cache.invalidate_after_change(user["id"], "lifetime-deal")
            return self.get_deal(created["id"], user["id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_deal(self, deal_id: str, deal_data: LifetimeDealUpdate, user: Dict) -> LifetimeDealResponse:
        """Partial update; a deal can only be marked resold with a resale price"""
        try:
            existing = self._fetch_row(deal_id, user["id"])
            update_data = deal_data.model_dump(mode="json", exclude_unset=True)
            if not update_data:
                return to_response(existing)

            status = update_data.get("status", existing.get("status"))
            resold_price = update_data.get("resold_price", existing.get("resold_price"))
            if status == "resold" and resold_price is None:
                raise HTTPException(status_code=400, detail="resold_price is required when status is 'resold'")

            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("lifetime_deals")\
                .update(update_data)\
                .eq("id", deal_id)\
                .eq("user_id", user["id"])\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Lifetime deal not found")

            name = update_data.get("service_name") or existing.get("service_name")
            self.activity.log_activity(user, "update", "lifetime_deal", deal_id, f"Updated lifetime deal: {name}")
            self.cache.invalidate_after_change(user["id"], "lifetime-deal")
            return self.get_deal(deal_id, user["id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_deal(self, deal_id: str, user: Dict) -> bool:
        """Delete lifetime deal"""
        try:
            existing = self._fetch_row(deal_id, user["id"])
            result = self.supabase.table("lifetime_deals")\
                .delete()\
                .eq("id", deal_id)\
                .eq("user_id", user["id"])\
                .execute()

            self.activity.log_activity(
                user, "delete", "lifetime_deal", deal_id,
                f"Deleted lifetime deal: {existing.get('service_name') or 'Unknown'}"
            )
            self.cache.invalidate_after_change(user["id"], "lifetime-deal")
            return len(result.data or []) > 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_portfolio(self, user_id: str) -> PortfolioSummary:
        """Gain/loss summary over every lifetime deal"""
        try:
            return self.cache.get_or_load(
                (user_id, cache_keys.LIFETIME_DEALS, "portfolio"),
                lambda: summarize_portfolio(self.list_rows(user_id)),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
