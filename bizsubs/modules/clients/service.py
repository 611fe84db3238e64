from supabase import Client
from bizsubs.core import cache as cache_keys
from bizsubs.core.cache import QueryCache, get_query_cache
from bizsubs.core.costs import cost_breakdown, profitability, rollup_costs
from bizsubs.modules.activity.service import ActivityService
from bizsubs.modules.clients.schemas import (
    ClientCreate, ClientUpdate, ClientResponse, ClientWithCosts, ClientProfitability, CostBreakdownRow
)
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class ClientService:
    def __init__(self, supabase: Client, cache: Optional[QueryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_query_cache()
        self.activity = ActivityService(supabase)

    def _client_rows(self, user_id: str, status: Optional[str] = "active") -> List[Dict[str, Any]]:
        query = self.supabase.table("clients").select("*").eq("user_id", user_id)
        if status and status != "all":
            query = query.eq("status", status)
        result = query.order("name", desc=False).execute()
        return result.data or []

    def _item_rows(self, user_id: str):
        """Active subscriptions and lifetime deals, the inputs of every cost roll-up"""
        subs = self.supabase.table("subscriptions")\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("status", "active")\
            .execute()
        deals = self.supabase.table("lifetime_deals")\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("status", "active")\
            .execute()
        return subs.data or [], deals.data or []

    def list_clients(self, user_id: str, status: Optional[str] = "active") -> List[ClientResponse]:
        """List clients by name; status 'all' includes inactive ones"""
        try:
            return self.cache.get_or_load(
                (user_id, cache_keys.CLIENTS, "list", status or "active"),
                lambda: [ClientResponse(**row) for row in self._client_rows(user_id, status)],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_client(self, client_id: str, user_id: str) -> ClientResponse:
        """Get client by ID"""
        try:
            result = self.supabase.table("clients")\
                .select("*")\
                .eq("id", client_id)\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Client not found")
            return ClientResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_client(self, client_data: ClientCreate, user: Dict) -> ClientResponse:
        """Create a new client"""
        try:
            insert_data = client_data.model_dump(mode="json")
            insert_data["user_id"] = user["id"]
            result = self.supabase.table("clients").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create client")

            client = result.data[0]
            self.activity.log_activity(user, "create", "client", client["id"], f"Created client: {client_data.name}")
            self.cache.invalidate_after_change(user["id"], "client")
            return ClientResponse(**client)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_client(self, client_id: str, client_data: ClientUpdate, user: Dict) -> ClientResponse:
        """Update client"""
        try:
            update_data = client_data.model_dump(mode="json", exclude_none=True)
            if not update_data:
                return self.get_client(client_id, user["id"])
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("clients")\
                .update(update_data)\
                .eq("id", client_id)\
                .eq("user_id", user["id"])\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Client not found")

            client = result.data[0]
            self.activity.log_activity(user, "update", "client", client_id, f"Updated client: {client['name']}")
            self.cache.invalidate_after_change(user["id"], "client")
            return ClientResponse(**client)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_client(self, client_id: str, user: Dict) -> bool:
        """Delete client; assigned subscriptions and deals are unassigned by the database"""
        try:
            existing = self.get_client(client_id, user["id"])
            result = self.supabase.table("clients")\
                .delete()\
                .eq("id", client_id)\
                .eq("user_id", user["id"])\
                .execute()

            self.activity.log_activity(user, "delete", "client", client_id, f"Deleted client: {existing.name}")
            self.cache.invalidate_after_change(user["id"], "client")
            return len(result.data or []) > 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _costed_rows(self, user_id: str) -> List[Dict[str, Any]]:
        subs, deals = self._item_rows(user_id)
        return rollup_costs(self._client_rows(user_id, "active"), subs, deals, "client_id")

    def get_clients_with_costs(self, user_id: str) -> List[ClientWithCosts]:
        """Active clients with normalized monthly and annual subscription cost"""
        try:
            return self.cache.get_or_load(
                (user_id, cache_keys.CLIENTS, "costs"),
                lambda: [ClientWithCosts(**row) for row in self._costed_rows(user_id)],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_cost_breakdown(self, user_id: str, client_id: Optional[str] = None) -> List[CostBreakdownRow]:
        """Per-service cost rows for one client or all active clients"""
        try:
            def load():
                subs, deals = self._item_rows(user_id)
                rows = cost_breakdown(self._client_rows(user_id, "all"), subs, deals, "client_id", client_id)
                return [CostBreakdownRow(**row) for row in rows]

            return self.cache.get_or_load((user_id, cache_keys.CLIENTS, "cost-breakdown", client_id), load)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_profitability(self, user_id: str) -> List[ClientProfitability]:
        """Clients ranked by monthly subscription cost"""
        try:
            return self.cache.get_or_load(
                (user_id, cache_keys.CLIENTS, "profitability"),
                lambda: [ClientProfitability(**row) for row in profitability(self._costed_rows(user_id))],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
