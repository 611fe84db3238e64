from supabase import Client
from bizsubs.core import cache as cache_keys
from bizsubs.core.cache import QueryCache, freeze, get_query_cache
from bizsubs.core.costs import cost_breakdown, rollup_costs
from bizsubs.core.csv_export import render_csv
from bizsubs.modules.activity.service import ActivityService
from bizsubs.modules.clients.schemas import CostBreakdownRow
from bizsubs.modules.projects.schemas import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectWithCosts
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

SELECT_WITH_CLIENT = "*, clients(name, color_hex)"

BREAKDOWN_CSV_HEADERS = [
    "Service Name", "Type", "Cost", "Billing Cycle", "Category", "Monthly Equivalent", "Annual Equivalent",
]


def flatten_client(row: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(row)
    client = data.pop("clients", None) or {}
    data["client_name"] = client.get("name")
    data["client_color"] = client.get("color_hex")
    return data


def breakdown_csv(rows: List[CostBreakdownRow]) -> str:
    """Project cost breakdown as CSV, one line per service"""
    return render_csv(BREAKDOWN_CSV_HEADERS, (
        [
            row.service_name,
            row.service_type,
            f"{row.cost:.2f}",
            row.billing_cycle or "",
            row.category or "",
            f"{row.monthly_equivalent:.2f}",
            f"{row.annual_equivalent:.2f}",
        ]
        for row in rows
    ))


class ProjectService:
    def __init__(self, supabase: Client, cache: Optional[QueryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_query_cache()
        self.activity = ActivityService(supabase)

    def _project_rows(self, user_id: str, status: Optional[str] = "active",
                      client_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = self.supabase.table("projects").select(SELECT_WITH_CLIENT).eq("user_id", user_id)
        if status and status != "all":
            query = query.eq("status", status)
        if client_id and client_id != "all":
            query = query.eq("client_id", client_id)
        result = query.order("name", desc=False).execute()
        return [flatten_client(row) for row in (result.data or [])]

    def _item_rows(self, user_id: str):
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

    def list_projects(self, user_id: str, status: Optional[str] = "active",
                      client_id: Optional[str] = None) -> List[ProjectResponse]:
        """List projects by name, optionally for one client"""
        try:
            return self.cache.get_or_load(
                (user_id, cache_keys.PROJECTS, "list", freeze({"status": status, "client_id": client_id})),
                lambda: [ProjectResponse(**row) for row in self._project_rows(user_id, status, client_id)],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_project(self, project_id: str, user_id: str) -> ProjectResponse:
        """Get project by ID"""
        try:
            result = self.supabase.table("projects")\
                .select(SELECT_WITH_CLIENT)\
                .eq("id", project_id)\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Project not found")
            return ProjectResponse(**flatten_client(result.data))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_project(self, project_data: ProjectCreate, user: Dict) -> ProjectResponse:
        """Create a new project"""
        try:
            insert_data = project_data.model_dump(mode="json")
            insert_data["user_id"] = user["id"]
            result = self.supabase.table("projects").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create project")

            project = result.data[0]
            self.activity.log_activity(user, "create", "project", project["id"], f"Created project: {project_data.name}")
            self.cache.invalidate_after_change(user["id"], "project")
            return self.get_project(project["id"], user["id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_project(self, project_id: str, project_data: ProjectUpdate, user: Dict) -> ProjectResponse:
        """Update project"""
        try:
            update_data = project_data.model_dump(mode="json", exclude_unset=True)
            if not update_data:
                return self.get_project(project_id, user["id"])
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("projects")\
                .update(update_data)\
                .eq("id", project_id)\
                .eq("user_id", user["id"])\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")

            self.activity.log_activity(
                user, "update", "project", project_id, f"Updated project: {result.data[0].get('name')}"
            )
            self.cache.invalidate_after_change(user["id"], "project")
            return self.get_project(project_id, user["id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_project(self, project_id: str, user: Dict) -> bool:
        """Delete project"""
        try:
            existing = self.get_project(project_id, user["id"])
            result = self.supabase.table("projects")\
                .delete()\
                .eq("id", project_id)\
                .eq("user_id", user["id"])\
                .execute()

            self.activity.log_activity(user, "delete", "project", project_id, f"Deleted project: {existing.name}")
            self.cache.invalidate_after_change(user["id"], "project")
            return len(result.data or []) > 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_projects_with_costs(self, user_id: str) -> List[ProjectWithCosts]:
        """Active projects with normalized subscription cost and their client"""
        try:
            def load():
                subs, deals = self._item_rows(user_id)
                rows = rollup_costs(self._project_rows(user_id, "active"), subs, deals, "project_id")
                return [ProjectWithCosts(**row) for row in rows]

            return self.cache.get_or_load((user_id, cache_keys.PROJECTS, "costs"), load)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_cost_breakdown(self, project_id: str, user_id: str) -> List[CostBreakdownRow]:
        """Per-service cost rows for one project"""
        project = self.get_project(project_id, user_id)
        try:
            def load():
                subs, deals = self._item_rows(user_id)
                rows = cost_breakdown([project.model_dump()], subs, deals, "project_id", project_id)
                return [CostBreakdownRow(**row) for row in rows]

            return self.cache.get_or_load((user_id, cache_keys.PROJECTS, "cost-breakdown", project_id), load)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def export_breakdown_csv(self, project_id: str, user_id: str) -> tuple:
        """CSV body and download filename for a project's cost breakdown"""
        project = self.get_project(project_id, user_id)
        rows = self.get_cost_breakdown(project_id, user_id)
        return breakdown_csv(rows), f"{project.name}-cost-breakdown.csv"
