from supabase import Client
from bizsubs.modules.activity.schemas import ActivityLogResponse
from typing import Dict, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class ActivityService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def log_activity(
        self,
        user: Dict,
        action_type: str,
        resource_type: str,
        resource_id: Optional[str],
        description: str,
    ) -> None:
        """Record an audit entry. Failures are logged and never fail the calling write."""
        try:
            self.supabase.table("activity_logs").insert({
                "user_id": user["id"],
                "user_email": user.get("email") or "",
                "action_type": action_type,
                "resource_type": resource_type,
                "resource_id": resource_id,
                "description": description,
            }).execute()
        except Exception as e:
            logger.error(f"Activity logging failed for {resource_type} {resource_id}: {e}")

    def list_activity(self, user_id: str, limit: int = 10) -> List[ActivityLogResponse]:
        """Most recent activity first"""
        try:
            result = self.supabase.table("activity_logs")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("timestamp", desc=True)\
                .limit(limit)\
                .execute()
            return [ActivityLogResponse(**row) for row in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
