from supabase import Client
from bizsubs.modules.preferences.schemas import PreferencesUpdate, PreferencesResponse
from typing import Any, Dict
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _without_nulls(row: Dict[str, Any]) -> Dict[str, Any]:
    # Null JSON columns fall back to the response defaults
    return {k: v for k, v in row.items() if v is not None}


class PreferencesService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_preferences(self, user_id: str) -> PreferencesResponse:
        """Stored preferences, or defaults when the user never saved any"""
        try:
            result = self.supabase.table("user_preferences")\
                .select("*")\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return PreferencesResponse(user_id=user_id)
            return PreferencesResponse(**_without_nulls(result.data))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_date_format(self, user_id: str) -> str:
        try:
            return self.get_preferences(user_id).date_format_preference
        except HTTPException as e:
            logger.warning(f"Falling back to US date format for {user_id}: {e.detail}")
            return "US"

    def update_preferences(self, user_id: str, preferences: PreferencesUpdate) -> PreferencesResponse:
        """Upsert the given fields on user_id"""
        try:
            row = preferences.model_dump(exclude_none=True)
            row["user_id"] = user_id
            row["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("user_preferences")\
                .upsert(row, on_conflict="user_id")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save preferences")
            return PreferencesResponse(**_without_nulls(result.data[0]))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
