from fastapi import APIRouter, Depends
from bizsubs.database.supabase_client import get_supabase
from bizsubs.modules.preferences.schemas import PreferencesUpdate, PreferencesResponse
from bizsubs.modules.preferences.service import PreferencesService
from bizsubs.core.dependencies import get_current_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/preferences", tags=["preferences"])


def get_preferences_service(supabase: Client = Depends(get_supabase)) -> PreferencesService:
    return PreferencesService(supabase)


@router.get("", response_model=PreferencesResponse)
def get_preferences(
    current_user: Dict = Depends(get_current_user),
    service: PreferencesService = Depends(get_preferences_service)
):
    """Date format and table column preferences"""
    return service.get_preferences(current_user["id"])


@router.put("", response_model=PreferencesResponse)
def update_preferences(
    preferences: PreferencesUpdate,
    current_user: Dict = Depends(get_current_user),
    service: PreferencesService = Depends(get_preferences_service)
):
    """Save preferences; omitted fields keep their stored value"""
    return service.update_preferences(current_user["id"], preferences)
