from fastapi import APIRouter, Depends, Query
from bizsubs.modules.activity.schemas import ActivityLogResponse
from bizsubs.modules.activity.service import ActivityService
from bizsubs.core.dependencies import get_current_user, get_activity_service
from typing import List, Dict

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("", response_model=List[ActivityLogResponse])
def list_activity(
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service)
):
    """Audit trail of the current user's changes, newest first"""
    return service.list_activity(current_user["id"], limit)
