from fastapi import APIRouter, Depends, Query
from bizsubs.database.supabase_client import get_supabase
from bizsubs.modules.activity.schemas import ActivityLogResponse
from bizsubs.modules.dashboard.schemas import DashboardMetrics, UpcomingRenewal
from bizsubs.modules.dashboard.service import DashboardService
from bizsubs.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_service(supabase: Client = Depends(get_supabase)) -> DashboardService:
    return DashboardService(supabase)


@router.get("/metrics", response_model=DashboardMetrics)
def get_metrics(
    current_user: Dict = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Key metric cards"""
    return service.get_metrics(current_user["id"])


@router.get("/renewals", response_model=List[UpcomingRenewal])
def get_upcoming_renewals(
    days: int = Query(30, ge=1, le=365),
    current_user: Dict = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Upcoming renewals within the given number of days"""
    return service.get_upcoming_renewals(current_user["id"], days)


@router.get("/activity", response_model=List[ActivityLogResponse])
def get_recent_activity(
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Most recent activity"""
    return service.get_recent_activity(current_user["id"], limit)
