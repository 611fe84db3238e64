from fastapi import APIRouter, Depends
from bizsubs.database.supabase_client import get_supabase
from bizsubs.modules.lifetime_deals.schemas import (
    LifetimeDealCreate, LifetimeDealUpdate, LifetimeDealResponse, PortfolioSummary
)
from bizsubs.modules.lifetime_deals.service import LifetimeDealService
from bizsubs.core.dependencies import get_current_user
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/lifetime-deals", tags=["lifetime-deals"])


def get_lifetime_deal_service(supabase: Client = Depends(get_supabase)) -> LifetimeDealService:
    return LifetimeDealService(supabase)


@router.get("", response_model=List[LifetimeDealResponse])
def list_lifetime_deals(
    status: Optional[str] = None,
    client_id: Optional[str] = None,
    category: Optional[str] = None,
    current_user: Dict = Depends(get_current_user),
    service: LifetimeDealService = Depends(get_lifetime_deal_service)
):
    """List lifetime deals, newest purchase first"""
    return service.list_deals(current_user["id"], status=status, client_id=client_id, category=category)


@router.post("", response_model=LifetimeDealResponse, status_code=201)
def create_lifetime_deal(
    deal_data: LifetimeDealCreate,
    current_user: Dict = Depends(get_current_user),
    service: LifetimeDealService = Depends(get_lifetime_deal_service)
):
    """Record a lifetime deal purchase"""
    return service.create_deal(deal_data, current_user)


@router.get("/portfolio", response_model=PortfolioSummary)
def get_portfolio(
    current_user: Dict = Depends(get_current_user),
    service: LifetimeDealService = Depends(get_lifetime_deal_service)
):
    """Invested, resold and realized gain totals"""
    return service.get_portfolio(current_user["id"])


@router.get("/{deal_id}", response_model=LifetimeDealResponse)
def get_lifetime_deal(
    deal_id: str,
    current_user: Dict = Depends(get_current_user),
    service: LifetimeDealService = Depends(get_lifetime_deal_service)
):
    """Get lifetime deal by ID"""
    return service.get_deal(deal_id, current_user["id"])


@router.put("/{deal_id}", response_model=LifetimeDealResponse)
def update_lifetime_deal(
    deal_id: str,
    deal_data: LifetimeDealUpdate,
    current_user: Dict = Depends(get_current_user),
    service: LifetimeDealService = Depends(get_lifetime_deal_service)
):
    """Update lifetime deal"""
    return service.update_deal(deal_id, deal_data, current_user)


@router.delete("/{deal_id}", status_code=204)
def delete_lifetime_deal(
    deal_id: str,
    current_user: Dict = Depends(get_current_user),
    service: LifetimeDealService = Depends(get_lifetime_deal_service)
):
    """Delete lifetime deal"""
    service.delete_deal(deal_id, current_user)
    return None
