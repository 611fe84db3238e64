from fastapi import APIRouter, Depends
from bizsubs.database.supabase_client import get_supabase
from bizsubs.modules.subscriptions.schemas import (
    SubscriptionCreate, SubscriptionUpdate, SubscriptionResponse, SubscriptionCostSummary
)
from bizsubs.modules.subscriptions.service import SubscriptionService
from bizsubs.core.dependencies import get_current_user
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


def get_subscription_service(supabase: Client = Depends(get_supabase)) -> SubscriptionService:
    return SubscriptionService(supabase)


@router.get("", response_model=List[SubscriptionResponse])
def list_subscriptions(
    status: Optional[str] = None,
    client_id: Optional[str] = None,
    category: Optional[str] = None,
    current_user: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """List subscriptions; pass 'all' or omit a filter to skip it"""
    return service.list_subscriptions(current_user["id"], status=status, client_id=client_id, category=category)


@router.post("", response_model=SubscriptionResponse, status_code=201)
def create_subscription(
    subscription_data: SubscriptionCreate,
    current_user: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Create a new subscription"""
    return service.create_subscription(subscription_data, current_user)


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
def get_subscription(
    subscription_id: str,
    current_user: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Get subscription by ID"""
    return service.get_subscription(subscription_id, current_user["id"])


@router.put("/{subscription_id}", response_model=SubscriptionResponse)
def update_subscription(
    subscription_id: str,
    subscription_data: SubscriptionUpdate,
    current_user: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Update subscription"""
    return service.update_subscription(subscription_id, subscription_data, current_user)


@router.delete("/{subscription_id}", status_code=204)
def delete_subscription(
    subscription_id: str,
    current_user: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Delete subscription"""
    service.delete_subscription(subscription_id, current_user)
    return None


@router.get("/{subscription_id}/cost-summary", response_model=SubscriptionCostSummary)
def get_cost_summary(
    subscription_id: str,
    current_user: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Normalized, accumulated and pro-rated cost figures"""
    return service.get_cost_summary(subscription_id, current_user["id"])
