from fastapi import APIRouter, Depends
from bizsubs.database.supabase_client import get_supabase
from bizsubs.modules.clients.schemas import (
    ClientCreate, ClientUpdate, ClientResponse, ClientWithCosts, ClientProfitability, CostBreakdownRow
)
from bizsubs.modules.clients.service import ClientService
from bizsubs.core.dependencies import get_current_user
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/clients", tags=["clients"])


def get_client_service(supabase: Client = Depends(get_supabase)) -> ClientService:
    return ClientService(supabase)


@router.get("", response_model=List[ClientResponse])
def list_clients(
    status: Optional[str] = "active",
    current_user: Dict = Depends(get_current_user),
    service: ClientService = Depends(get_client_service)
):
    """List clients (active by default, status=all for every client)"""
    return service.list_clients(current_user["id"], status)


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(
    client_data: ClientCreate,
    current_user: Dict = Depends(get_current_user),
    service: ClientService = Depends(get_client_service)
):
    """Create a new client"""
    return service.create_client(client_data, current_user)


@router.get("/costs", response_model=List[ClientWithCosts])
def get_clients_with_costs(
    current_user: Dict = Depends(get_current_user),
    service: ClientService = Depends(get_client_service)
):
    """Active clients with monthly and annual subscription cost"""
    return service.get_clients_with_costs(current_user["id"])


@router.get("/cost-breakdown", response_model=List[CostBreakdownRow])
def get_cost_breakdown(
    client_id: Optional[str] = None,
    current_user: Dict = Depends(get_current_user),
    service: ClientService = Depends(get_client_service)
):
    """Per-service cost rows, optionally for a single client"""
    return service.get_cost_breakdown(current_user["id"], client_id)


@router.get("/profitability", response_model=List[ClientProfitability])
def get_profitability(
    current_user: Dict = Depends(get_current_user),
    service: ClientService = Depends(get_client_service)
):
    """Clients ranked by monthly cost"""
    return service.get_profitability(current_user["id"])


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: str,
    current_user: Dict = Depends(get_current_user),
    service: ClientService = Depends(get_client_service)
):
    """Get client by ID"""
    return service.get_client(client_id, current_user["id"])


@router.put("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: str,
    client_data: ClientUpdate,
    current_user: Dict = Depends(get_current_user),
    service: ClientService = Depends(get_client_service)
):
    """Update client"""
    return service.update_client(client_id, client_data, current_user)


@router.delete("/{client_id}", status_code=204)
def delete_client(
    client_id: str,
    current_user: Dict = Depends(get_current_user),
    service: ClientService = Depends(get_client_service)
):
    """Delete client"""
    service.delete_client(client_id, current_user)
    return None
