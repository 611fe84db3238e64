from fastapi import APIRouter, Depends
from bizsubs.database.supabase_client import get_supabase
from bizsubs.core.csv_export import csv_response
from bizsubs.modules.clients.schemas import CostBreakdownRow
from bizsubs.modules.projects.schemas import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectWithCosts
from bizsubs.modules.projects.service import ProjectService
from bizsubs.core.dependencies import get_current_user
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_service(supabase: Client = Depends(get_supabase)) -> ProjectService:
    return ProjectService(supabase)


@router.get("", response_model=List[ProjectResponse])
def list_projects(
    status: Optional[str] = "active",
    client_id: Optional[str] = None,
    current_user: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """List projects (active by default), optionally for one client"""
    return service.list_projects(current_user["id"], status, client_id)


@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(
    project_data: ProjectCreate,
    current_user: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Create a new project"""
    return service.create_project(project_data, current_user)


@router.get("/costs", response_model=List[ProjectWithCosts])
def get_projects_with_costs(
    current_user: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Active projects with monthly and annual subscription cost"""
    return service.get_projects_with_costs(current_user["id"])


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str,
    current_user: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Get project by ID"""
    return service.get_project(project_id, current_user["id"])


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    current_user: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Update project"""
    return service.update_project(project_id, project_data, current_user)


@router.delete("/{project_id}", status_code=204)
def delete_project(
    project_id: str,
    current_user: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Delete project"""
    service.delete_project(project_id, current_user)
    return None


@router.get("/{project_id}/cost-breakdown", response_model=List[CostBreakdownRow])
def get_cost_breakdown(
    project_id: str,
    current_user: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Per-service cost rows for a project"""
    return service.get_cost_breakdown(project_id, current_user["id"])


@router.get("/{project_id}/cost-breakdown/export")
def export_cost_breakdown(
    project_id: str,
    current_user: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Download a project's cost breakdown as CSV"""
    content, filename = service.export_breakdown_csv(project_id, current_user["id"])
    return csv_response(content, filename)
