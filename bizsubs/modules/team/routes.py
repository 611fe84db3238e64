from fastapi import APIRouter, Depends
from bizsubs.database.supabase_client import get_supabase
from bizsubs.modules.team.schemas import TeamInviteRequest, TeamRoleUpdate, TeamMemberResponse
from bizsubs.modules.team.service import TeamService
from bizsubs.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/team", tags=["team"])


def get_team_service(supabase: Client = Depends(get_supabase)) -> TeamService:
    return TeamService(supabase)


@router.get("", response_model=List[TeamMemberResponse])
def list_team_members(
    current_user: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """List members of the current user's workspace"""
    return service.list_members(current_user["id"])


@router.post("", response_model=TeamMemberResponse, status_code=201)
def invite_team_member(
    invite: TeamInviteRequest,
    current_user: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Invite a member by email"""
    return service.invite_member(invite, current_user)


@router.put("/{member_id}", response_model=TeamMemberResponse)
def update_team_member_role(
    member_id: str,
    role_data: TeamRoleUpdate,
    current_user: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Change a member's role"""
    return service.update_role(member_id, role_data, current_user)


@router.delete("/{member_id}", status_code=204)
def remove_team_member(
    member_id: str,
    current_user: Dict = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Remove a member from the workspace"""
    service.remove_member(member_id, current_user)
    return None
