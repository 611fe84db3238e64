from supabase import Client
from bizsubs.modules.activity.service import ActivityService
from bizsubs.modules.team.schemas import TeamInviteRequest, TeamRoleUpdate, TeamMemberResponse
from typing import Any, Dict, List
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class TeamService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _get_member_row(self, member_id: str, owner_id: str) -> Dict[str, Any]:
        result = self.supabase.table("team_members")\
            .select("*")\
            .eq("id", member_id)\
            .eq("workspace_owner_id", owner_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Team member not found")
        return result.data

    def list_members(self, owner_id: str) -> List[TeamMemberResponse]:
        """Members and pending invites of the user's workspace"""
        try:
            result = self.supabase.table("team_members")\
                .select("*")\
                .eq("workspace_owner_id", owner_id)\
                .order("invited_at", desc=True)\
                .execute()
            return [TeamMemberResponse(**row) for row in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def invite_member(self, invite: TeamInviteRequest, user: Dict) -> TeamMemberResponse:
        """Create a pending invitation; an email can only be invited once per workspace"""
        try:
            email = invite.email.lower()
            existing = self.supabase.table("team_members")\
                .select("id")\
                .eq("workspace_owner_id", user["id"])\
                .eq("member_email", email)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="This email is already invited or is a team member")

            result = self.supabase.table("team_members").insert({
                "workspace_owner_id": user["id"],
                "member_email": email,
                "role": invite.role,
                "status": "pending",
                "invited_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to invite team member")

            member = result.data[0]
            self.activity.log_activity(
                user, "create", "team_member", member["id"], f"Invited {email} as {invite.role}"
            )
            return TeamMemberResponse(**member)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_role(self, member_id: str, role_data: TeamRoleUpdate, user: Dict) -> TeamMemberResponse:
        """Change a member's role"""
        try:
            existing = self._get_member_row(member_id, user["id"])
            result = self.supabase.table("team_members")\
                .update({"role": role_data.role})\
                .eq("id", member_id)\
                .eq("workspace_owner_id", user["id"])\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Team member not found")

            self.activity.log_activity(
                user, "update", "team_member", member_id,
                f"Changed role of {existing['member_email']} to {role_data.role}"
            )
            return TeamMemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_member(self, member_id: str, user: Dict) -> bool:
        """Remove a member or revoke a pending invite"""
        try:
            existing = self._get_member_row(member_id, user["id"])
            result = self.supabase.table("team_members")\
                .delete()\
                .eq("id", member_id)\
                .eq("workspace_owner_id", user["id"])\
                .execute()

            self.activity.log_activity(
                user, "delete", "team_member", member_id, f"Removed {existing['member_email']} from the team"
            )
            return len(result.data or []) > 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
