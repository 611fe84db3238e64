from pydantic import BaseModel, EmailStr
from typing import Optional, Literal
from datetime import datetime

TeamRole = Literal["admin", "member"]


class TeamInviteRequest(BaseModel):
    email: EmailStr
    role: TeamRole = "member"


class TeamRoleUpdate(BaseModel):
    role: TeamRole


class TeamMemberResponse(BaseModel):
    id: str
    workspace_owner_id: str
    member_id: Optional[str] = None
    member_email: str
    role: str
    status: str
    invited_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None

    class Config:
        from_attributes = True
