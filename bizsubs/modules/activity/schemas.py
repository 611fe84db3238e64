from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

ActionType = Literal["create", "update", "delete"]


class ActivityLogResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    user_email: str
    action_type: ActionType
    resource_type: str
    resource_id: Optional[str] = None
    description: str
    timestamp: datetime

    class Config:
        from_attributes = True
