from pydantic import BaseModel, Field, field_validator
from bizsubs.modules.clients.schemas import validate_hex_color
from typing import Optional, Literal
from datetime import datetime

ProjectStatus = Literal["active", "inactive", "completed"]


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    client_id: Optional[str] = None
    color_hex: str = "#3B82F6"
    status: ProjectStatus = "active"

    @field_validator("color_hex")
    @classmethod
    def check_color(cls, v):
        return validate_hex_color(v)


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    client_id: Optional[str] = None  # Explicit null detaches the project from its client
    color_hex: Optional[str] = None
    status: Optional[ProjectStatus] = None

    @field_validator("color_hex")
    @classmethod
    def check_color(cls, v):
        return validate_hex_color(v)


class ProjectResponse(BaseModel):
    id: str
    user_id: str
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    client_color: Optional[str] = None
    name: str
    description: Optional[str] = None
    color_hex: Optional[str] = "#3B82F6"
    status: str = "active"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectWithCosts(ProjectResponse):
    monthly_cost: float = 0.0
    annual_cost: float = 0.0
    subscription_count: int = 0
    lifetime_deal_count: int = 0
    lifetime_deal_investment: float = 0.0
