from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Literal
from datetime import datetime
import re

ClientStatus = Literal["active", "inactive"]

_HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def validate_hex_color(value: Optional[str]) -> Optional[str]:
    if value is not None and not _HEX_COLOR_RE.match(value):
        raise ValueError("color_hex must look like #RRGGBB")
    return value


class ClientCreate(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    color_hex: str = "#6366f1"
    status: ClientStatus = "active"

    @field_validator("color_hex")
    @classmethod
    def check_color(cls, v):
        return validate_hex_color(v)


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    color_hex: Optional[str] = None
    status: Optional[ClientStatus] = None

    @field_validator("color_hex")
    @classmethod
    def check_color(cls, v):
        return validate_hex_color(v)


class ClientResponse(BaseModel):
    id: str
    user_id: str
    name: str
    email: Optional[str] = None
    color_hex: Optional[str] = "#6366f1"
    status: str = "active"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ClientWithCosts(ClientResponse):
    monthly_cost: float = 0.0
    annual_cost: float = 0.0
    subscription_count: int = 0
    lifetime_deal_count: int = 0
    lifetime_deal_investment: float = 0.0


class ClientProfitability(ClientWithCosts):
    avg_monthly_per_subscription: float = 0.0
    cost_efficiency_score: float = 0.0


class CostBreakdownRow(BaseModel):
    entity_id: str
    entity_name: str
    entity_color: Optional[str] = None
    service_name: str
    service_type: Literal["subscription", "lifetime_deal"]
    cost: float
    billing_cycle: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None
    monthly_equivalent: float
    annual_equivalent: float
