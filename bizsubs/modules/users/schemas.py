from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime

from bizsubs.core.dates import parse_financial_year_end

Currency = Literal["USD", "EUR", "GBP", "CAD"]
SubscriptionTier = Literal["free", "trial", "business", "business_premium"]


class UserProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    currency_preference: Optional[Currency] = None
    financial_year_end: Optional[str] = None
    tax_rate: Optional[float] = Field(default=None, ge=0, le=100)

    @field_validator("financial_year_end")
    @classmethod
    def check_financial_year_end(cls, value):
        if value is None:
            return value
        month, day = parse_financial_year_end(value)
        return f"{month:02d}-{day:02d}"


class UserProfileResponse(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    subscription_tier: Optional[str] = "trial"
    trial_ends_at: Optional[datetime] = None
    trial_days_remaining: Optional[int] = None
    currency_preference: Optional[str] = "USD"
    financial_year_end: Optional[str] = "12-31"
    tax_rate: Optional[float] = 30.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OnboardingStatusResponse(BaseModel):
    is_complete: bool
    needs_profile: bool
    needs_workspace: bool
    redirect_to: str


class OnboardingProfileRequest(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class OnboardingWorkspaceRequest(BaseModel):
    company_name: str = Field(min_length=1)
    tax_rate: float = Field(default=30.0, ge=0, le=100)

    @field_validator("company_name")
    @classmethod
    def strip_company(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value
