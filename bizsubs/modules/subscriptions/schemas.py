from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Literal
from datetime import date, datetime

from bizsubs.core.dates import strict_request_date

BillingCycle = Literal["weekly", "monthly", "quarterly", "annual"]
SubscriptionStatus = Literal["active", "cancelled", "paused"]
Currency = Literal["USD", "EUR", "GBP", "CAD"]


class SubscriptionCreate(BaseModel):
    service_name: str = Field(min_length=1)
    cost: float = Field(ge=0)
    billing_cycle: BillingCycle = "monthly"
    start_date: Optional[date] = None
    next_billing_date: Optional[date] = None
    cancelled_date: Optional[date] = None
    category: str = "software"
    status: SubscriptionStatus = "active"
    currency: Currency = "USD"
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    business_expense: bool = True
    tax_deductible: bool = True
    tax_rate: Optional[float] = Field(default=None, ge=0, le=100)  # Falls back to the profile's rate
    notes: Optional[str] = None

    @field_validator("start_date", "next_billing_date", "cancelled_date", mode="before")
    @classmethod
    def check_date_format(cls, value):
        return strict_request_date(value)

    @model_validator(mode="after")
    def require_billing_anchor(self):
        if not self.start_date and not self.next_billing_date:
            raise ValueError("Either start_date or next_billing_date must be set")
        return self


class SubscriptionUpdate(BaseModel):
    service_name: Optional[str] = Field(default=None, min_length=1)
    cost: Optional[float] = Field(default=None, ge=0)
    billing_cycle: Optional[BillingCycle] = None
    start_date: Optional[date] = None
    next_billing_date: Optional[date] = None
    cancelled_date: Optional[date] = None
    category: Optional[str] = None
    status: Optional[SubscriptionStatus] = None
    currency: Optional[Currency] = None
    client_id: Optional[str] = None  # Explicit null unassigns
    project_id: Optional[str] = None
    business_expense: Optional[bool] = None
    tax_deductible: Optional[bool] = None
    tax_rate: Optional[float] = Field(default=None, ge=0, le=100)
    notes: Optional[str] = None

    @field_validator("start_date", "next_billing_date", "cancelled_date", mode="before")
    @classmethod
    def check_date_format(cls, value):
        return strict_request_date(value)


class SubscriptionResponse(BaseModel):
    id: str
    user_id: str
    service_name: str
    cost: float
    billing_cycle: str
    start_date: Optional[date] = None
    next_billing_date: Optional[date] = None
    cancelled_date: Optional[date] = None
    category: Optional[str] = "software"
    status: str
    currency: Optional[str] = "USD"
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    client_name: Optional[str] = None
    client_color: Optional[str] = None
    project_name: Optional[str] = None
    business_expense: bool = True
    tax_deductible: bool = True
    tax_rate: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubscriptionCostSummary(BaseModel):
    id: str
    service_name: str
    cost: float
    billing_cycle: str
    monthly_equivalent: float
    annual_equivalent: float
    accumulated_cost: float
    current_period_amount: float
    pro_rated_tax_savings: float
    tax_rate: float
    next_billing_date: Optional[date] = None
