from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Literal
from datetime import date, datetime

from bizsubs.core.dates import strict_request_date

DealStatus = Literal["active", "resold", "shutdown"]
Currency = Literal["USD", "EUR", "GBP", "CAD"]


class LifetimeDealCreate(BaseModel):
    service_name: str = Field(min_length=1)
    original_cost: float = Field(ge=0)
    purchase_date: date
    category: str = "software"
    status: DealStatus = "active"
    currency: Currency = "USD"
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    business_expense: bool = True
    tax_deductible: bool = True
    tax_rate: Optional[float] = Field(default=None, ge=0, le=100)
    resold_price: Optional[float] = Field(default=None, ge=0)
    resold_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("purchase_date", "resold_date", mode="before")
    @classmethod
    def check_date_format(cls, value):
        return strict_request_date(value)

    @model_validator(mode="after")
    def require_resold_price(self):
        if self.status == "resold" and self.resold_price is None:
            raise ValueError("resold_price is required when status is 'resold'")
        return self


class LifetimeDealUpdate(BaseModel):
    service_name: Optional[str] = Field(default=None, min_length=1)
    original_cost: Optional[float] = Field(default=None, ge=0)
    purchase_date: Optional[date] = None
    category: Optional[str] = None
    status: Optional[DealStatus] = None
    currency: Optional[Currency] = None
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    business_expense: Optional[bool] = None
    tax_deductible: Optional[bool] = None
    tax_rate: Optional[float] = Field(default=None, ge=0, le=100)
    resold_price: Optional[float] = Field(default=None, ge=0)
    resold_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("purchase_date", "resold_date", mode="before")
    @classmethod
    def check_date_format(cls, value):
        return strict_request_date(value)


class LifetimeDealResponse(BaseModel):
    id: str
    user_id: str
    service_name: str
    original_cost: float
    purchase_date: date
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
    resold_price: Optional[float] = None
    resold_date: Optional[date] = None
    profit_loss: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PortfolioSummary(BaseModel):
    total_invested: float
    total_resold: float
    realized_gains: float
    active_deals_value: float
    total_deals: int
    active_deals: int
    resold_deals: int
    roi_percent: float
