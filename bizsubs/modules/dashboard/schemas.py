from pydantic import BaseModel
from typing import Optional
from datetime import date


class DashboardMetrics(BaseModel):
    total_monthly_recurring: float
    annual_business_spend: float
    tax_deductible_amount: float
    this_month_renewals: int
    currency: str = "USD"


class UpcomingRenewal(BaseModel):
    id: str
    service_name: str
    cost: float
    currency: Optional[str] = "USD"
    next_billing_date: Optional[date] = None
    billing_cycle: str
    client_name: Optional[str] = None
    client_color: Optional[str] = None
    status: str
