from pydantic import BaseModel, model_validator
from typing import List, Optional, Literal
from datetime import date

ReportType = Literal["monthly", "tax", "client", "category"]


class ReportFilters(BaseModel):
    start: date
    end: date
    client_id: Optional[str] = None
    category: Optional[str] = None
    project_id: Optional[str] = None

    @model_validator(mode="after")
    def check_range(self):
        if self.start > self.end:
            raise ValueError("start must be on or before end")
        return self


class MonthlyItem(BaseModel):
    service_name: str
    item_type: Literal["subscription", "lifetime_deal"]
    category: Optional[str] = None
    item_date: Optional[date] = None
    amount: float
    tax_deductible: bool
    tax_savings: float


class MonthlyTotal(BaseModel):
    month: str  # YYYY-MM
    total: float = 0.0
    tax_deductible: float = 0.0
    tax_savings: float = 0.0
    items: List[MonthlyItem] = []


class MonthlyExpenseReport(BaseModel):
    start: date
    end: date
    monthly_totals: List[MonthlyTotal]
    total_expenses: float
    total_tax_deductible: float
    total_tax_savings: float
    subscription_count: int
    lifetime_deal_count: int


class TaxYearSummary(BaseModel):
    financial_year_start: date
    financial_year_end: date
    total_business_expenses: float
    total_tax_deductible: float
    total_tax_savings: float
    average_tax_rate: float


class ClientCost(BaseModel):
    id: str
    name: str
    color_hex: Optional[str] = None
    total_cost: float
    subscription_cost: float
    lifetime_deal_cost: float
    subscription_count: int
    lifetime_deal_count: int


class ClientCostReport(BaseModel):
    client_costs: List[ClientCost]
    total_costs: float


class CategoryTotal(BaseModel):
    category: str
    total: float
    count: int


class CategoryBreakdownReport(BaseModel):
    categories: List[CategoryTotal]
    total_expenses: float


class ReportsOverview(BaseModel):
    start: date
    end: date
    total_expenses: float
    total_tax_deductible: float
    total_tax_savings: float
    tax_summary: TaxYearSummary
    top_categories: List[CategoryTotal]
    top_clients: List[ClientCost]
