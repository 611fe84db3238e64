from fastapi import APIRouter, Depends, HTTPException
from bizsubs.database.supabase_client import get_supabase
from bizsubs.core.csv_export import csv_response
from bizsubs.modules.reports.schemas import (
    CategoryBreakdownReport, ClientCostReport, MonthlyExpenseReport, ReportFilters, ReportType,
    ReportsOverview, TaxYearSummary
)
from bizsubs.modules.reports.service import ReportService
from bizsubs.core.dependencies import get_current_user
from pydantic import ValidationError
from supabase import Client
from typing import Dict, Optional
from datetime import date

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_service(supabase: Client = Depends(get_supabase)) -> ReportService:
    return ReportService(supabase)


def get_report_filters(
    start: Optional[date] = None,
    end: Optional[date] = None,
    client_id: Optional[str] = None,
    category: Optional[str] = None,
    project_id: Optional[str] = None,
) -> ReportFilters:
    """Date range defaults to the calendar year so far"""
    today = date.today()
    try:
        return ReportFilters(
            start=start or date(today.year, 1, 1),
            end=end or today,
            client_id=client_id,
            category=category,
            project_id=project_id,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors()[0]["msg"])


@router.get("/monthly", response_model=MonthlyExpenseReport)
def get_monthly_report(
    filters: ReportFilters = Depends(get_report_filters),
    current_user: Dict = Depends(get_current_user),
    service: ReportService = Depends(get_report_service)
):
    """Monthly expense report"""
    return service.monthly_report(current_user["id"], filters)


@router.get("/tax-year", response_model=TaxYearSummary)
def get_tax_year_summary(
    current_user: Dict = Depends(get_current_user),
    service: ReportService = Depends(get_report_service)
):
    """Summary of the current financial year"""
    return service.tax_year_summary(current_user["id"])


@router.get("/clients", response_model=ClientCostReport)
def get_client_cost_report(
    filters: ReportFilters = Depends(get_report_filters),
    current_user: Dict = Depends(get_current_user),
    service: ReportService = Depends(get_report_service)
):
    """Client cost allocation"""
    return service.client_costs(current_user["id"], filters)


@router.get("/categories", response_model=CategoryBreakdownReport)
def get_category_breakdown(
    filters: ReportFilters = Depends(get_report_filters),
    current_user: Dict = Depends(get_current_user),
    service: ReportService = Depends(get_report_service)
):
    """Expenses by category"""
    return service.category_breakdown(current_user["id"], filters)


@router.get("/overview", response_model=ReportsOverview)
def get_overview(
    filters: ReportFilters = Depends(get_report_filters),
    current_user: Dict = Depends(get_current_user),
    service: ReportService = Depends(get_report_service)
):
    """Totals, tax summary, top categories and top clients"""
    return service.overview(current_user["id"], filters)


@router.get("/{report_type}/export")
def export_report(
    report_type: ReportType,
    filters: ReportFilters = Depends(get_report_filters),
    current_user: Dict = Depends(get_current_user),
    service: ReportService = Depends(get_report_service)
):
    """Download a report as CSV"""
    content, filename = service.export_csv(current_user["id"], report_type, filters)
    return csv_response(content, filename)
