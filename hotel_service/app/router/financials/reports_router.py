from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import allow_roles, require_permission
from shared.core.database import get_db
from shared.utils.enums import STAFF_ROLES, Permission
from ...crud.financials import reports_crud as crud
from ...schemas.financials.reports_schemas import (
    CustomReport, CustomReportRequest, DailyReport, DashboardStats, MonthlyReport,
    MonthlyReportRequest, WeeklyReport, WeeklyReportRequest
)

router = APIRouter(
    prefix="/api/reports",
    tags=["reports"],
    dependencies=[
        Depends(allow_roles(*STAFF_ROLES)),
        Depends(require_permission(Permission.VIEW_REPORTS.value)),
    ],
)


@router.get("/daily", response_model=DailyReport)
def daily_report(
    report_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db)
):
    return crud.get_daily_report(db, report_date)


@router.get("/weekly", response_model=WeeklyReport)
def weekly_report(params: WeeklyReportRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_weekly_report(db, params.start_date)


@router.get("/monthly", response_model=MonthlyReport)
def monthly_report(params: MonthlyReportRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_monthly_report(db, params.year, params.month)


@router.get("/custom", response_model=CustomReport)
def custom_report(params: CustomReportRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_custom_report(db, params.start_date, params.end_date, params.report_type)


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(db: Session = Depends(get_db)):
    return crud.get_dashboard_stats(db)
