from datetime import date
from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.financial_enum import ReportType


# ----------------- Request -----------------
class WeeklyReportRequest(EmptyStringModel):
    start_date: Optional[date] = None


class MonthlyReportRequest(EmptyStringModel):
    year: Optional[int] = None
    month: Optional[int] = None


class CustomReportRequest(EmptyStringModel):
    start_date: date
    end_date: date
    report_type: ReportType = ReportType.comprehensive


# ----------------- Building blocks -----------------
class OccupancySnapshot(BaseModel):
    total_rooms: int
    occupied_rooms: int
    available_rooms: int
    occupancy_rate: float


class RevenueSnapshot(BaseModel):
    transaction_count: int
    total_revenue: float
    total_refunds: float
    net_revenue: float


class DaySeriesRow(BaseModel):
    day: date
    occupied_rooms: int
    occupancy_rate: float
    check_ins: int
    check_outs: int
    revenue: float


class PaymentMethodRow(BaseModel):
    payment_method: str
    transaction_count: int
    total_amount: float


# ----------------- Out -----------------
class DailyReport(BaseModel):
    report_date: date
    occupancy: OccupancySnapshot
    check_ins: int
    check_outs: int
    revenue: RevenueSnapshot
    new_guests: int
    new_reservations: int


class WeeklyReport(BaseModel):
    week_start: date
    week_end: date
    days: List[DaySeriesRow]
    summary: Dict[str, Any]


class MonthlyReport(BaseModel):
    year: int
    month: int
    period_start: date
    period_end: date
    reservations: Dict[str, int]
    average_occupancy_rate: float
    revenue: RevenueSnapshot
    payment_methods: List[PaymentMethodRow]
    new_guests: int


class CustomReport(BaseModel):
    report_type: str
    start_date: date
    end_date: date
    data: Dict[str, Any]


class DashboardStats(BaseModel):
    total_guests: int
    total_rooms: int
    available_rooms: int
    occupied_rooms: int
    active_reservations: int
    todays_check_ins: int
    todays_check_outs: int
    pending_payments: int
    revenue_this_month: float
