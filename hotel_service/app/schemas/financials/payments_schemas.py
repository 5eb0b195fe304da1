from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from shared.core.schemas import CommonQueryParams, Pagination
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.financial_enum import PaymentMethod, PaymentStatus


# ----------------- Create -----------------
class PaymentCreate(EmptyStringModel):
    reservation_id: int
    amount: float = Field(..., gt=0)
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    notes: Optional[str] = None


# ----------------- Transitions -----------------
class PaymentProcess(EmptyStringModel):
    transaction_id: Optional[str] = None
    notes: Optional[str] = None


class PaymentFail(EmptyStringModel):
    reason: Optional[str] = None


class PaymentRefund(EmptyStringModel):
    # checked in crud so callers get explicit messages
    refund_amount: Optional[float] = None
    reason: Optional[str] = None


# ----------------- Out -----------------
class PaymentOut(BaseModel):
    id: int
    reservation_id: int
    guest_id: int
    amount: float
    payment_method: str
    payment_status: str
    refund_amount: float
    refund_reason: Optional[str] = None
    failure_reason: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_date: Optional[datetime] = None
    processed_by: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ----------------- Request -----------------
class PaymentRequest(CommonQueryParams):
    reservation_id: Optional[int] = None
    guest_id: Optional[int] = None
    payment_status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class FinancialReportRequest(EmptyStringModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# ----------------- List Response -----------------
class PaymentListResponse(BaseModel):
    payments: List[PaymentOut]
    pagination: Pagination


class ReservationPaymentSummary(BaseModel):
    reservation_id: int
    total_amount: float
    total_paid: float
    total_refunded: float
    net_paid: float
    balance_due: float
    payment_count: int
    payment_status: str
    payments: List[PaymentOut]


# ----------------- Financial report -----------------
class FinancialTotals(BaseModel):
    transaction_count: int
    total_revenue: float
    total_refunds: float
    net_revenue: float
    pending_amount: float
    failed_count: int


class FinancialDailyRow(BaseModel):
    day: date
    transaction_count: int
    revenue: float
    refunds: float
    net_revenue: float


class FinancialGroupRow(BaseModel):
    key: str
    transaction_count: int
    total_amount: float


class FinancialReport(BaseModel):
    start_date: date
    end_date: date
    summary: FinancialTotals
    daily: List[FinancialDailyRow]
    by_method: List[FinancialGroupRow]
    by_status: List[FinancialGroupRow]
