import logging
import uuid
from collections import defaultdict
from datetime import date, datetime, time
from decimal import Decimal
from typing import Dict, List, Optional
from fastapi import status
from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.core.schemas import ExportResponse, Pagination, UserToken
from shared.exporthelper import export_to_excel
from shared.helpers.audit_helper import log_change, snapshot
from shared.helpers.json_response_helper import error_response
from shared.models.staff import Staff
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import AuditAction
from ...enum.financial_enum import COLLECTED_STATUSES, PaymentStatus, can_transition
from ...enum.hospitality_enum import ReservationStatus
from ...models.financials.payments import Payment
from ...models.hospitality.reservations import Reservation
from ...schemas.financials.payments_schemas import (
    FinancialDailyRow, FinancialGroupRow, FinancialReport, FinancialReportRequest, FinancialTotals,
    PaymentCreate, PaymentFail, PaymentOut, PaymentProcess, PaymentRefund, PaymentRequest,
    ReservationPaymentSummary
)
from ..hospitality.reservations_crud import get_reservation_or_404, refresh_payment_status

logger = logging.getLogger(__name__)

PAYMENT_EXPORT_COLUMNS = {
    "id": "Payment ID",
    "reservation_id": "Reservation ID",
    "guest_id": "Guest ID",
    "amount": "Amount",
    "refund_amount": "Refunded",
    "payment_method": "Method",
    "payment_status": "Status",
    "transaction_id": "Transaction ID",
    "payment_date": "Payment Date",
}


def _bad_request(message: str, code: str = AppStatusCode.INVALID_INPUT):
    return error_response(message=message, status_code=code,
                          http_status=status.HTTP_400_BAD_REQUEST)


def day_bounds(start: date, end: date):
    return datetime.combine(start, time.min), datetime.combine(end, time.max)


def _money(value) -> float:
    return float(Decimal(value or 0).quantize(Decimal("0.01")))


def _staff_id(db: Session, current_user: UserToken) -> Optional[int]:
    staff = db.query(Staff.id).filter(Staff.user_id == current_user.user_id).first()
    return staff.id if staff else None


def get_payment_or_404(db: Session, payment_id: int) -> Payment:
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        return error_response(
            message="Payment not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )
    return payment


def _ensure_transition(payment: Payment, target: PaymentStatus):
    if not can_transition(payment.payment_status, target):
        _bad_request(
            f"Cannot change payment from '{payment.payment_status}' to '{target.value}'",
            AppStatusCode.INVALID_STATUS_TRANSITION)


# ----------------- Build Filters -----------------
def build_payment_filters(params: PaymentRequest):
    filters = []

    if params.reservation_id:
        filters.append(Payment.reservation_id == params.reservation_id)

    if params.guest_id:
        filters.append(Payment.guest_id == params.guest_id)

    if params.payment_status:
        filters.append(Payment.payment_status == params.payment_status.value)

    if params.payment_method:
        filters.append(Payment.payment_method == params.payment_method.value)

    if params.start_date:
        filters.append(Payment.payment_date >= datetime.combine(params.start_date, time.min))

    if params.end_date:
        filters.append(Payment.payment_date <= datetime.combine(params.end_date, time.max))

    if params.search:
        filters.append(Payment.transaction_id.ilike(f"%{params.search}%"))
    return filters


# ----------------- Get All Payments -----------------
def get_payments(db: Session, params: PaymentRequest) -> Dict:
    base_query = db.query(Payment).filter(*build_payment_filters(params))
    total = base_query.with_entities(func.count(Payment.id)).scalar()

    payments = (
        base_query
        .order_by(Payment.payment_date.desc(), Payment.id.desc())
        .offset(params.skip)
        .limit(params.take)
        .all()
    )

    return {
        "payments": [PaymentOut.model_validate(p) for p in payments],
        "pagination": Pagination.build(params, total),
    }


def export_payments(db: Session, params: PaymentRequest) -> ExportResponse:
    payments = (
        db.query(Payment)
        .filter(*build_payment_filters(params))
        .order_by(Payment.payment_date.desc())
        .all()
    )
    rows = [PaymentOut.model_validate(p).model_dump(mode="json") for p in payments]
    return export_to_excel(rows, filename="payments.xlsx", column_map=PAYMENT_EXPORT_COLUMNS)


# ----------------- Create Payment -----------------
def create_payment(db: Session, payment: PaymentCreate, current_user: UserToken,
                   request_meta: dict) -> PaymentOut:
    reservation = get_reservation_or_404(db, payment.reservation_id)
    if reservation.status in (ReservationStatus.cancelled.value, ReservationStatus.no_show.value):
        _bad_request(f"Cannot take a payment for a {reservation.status} reservation")

    db_payment = Payment(
        reservation_id=reservation.id,
        guest_id=reservation.guest_id,
        amount=payment.amount,
        payment_method=payment.payment_method.value,
        payment_status=PaymentStatus.pending.value,
        refund_amount=0,
        transaction_id=payment.transaction_id,
        payment_date=datetime.now(),
        processed_by=_staff_id(db, current_user),
        notes=payment.notes,
    )
    db.add(db_payment)
    db.flush()

    log_change(db, "payments", db_payment.id, AuditAction.INSERT,
               new_values=snapshot(db_payment), user_id=current_user.user_id,
               request_meta=request_meta)
    db.commit()
    db.refresh(db_payment)
    return PaymentOut.model_validate(db_payment)


# ----------------- Transitions -----------------
def _save_transition(db: Session, db_payment: Payment, changes: dict,
                     current_user: UserToken, request_meta: dict) -> PaymentOut:
    old_values = snapshot(db_payment)
    for key, value in changes.items():
        setattr(db_payment, key, value)
    db.flush()

    refresh_payment_status(db_payment.reservation)
    log_change(db, "payments", db_payment.id, AuditAction.UPDATE,
               old_values=old_values, new_values=snapshot(db_payment),
               user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    db.refresh(db_payment)
    return PaymentOut.model_validate(db_payment)


def process_payment(db: Session, payment_id: int, data: PaymentProcess,
                    current_user: UserToken, request_meta: dict) -> PaymentOut:
    db_payment = get_payment_or_404(db, payment_id)
    _ensure_transition(db_payment, PaymentStatus.completed)

    transaction_id = data.transaction_id or db_payment.transaction_id \
        or f"TXN-{uuid.uuid4().hex[:12].upper()}"
    changes = {
        "payment_status": PaymentStatus.completed.value,
        "payment_date": datetime.now(),
        "processed_by": _staff_id(db, current_user) or db_payment.processed_by,
        "transaction_id": transaction_id,
    }
    if data.notes:
        changes["notes"] = data.notes

    result = _save_transition(db, db_payment, changes, current_user, request_meta)
    logger.info("Payment %s completed (%s)", payment_id, transaction_id)
    return result


def fail_payment(db: Session, payment_id: int, data: PaymentFail,
                 current_user: UserToken, request_meta: dict) -> PaymentOut:
    db_payment = get_payment_or_404(db, payment_id)
    _ensure_transition(db_payment, PaymentStatus.failed)

    return _save_transition(db, db_payment, {
        "payment_status": PaymentStatus.failed.value,
        "failure_reason": data.reason,
    }, current_user, request_meta)


def refund_payment(db: Session, payment_id: int, data: PaymentRefund,
                   current_user: UserToken, request_meta: dict) -> PaymentOut:
    if data.refund_amount is None or data.refund_amount <= 0:
        _bad_request("Valid refund amount is required", AppStatusCode.REQUIRED_VALIDATION_ERROR)
    if not data.reason:
        _bad_request("Refund reason is required", AppStatusCode.REQUIRED_VALIDATION_ERROR)

    db_payment = get_payment_or_404(db, payment_id)
    if db_payment.payment_status != PaymentStatus.completed.value:
        _bad_request(
            f"Only completed payments can be refunded (current status: '{db_payment.payment_status}')",
            AppStatusCode.INVALID_STATUS_TRANSITION)

    refund = Decimal(str(data.refund_amount)).quantize(Decimal("0.01"))
    amount = Decimal(db_payment.amount)
    if refund > amount:
        _bad_request(f"Refund amount cannot exceed the payment amount of {amount:.2f}")

    target = PaymentStatus.refunded if refund == amount else PaymentStatus.partially_refunded
    _ensure_transition(db_payment, target)

    result = _save_transition(db, db_payment, {
        "payment_status": target.value,
        "refund_amount": refund,
        "refund_reason": data.reason,
    }, current_user, request_meta)
    logger.info("Payment %s %s: %s", payment_id, target.value, refund)
    return result


# ----------------- Reservation Summary -----------------
def get_reservation_payment_summary(db: Session, reservation_id: int) -> ReservationPaymentSummary:
    reservation = get_reservation_or_404(db, reservation_id)
    payments = sorted(reservation.payments, key=lambda p: p.id)

    collected = [p for p in payments if p.payment_status in COLLECTED_STATUSES]
    total_paid = sum((Decimal(p.amount) for p in collected), Decimal(0))
    total_refunded = sum((Decimal(p.refund_amount or 0) for p in payments), Decimal(0))
    net_paid = total_paid - total_refunded
    total_amount = Decimal(reservation.total_amount)

    return ReservationPaymentSummary(
        reservation_id=reservation.id,
        total_amount=_money(total_amount),
        total_paid=_money(total_paid),
        total_refunded=_money(total_refunded),
        net_paid=_money(net_paid),
        balance_due=_money(max(total_amount - net_paid, Decimal(0))),
        payment_count=len(payments),
        payment_status=reservation.payment_status,
        payments=[PaymentOut.model_validate(p) for p in payments],
    )


# ----------------- Financial Report -----------------
def build_financial_report(db: Session, start_date: date, end_date: date) -> FinancialReport:
    start_dt, end_dt = day_bounds(start_date, end_date)
    payments = (
        db.query(Payment)
        .filter(Payment.payment_date >= start_dt, Payment.payment_date <= end_dt)
        .all()
    )

    daily = defaultdict(lambda: {"count": 0, "revenue": Decimal(0), "refunds": Decimal(0)})
    by_method = defaultdict(lambda: {"count": 0, "amount": Decimal(0)})
    by_status = defaultdict(lambda: {"count": 0, "amount": Decimal(0)})
    revenue = refunds = pending = Decimal(0)
    collected_count = failed_count = 0

    for p in payments:
        amount = Decimal(p.amount)
        refunded = Decimal(p.refund_amount or 0)
        by_status[p.payment_status]["count"] += 1
        by_status[p.payment_status]["amount"] += amount

        if p.payment_status == PaymentStatus.pending.value:
            pending += amount
        elif p.payment_status == PaymentStatus.failed.value:
            failed_count += 1

        if p.payment_status not in COLLECTED_STATUSES:
            continue

        collected_count += 1
        revenue += amount
        refunds += refunded
        bucket = daily[p.payment_date.date()]
        bucket["count"] += 1
        bucket["revenue"] += amount
        bucket["refunds"] += refunded
        by_method[p.payment_method]["count"] += 1
        by_method[p.payment_method]["amount"] += amount

    return FinancialReport(
        start_date=start_date,
        end_date=end_date,
        summary=FinancialTotals(
            transaction_count=collected_count,
            total_revenue=_money(revenue),
            total_refunds=_money(refunds),
            net_revenue=_money(revenue - refunds),
            pending_amount=_money(pending),
            failed_count=failed_count,
        ),
        daily=[
            FinancialDailyRow(
                day=day,
                transaction_count=row["count"],
                revenue=_money(row["revenue"]),
                refunds=_money(row["refunds"]),
                net_revenue=_money(row["revenue"] - row["refunds"]),
            )
            for day, row in sorted(daily.items())
        ],
        by_method=[
            FinancialGroupRow(key=key, transaction_count=row["count"], total_amount=_money(row["amount"]))
            for key, row in sorted(by_method.items())
        ],
        by_status=[
            FinancialGroupRow(key=key, transaction_count=row["count"], total_amount=_money(row["amount"]))
            for key, row in sorted(by_status.items())
        ],
    )


def get_financial_report(db: Session, params: FinancialReportRequest) -> FinancialReport:
    if not params.start_date or not params.end_date:
        _bad_request("Start date and end date are required", AppStatusCode.REQUIRED_VALIDATION_ERROR)
    if params.end_date < params.start_date:
        _bad_request("End date must not be before start date", AppStatusCode.INVALID_DATE_RANGE)
    return build_financial_report(db, params.start_date, params.end_date)
