from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, allow_roles, require_permission
from shared.core.database import get_db
from shared.core.schemas import ExportResponse, JsonOutResult, UserToken
from shared.helpers.audit_helper import get_request_meta
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import STAFF_ROLES, Permission
from ...crud.financials import payments_crud as crud
from ...schemas.financials.payments_schemas import (
    FinancialReport, FinancialReportRequest, PaymentCreate, PaymentFail, PaymentListResponse,
    PaymentOut, PaymentProcess, PaymentRefund, PaymentRequest, ReservationPaymentSummary
)

router = APIRouter(
    prefix="/api/payments",
    tags=["payments"],
    dependencies=[
        Depends(allow_roles(*STAFF_ROLES)),
        Depends(require_permission(Permission.PROCESS_PAYMENTS.value)),
    ],
)


# ----------------- Create Payment -----------------
@router.post("/", response_model=JsonOutResult[PaymentOut], status_code=201)
def create_payment(
    payment: PaymentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_roles(*STAFF_ROLES))
):
    result = crud.create_payment(db, payment, current_user, get_request_meta(request))
    return success_response(data=result, message="Payment recorded successfully",
                            status_code=AppStatusCode.CREATED_SUCCESSFULLY)


# ----------------- Listing -----------------
@router.get("/", response_model=PaymentListResponse)
def read_payments(params: PaymentRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_payments(db, params)


@router.get("/export", response_model=ExportResponse)
def export_payments(params: PaymentRequest = Depends(), db: Session = Depends(get_db)):
    return crud.export_payments(db, params)


@router.get("/reservation/{reservation_id}", response_model=ReservationPaymentSummary)
def reservation_payments(reservation_id: int, db: Session = Depends(get_db)):
    return crud.get_reservation_payment_summary(db, reservation_id)


@router.get("/financial-report", response_model=FinancialReport)
def financial_report(params: FinancialReportRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_financial_report(db, params)


@router.get("/{payment_id}", response_model=PaymentOut)
def read_payment(payment_id: int, db: Session = Depends(get_db)):
    return PaymentOut.model_validate(crud.get_payment_or_404(db, payment_id))


# ----------------- Transitions -----------------
@router.put("/{payment_id}/process", response_model=JsonOutResult[PaymentOut])
def process_payment(
    payment_id: int,
    request: Request,
    data: PaymentProcess = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_roles(*STAFF_ROLES))
):
    result = crud.process_payment(db, payment_id, data or PaymentProcess(),
                                  current_user, get_request_meta(request))
    return success_response(data=result, message="Payment processed successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.put("/{payment_id}/fail", response_model=JsonOutResult[PaymentOut])
def fail_payment(
    payment_id: int,
    request: Request,
    data: PaymentFail = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_roles(*STAFF_ROLES))
):
    result = crud.fail_payment(db, payment_id, data or PaymentFail(),
                               current_user, get_request_meta(request))
    return success_response(data=result, message="Payment marked as failed",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.put("/{payment_id}/refund", response_model=JsonOutResult[PaymentOut])
def refund_payment(
    payment_id: int,
    data: PaymentRefund,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = crud.refund_payment(db, payment_id, data, current_user, get_request_meta(request))
    return success_response(data=result, message="Payment refunded successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)
