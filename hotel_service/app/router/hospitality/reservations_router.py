import logging
from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from shared.core.auth import allow_roles, require_department, restrict_to_hours, validate_current_token
from shared.core.database import get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.audit_helper import get_request_meta
from shared.helpers.email_helper import send_reservation_confirmation
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import STAFF_ROLES
from ...crud.hospitality import reservations_crud as crud
from ...enum.hospitality_enum import FRONT_DESK_DEPARTMENTS
from ...schemas.hospitality.reservations_schemas import (
    PriceCalculationOut, PriceCalculationRequest, ReservationCancel, ReservationCreate,
    ReservationListResponse, ReservationOut, ReservationRequest, ReservationUpdate
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/reservations",
    tags=["reservations"],
    dependencies=[Depends(validate_current_token)],
)

allow_staff = allow_roles(*STAFF_ROLES)
front_desk = [
    Depends(require_department(*FRONT_DESK_DEPARTMENTS)),
    Depends(restrict_to_hours()),
]


@router.post("/calculate-price", response_model=PriceCalculationOut)
def calculate_price(request: PriceCalculationRequest, db: Session = Depends(get_db)):
    return crud.calculate_price(db, request)


# ----------------- Create Reservation -----------------
@router.post("/", response_model=JsonOutResult[ReservationOut], status_code=201)
def create_reservation(
    reservation: ReservationCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    db_reservation = crud.create_reservation(db, reservation, current_user, get_request_meta(request))

    if db_reservation.guest.email:
        background_tasks.add_task(
            send_reservation_confirmation,
            db_reservation.guest.email,
            crud.confirmation_context(db_reservation),
        )
    else:
        logger.info("Reservation %s has no guest email, confirmation not sent", db_reservation.id)

    return success_response(data=ReservationOut.model_validate(db_reservation),
                            message="Reservation created successfully",
                            status_code=AppStatusCode.CREATED_SUCCESSFULLY)


# ----------------- Listing -----------------
@router.get("/my-bookings", response_model=List[ReservationOut])
def my_bookings(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_my_reservations(db, current_user)


@router.get("/", response_model=ReservationListResponse)
def read_reservations(
    params: ReservationRequest = Depends(),
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_staff)
):
    return crud.get_reservations(db, params)


@router.get("/guest/{guest_id}", response_model=List[ReservationOut])
def guest_reservations(
    guest_id: int,
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_staff)
):
    return crud.get_guest_reservations(db, guest_id)


@router.get("/{reservation_id}", response_model=ReservationOut)
def read_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return ReservationOut.model_validate(
        crud.get_reservation_for_user(db, reservation_id, current_user))


# ----------------- Update Reservation -----------------
@router.put("/{reservation_id}", response_model=JsonOutResult[ReservationOut])
def update_reservation(
    reservation_id: int,
    reservation: ReservationUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    result = crud.update_reservation(db, reservation_id, reservation, current_user,
                                     get_request_meta(request))
    return success_response(data=result, message="Reservation updated successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.put("/{reservation_id}/cancel", response_model=JsonOutResult[ReservationOut])
def cancel_reservation(
    reservation_id: int,
    request: Request,
    data: ReservationCancel = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    result = crud.cancel_reservation(db, reservation_id, data or ReservationCancel(),
                                     current_user, get_request_meta(request))
    return success_response(data=result, message="Reservation cancelled successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


# ----------------- Front Desk -----------------
@router.put("/{reservation_id}/check-in", response_model=JsonOutResult[ReservationOut],
            dependencies=front_desk)
def check_in(
    reservation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    result = crud.check_in(db, reservation_id, current_user, get_request_meta(request))
    return success_response(data=result, message="Guest checked in successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.put("/{reservation_id}/check-out", response_model=JsonOutResult[ReservationOut],
            dependencies=front_desk)
def check_out(
    reservation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    result = crud.check_out(db, reservation_id, current_user, get_request_meta(request))
    return success_response(data=result, message="Guest checked out successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.put("/{reservation_id}/no-show", response_model=JsonOutResult[ReservationOut])
def mark_no_show(
    reservation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    result = crud.mark_no_show(db, reservation_id, current_user, get_request_meta(request))
    return success_response(data=result, message="Reservation marked as no-show",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)
