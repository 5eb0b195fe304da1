import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from fastapi import status
from sqlalchemy import asc, cast, desc, func, or_, String
from sqlalchemy.orm import Session

from shared.core.auth import can_manage_resource, is_staff
from shared.core.schemas import Pagination, UserToken
from shared.helpers.audit_helper import log_change, snapshot
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import AuditAction
from ...enum.financial_enum import COLLECTED_STATUSES
from ...enum.hospitality_enum import ReservationPaymentStatus, ReservationStatus, RoomStatus
from ...models.hospitality.guests import Guest
from ...models.hospitality.reservations import Reservation
from ...models.hospitality.rooms import Room
from ...schemas.hospitality.reservations_schemas import (
    PriceCalculationOut, PriceCalculationRequest, ReservationCancel, ReservationCreate,
    ReservationOut, ReservationRequest, ReservationUpdate
)
from .availability_crud import find_conflicting_reservation
from .guests_crud import get_guest_by_user, get_guest_or_404

logger = logging.getLogger(__name__)

REQUIRED_UPDATE_FIELDS = ("room_id", "check_in_date", "check_out_date", "number_of_guests")


# ----------------- Helpers -----------------
def _bad_request(message: str, code: str = AppStatusCode.INVALID_INPUT):
    return error_response(message=message, status_code=code,
                          http_status=status.HTTP_400_BAD_REQUEST)


def _bookable_room(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id, Room.is_active == True).first()
    if not room:
        return error_response(
            message="Room not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )
    return room


def quote(room: Room, check_in: date, check_out: date) -> Dict:
    nights = (check_out - check_in).days
    nightly_price = room.final_price
    return {
        "nights": nights,
        "nightly_price": nightly_price,
        "total_amount": (nightly_price * nights).quantize(Decimal("0.01")),
    }


def _ensure_capacity(room: Room, number_of_guests: int):
    if number_of_guests > room.room_type.max_occupancy:
        _bad_request(
            f"Room capacity exceeded. Maximum {room.room_type.max_occupancy} guests allowed",
            AppStatusCode.CAPACITY_EXCEEDED)


def _ensure_available(db: Session, room_id: int, check_in: date, check_out: date,
                      exclude_id: Optional[int] = None):
    conflict = find_conflicting_reservation(db, room_id, check_in, check_out, exclude_id)
    if conflict:
        error_response(
            message="Room is not available for the selected dates",
            status_code=AppStatusCode.RESERVATION_CONFLICT,
            http_status=status.HTTP_409_CONFLICT
        )


def _resolve_guest(db: Session, current_user: UserToken, guest_id: Optional[int]) -> Guest:
    if is_staff(current_user):
        if not guest_id:
            return _bad_request("guest_id is required", AppStatusCode.REQUIRED_VALIDATION_ERROR)
        return get_guest_or_404(db, guest_id)

    guest = get_guest_by_user(db, current_user.user_id)
    if not guest:
        return error_response(
            message="Guest profile not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )
    if guest_id and guest_id != guest.id:
        return error_response(
            message="You can only book for your own guest profile",
            status_code=AppStatusCode.UNAUTHORIZED_ACTION,
            http_status=status.HTTP_403_FORBIDDEN
        )
    return guest


def get_reservation_or_404(db: Session, reservation_id: int) -> Reservation:
    reservation = db.query(Reservation).filter(Reservation.id == reservation_id).first()
    if not reservation:
        return error_response(
            message="Reservation not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )
    return reservation


def get_reservation_for_user(db: Session, reservation_id: int, current_user: UserToken) -> Reservation:
    reservation = get_reservation_or_404(db, reservation_id)
    owner_id = reservation.guest.user_id if reservation.guest else None
    if not can_manage_resource(current_user, owner_id):
        return error_response(
            message="You do not have access to this reservation",
            status_code=AppStatusCode.UNAUTHORIZED_ACTION,
            http_status=status.HTTP_403_FORBIDDEN
        )
    return reservation


def _require_status(reservation: Reservation, expected: ReservationStatus, action: str):
    if reservation.status != expected.value:
        _bad_request(
            f"Cannot {action} a reservation with status '{reservation.status}'",
            AppStatusCode.INVALID_STATUS_TRANSITION)


def refresh_payment_status(reservation: Reservation) -> str:
    """Derive the reservation payment status from its payments."""
    net_paid = sum(
        (Decimal(p.amount) - Decimal(p.refund_amount or 0)
         for p in reservation.payments if p.payment_status in COLLECTED_STATUSES),
        Decimal(0)
    )
    refunded = sum((Decimal(p.refund_amount or 0) for p in reservation.payments), Decimal(0))
    total = Decimal(reservation.total_amount or 0)

    if total > 0 and net_paid >= total:
        payment_status = ReservationPaymentStatus.paid
    elif net_paid > 0:
        payment_status = ReservationPaymentStatus.partial
    elif refunded > 0:
        payment_status = ReservationPaymentStatus.refunded
    else:
        payment_status = ReservationPaymentStatus.pending

    reservation.payment_status = payment_status.value
    return reservation.payment_status


# ----------------- Price -----------------
def calculate_price(db: Session, request: PriceCalculationRequest) -> PriceCalculationOut:
    room = _bookable_room(db, request.room_id)
    price = quote(room, request.check_in_date, request.check_out_date)
    return PriceCalculationOut(
        room_id=room.id,
        room_number=room.room_number,
        check_in_date=request.check_in_date,
        check_out_date=request.check_out_date,
        **price,
    )


# ----------------- Build Filters -----------------
def build_reservation_filters(params: ReservationRequest):
    filters = []

    if params.status:
        filters.append(Reservation.status == params.status.value)

    if params.payment_status:
        filters.append(Reservation.payment_status == params.payment_status.value)

    if params.guest_id:
        filters.append(Reservation.guest_id == params.guest_id)

    if params.room_id:
        filters.append(Reservation.room_id == params.room_id)

    # stays touching the window
    if params.start_date:
        filters.append(Reservation.check_out_date >= params.start_date)

    if params.end_date:
        filters.append(Reservation.check_in_date <= params.end_date)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(
            or_(
                cast(Reservation.id, String).ilike(search_term),
                Guest.first_name.ilike(search_term),
                Guest.last_name.ilike(search_term),
                Guest.email.ilike(search_term),
                Room.room_number.ilike(search_term),
            )
        )
    return filters


# ----------------- Get All Reservations -----------------
def get_reservations(db: Session, params: ReservationRequest) -> Dict:
    base_query = (
        db.query(Reservation)
        .join(Guest, Reservation.guest_id == Guest.id)
        .join(Room, Reservation.room_id == Room.id)
        .filter(*build_reservation_filters(params))
    )
    total = base_query.with_entities(func.count(Reservation.id)).scalar()

    sort_column = getattr(Reservation, params.sort_by or "created_at")
    order = asc(sort_column) if params.sort_order == "asc" else desc(sort_column)

    reservations = (
        base_query
        .order_by(order, Reservation.id.desc())
        .offset(params.skip)
        .limit(params.take)
        .all()
    )

    return {
        "reservations": [ReservationOut.model_validate(r) for r in reservations],
        "pagination": Pagination.build(params, total),
    }


def get_guest_reservations(db: Session, guest_id: int) -> List[ReservationOut]:
    get_guest_or_404(db, guest_id)
    reservations = (
        db.query(Reservation)
        .filter(Reservation.guest_id == guest_id)
        .order_by(Reservation.check_in_date.desc())
        .all()
    )
    return [ReservationOut.model_validate(r) for r in reservations]


def get_my_reservations(db: Session, current_user: UserToken) -> List[ReservationOut]:
    guest = get_guest_by_user(db, current_user.user_id)
    if not guest:
        return []
    return get_guest_reservations(db, guest.id)


# ----------------- Create Reservation -----------------
def create_reservation(db: Session, data: ReservationCreate, current_user: UserToken,
                       request_meta: dict) -> Reservation:
    if data.check_in_date < date.today():
        _bad_request("Check-in date cannot be in the past", AppStatusCode.INVALID_DATE_RANGE)

    guest = _resolve_guest(db, current_user, data.guest_id)
    room = _bookable_room(db, data.room_id)
    _ensure_capacity(room, data.number_of_guests)
    _ensure_available(db, room.id, data.check_in_date, data.check_out_date)

    price = quote(room, data.check_in_date, data.check_out_date)
    reservation = Reservation(
        guest_id=guest.id,
        room_id=room.id,
        created_by=current_user.user_id,
        check_in_date=data.check_in_date,
        check_out_date=data.check_out_date,
        number_of_guests=data.number_of_guests,
        total_amount=price["total_amount"],
        status=ReservationStatus.confirmed.value,
        payment_status=ReservationPaymentStatus.pending.value,
        special_requests=data.special_requests,
    )
    db.add(reservation)
    db.flush()

    log_change(db, "reservations", reservation.id, AuditAction.INSERT,
               new_values=snapshot(reservation), user_id=current_user.user_id,
               request_meta=request_meta)
    db.commit()
    db.refresh(reservation)

    logger.info("Reservation %s created for guest %s in room %s",
                reservation.id, guest.id, room.room_number)
    return reservation


def confirmation_context(reservation: Reservation) -> Dict:
    return {
        "reservation_id": reservation.id,
        "first_name": reservation.guest.first_name,
        "room_number": reservation.room.room_number,
        "room_type": reservation.room.room_type.name,
        "check_in_date": reservation.check_in_date.isoformat(),
        "check_out_date": reservation.check_out_date.isoformat(),
        "number_of_guests": reservation.number_of_guests,
        "total_amount": f"{Decimal(reservation.total_amount):.2f}",
    }


# ----------------- Update Reservation -----------------
def update_reservation(db: Session, reservation_id: int, data: ReservationUpdate,
                       current_user: UserToken, request_meta: dict) -> ReservationOut:
    reservation = get_reservation_for_user(db, reservation_id, current_user)
    _require_status(reservation, ReservationStatus.confirmed, "modify")

    # blank or null values for required columns keep the stored value
    update_data = {
        key: value for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key not in REQUIRED_UPDATE_FIELDS
    }
    check_in = update_data.get("check_in_date", reservation.check_in_date)
    check_out = update_data.get("check_out_date", reservation.check_out_date)
    if check_out <= check_in:
        _bad_request("Check-out date must be after check-in date", AppStatusCode.INVALID_DATE_RANGE)
    if "check_in_date" in update_data and check_in < date.today():
        _bad_request("Check-in date cannot be in the past", AppStatusCode.INVALID_DATE_RANGE)

    room = _bookable_room(db, update_data.get("room_id") or reservation.room_id)
    guests = update_data.get("number_of_guests") or reservation.number_of_guests
    _ensure_capacity(room, guests)
    _ensure_available(db, room.id, check_in, check_out, exclude_id=reservation.id)

    old_values = snapshot(reservation)
    for key, value in update_data.items():
        setattr(reservation, key, value)
    reservation.room_id = room.id
    reservation.total_amount = quote(room, check_in, check_out)["total_amount"]
    refresh_payment_status(reservation)
    db.flush()

    log_change(db, "reservations", reservation.id, AuditAction.UPDATE,
               old_values=old_values, new_values=snapshot(reservation),
               user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    db.refresh(reservation)
    return ReservationOut.model_validate(reservation)


# ----------------- Status Changes -----------------
def _change_status(db: Session, reservation: Reservation, changes: dict,
                   current_user: UserToken, request_meta: dict,
                   room_status: Optional[RoomStatus] = None) -> ReservationOut:
    old_values = snapshot(reservation)
    for key, value in changes.items():
        setattr(reservation, key, value)
    if room_status:
        reservation.room.status = room_status.value
    db.flush()

    log_change(db, "reservations", reservation.id, AuditAction.UPDATE,
               old_values=old_values, new_values=snapshot(reservation),
               user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    db.refresh(reservation)
    return ReservationOut.model_validate(reservation)


def cancel_reservation(db: Session, reservation_id: int, data: ReservationCancel,
                       current_user: UserToken, request_meta: dict) -> ReservationOut:
    reservation = get_reservation_for_user(db, reservation_id, current_user)
    _require_status(reservation, ReservationStatus.confirmed, "cancel")

    return _change_status(db, reservation, {
        "status": ReservationStatus.cancelled.value,
        "cancellation_reason": data.reason,
    }, current_user, request_meta)


def check_in(db: Session, reservation_id: int, current_user: UserToken,
             request_meta: dict) -> ReservationOut:
    reservation = get_reservation_or_404(db, reservation_id)
    _require_status(reservation, ReservationStatus.confirmed, "check in")

    if date.today() < reservation.check_in_date:
        _bad_request("Cannot check in before the check-in date", AppStatusCode.INVALID_DATE_RANGE)

    return _change_status(db, reservation, {
        "status": ReservationStatus.checked_in.value,
        "actual_check_in": datetime.now(),
    }, current_user, request_meta, room_status=RoomStatus.occupied)


def check_out(db: Session, reservation_id: int, current_user: UserToken,
              request_meta: dict) -> ReservationOut:
    reservation = get_reservation_or_404(db, reservation_id)
    _require_status(reservation, ReservationStatus.checked_in, "check out")

    return _change_status(db, reservation, {
        "status": ReservationStatus.checked_out.value,
        "actual_check_out": datetime.now(),
    }, current_user, request_meta, room_status=RoomStatus.cleaning)


def mark_no_show(db: Session, reservation_id: int, current_user: UserToken,
                 request_meta: dict) -> ReservationOut:
    reservation = get_reservation_or_404(db, reservation_id)
    _require_status(reservation, ReservationStatus.confirmed, "mark as no-show")

    if date.today() <= reservation.check_in_date:
        _bad_request("A reservation can be marked as no-show only after its check-in date",
                     AppStatusCode.INVALID_DATE_RANGE)

    return _change_status(db, reservation, {
        "status": ReservationStatus.no_show.value,
    }, current_user, request_meta)
