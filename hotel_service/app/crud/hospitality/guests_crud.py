from datetime import date, datetime
from typing import Dict, List, Optional
from fastapi import status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.schemas import Pagination, UserToken
from shared.helpers.audit_helper import log_change, snapshot
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import AuditAction
from ...enum.hospitality_enum import GuestType, ReservationStatus
from ...models.hospitality.guests import Guest
from ...models.hospitality.reservations import Reservation
from ...models.hospitality.rooms import Room
from ...models.hospitality.saved_rooms import SavedRoom
from ...schemas.hospitality.guests_schemas import (
    GuestCreate, GuestHistory, GuestHistoryItem, GuestOut, GuestRequest, GuestStats, GuestUpdate
)
from ...schemas.hospitality.rooms_schemas import RoomOut


# ----------------- Lookups -----------------
def get_guest(db: Session, guest_id: int) -> Optional[Guest]:
    return db.query(Guest).filter(Guest.id == guest_id).first()


def get_guest_or_404(db: Session, guest_id: int) -> Guest:
    guest = get_guest(db, guest_id)
    if not guest:
        return error_response(
            message="Guest not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )
    return guest


def get_guest_by_user(db: Session, user_id: int) -> Optional[Guest]:
    return db.query(Guest).filter(Guest.user_id == user_id).first()


def get_profile(db: Session, current_user: UserToken) -> Guest:
    guest = get_guest_by_user(db, current_user.user_id)
    if not guest:
        return error_response(
            message="Guest profile not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )
    return guest


def _ensure_unique_email(db: Session, email: Optional[str], exclude_id: Optional[int] = None):
    if not email:
        return
    query = db.query(Guest).filter(func.lower(Guest.email) == email.lower())
    if exclude_id:
        query = query.filter(Guest.id != exclude_id)
    if query.first():
        error_response(
            message=f"Guest with email '{email}' already exists",
            status_code=AppStatusCode.DUPLICATE_ADD_ERROR,
            http_status=status.HTTP_409_CONFLICT
        )


# ----------------- Build Filters -----------------
def build_guest_filters(params: GuestRequest):
    filters = []

    if params.guest_type:
        filters.append(Guest.guest_type == params.guest_type.value)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(
            or_(
                Guest.first_name.ilike(search_term),
                Guest.last_name.ilike(search_term),
                Guest.email.ilike(search_term),
                Guest.phone.ilike(search_term),
                Guest.id_number.ilike(search_term),
            )
        )
    return filters


# ----------------- Get All Guests -----------------
def get_guests(db: Session, params: GuestRequest) -> Dict:
    base_query = db.query(Guest).filter(*build_guest_filters(params))
    total = base_query.with_entities(func.count(Guest.id)).scalar()

    guests = (
        base_query
        .order_by(Guest.created_at.desc(), Guest.id.desc())
        .offset(params.skip)
        .limit(params.take)
        .all()
    )

    return {
        "guests": [GuestOut.model_validate(g) for g in guests],
        "pagination": Pagination.build(params, total),
    }


def search_guests(db: Session, q: str, limit: int = 20) -> List[GuestOut]:
    search_term = f"%{q}%"
    guests = (
        db.query(Guest)
        .filter(or_(
            Guest.first_name.ilike(search_term),
            Guest.last_name.ilike(search_term),
            Guest.email.ilike(search_term),
            Guest.phone.ilike(search_term),
        ))
        .order_by(Guest.last_name.asc(), Guest.first_name.asc())
        .limit(limit)
        .all()
    )
    return [GuestOut.model_validate(g) for g in guests]


# ----------------- Create Guest (walk-in) -----------------
def create_guest(db: Session, guest: GuestCreate, current_user: UserToken, request_meta: dict) -> GuestOut:
    _ensure_unique_email(db, guest.email)

    db_guest = Guest(
        **guest.model_dump(),
        guest_type=GuestType.walk_in.value,
        created_by=current_user.user_id,
    )
    db.add(db_guest)
    db.flush()

    log_change(db, "guests", db_guest.id, AuditAction.INSERT,
               new_values=snapshot(db_guest), user_id=current_user.user_id,
               request_meta=request_meta)
    db.commit()
    db.refresh(db_guest)
    return GuestOut.model_validate(db_guest)


# ----------------- Update Guest -----------------
def _apply_guest_update(db: Session, db_guest: Guest, guest_update: GuestUpdate,
                        current_user: UserToken, request_meta: dict) -> GuestOut:
    update_data = guest_update.model_dump(exclude_unset=True)
    if "email" in update_data:
        _ensure_unique_email(db, update_data["email"], exclude_id=db_guest.id)

    old_values = snapshot(db_guest)
    for key, value in update_data.items():
        setattr(db_guest, key, value)
    db.flush()

    log_change(db, "guests", db_guest.id, AuditAction.UPDATE,
               old_values=old_values, new_values=snapshot(db_guest),
               user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    db.refresh(db_guest)
    return GuestOut.model_validate(db_guest)


def update_guest(db: Session, guest_id: int, guest_update: GuestUpdate,
                 current_user: UserToken, request_meta: dict) -> GuestOut:
    db_guest = get_guest_or_404(db, guest_id)
    return _apply_guest_update(db, db_guest, guest_update, current_user, request_meta)


def update_profile(db: Session, guest_update: GuestUpdate,
                   current_user: UserToken, request_meta: dict) -> GuestOut:
    db_guest = get_profile(db, current_user)
    return _apply_guest_update(db, db_guest, guest_update, current_user, request_meta)


# ----------------- Delete Guest -----------------
def delete_guest(db: Session, guest_id: int, current_user: UserToken, request_meta: dict) -> Dict:
    db_guest = get_guest_or_404(db, guest_id)

    has_reservations = db.query(Reservation.id).filter(
        Reservation.guest_id == guest_id).first()
    if has_reservations:
        return error_response(
            message="Cannot delete guest with existing reservations",
            status_code=AppStatusCode.RESOURCE_IN_USE,
            http_status=status.HTTP_409_CONFLICT
        )

    old_values = snapshot(db_guest)
    db.delete(db_guest)
    log_change(db, "guests", guest_id, AuditAction.DELETE,
               old_values=old_values, user_id=current_user.user_id,
               request_meta=request_meta)
    db.commit()
    return {"id": guest_id}


# ----------------- Stats / History -----------------
def get_guest_stats(db: Session) -> GuestStats:
    counts = dict(
        db.query(Guest.guest_type, func.count(Guest.id))
        .group_by(Guest.guest_type)
        .all()
    )
    month_start = datetime.combine(date.today().replace(day=1), datetime.min.time())
    new_this_month = db.query(func.count(Guest.id))\
        .filter(Guest.created_at >= month_start).scalar() or 0

    return GuestStats(
        total_guests=sum(counts.values()),
        online_guests=counts.get(GuestType.online.value, 0),
        walk_in_guests=counts.get(GuestType.walk_in.value, 0),
        new_this_month=new_this_month,
    )


def get_guest_history(db: Session, guest_id: int) -> GuestHistory:
    guest = get_guest_or_404(db, guest_id)
    reservations = (
        db.query(Reservation)
        .filter(Reservation.guest_id == guest_id)
        .order_by(Reservation.check_in_date.desc())
        .all()
    )

    items = [
        GuestHistoryItem(
            reservation_id=r.id,
            room_number=r.room.room_number if r.room else None,
            room_type=r.room.room_type.name if r.room and r.room.room_type else None,
            check_in_date=r.check_in_date,
            check_out_date=r.check_out_date,
            status=r.status,
            total_amount=r.total_amount,
        )
        for r in reservations
    ]
    completed = [r for r in reservations if r.status == ReservationStatus.checked_out.value]

    return GuestHistory(
        guest=GuestOut.model_validate(guest),
        total_stays=len(completed),
        total_spent=float(sum(r.total_amount for r in completed)),
        reservations=items,
    )


# ----------------- Saved Rooms -----------------
def toggle_saved_room(db: Session, current_user: UserToken, room_id: int) -> Dict:
    guest = get_profile(db, current_user)

    room = db.query(Room).filter(Room.id == room_id, Room.is_active == True).first()
    if not room:
        return error_response(
            message="Room not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )

    existing = db.query(SavedRoom).filter(
        SavedRoom.guest_id == guest.id,
        SavedRoom.room_id == room_id
    ).first()

    if existing:
        db.delete(existing)
        db.commit()
        return {"room_id": room_id, "saved": False}

    db.add(SavedRoom(guest_id=guest.id, room_id=room_id))
    db.commit()
    return {"room_id": room_id, "saved": True}


def get_saved_rooms(db: Session, current_user: UserToken) -> List[RoomOut]:
    guest = get_profile(db, current_user)
    saved = (
        db.query(SavedRoom)
        .filter(SavedRoom.guest_id == guest.id)
        .order_by(SavedRoom.created_at.desc())
        .all()
    )
    return [RoomOut.model_validate(s.room) for s in saved]
