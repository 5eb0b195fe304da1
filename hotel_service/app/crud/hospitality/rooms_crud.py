from datetime import date
from typing import Dict, List, Optional
from fastapi import status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.schemas import Pagination, UserToken
from shared.helpers.audit_helper import log_change, snapshot
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import AuditAction
from ...enum.hospitality_enum import BLOCKING_STATUSES, RoomStatus
from ...models.hospitality.reservations import Reservation
from ...models.hospitality.room_types import RoomType
from ...models.hospitality.rooms import Room
from ...schemas.hospitality.rooms_schemas import (
    AvailabilityRequest, OccupancyDay, OccupancyResponse, RoomCreate, RoomOut,
    RoomRequest, RoomStatusUpdate, RoomUpdate
)
from .availability_crud import average_rate, occupancy_series, unavailable_room_ids_query
from .room_types_crud import get_room_type_or_404

MAX_RANGE_DAYS = 366


def validate_date_range(start_date: date, end_date: date, allow_same_day: bool = False):
    if end_date < start_date or (end_date == start_date and not allow_same_day):
        error_response(
            message="End date must be after start date",
            status_code=AppStatusCode.INVALID_DATE_RANGE,
            http_status=status.HTTP_400_BAD_REQUEST
        )
    if (end_date - start_date).days > MAX_RANGE_DAYS:
        error_response(
            message=f"Date range cannot exceed {MAX_RANGE_DAYS} days",
            status_code=AppStatusCode.INVALID_DATE_RANGE,
            http_status=status.HTTP_400_BAD_REQUEST
        )


# ----------------- Lookups -----------------
def get_room(db: Session, room_id: int) -> Optional[Room]:
    return db.query(Room).filter(Room.id == room_id).first()


def get_room_or_404(db: Session, room_id: int) -> Room:
    room = get_room(db, room_id)
    if not room:
        return error_response(
            message="Room not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )
    return room


def _ensure_unique_number(db: Session, room_number: str, exclude_id: Optional[int] = None):
    query = db.query(Room).filter(func.lower(Room.room_number) == room_number.lower())
    if exclude_id:
        query = query.filter(Room.id != exclude_id)
    if query.first():
        error_response(
            message=f"Room number '{room_number}' already exists",
            status_code=AppStatusCode.DUPLICATE_ADD_ERROR,
            http_status=status.HTTP_409_CONFLICT
        )


# ----------------- Build Filters -----------------
def build_room_filters(params: RoomRequest):
    filters = []
    final_price = RoomType.base_price + Room.price_adjustment

    if not params.include_inactive:
        filters.append(Room.is_active == True)

    if params.room_type_id:
        filters.append(Room.room_type_id == params.room_type_id)

    if params.status:
        filters.append(Room.status == params.status.value)

    if params.floor is not None:
        filters.append(Room.floor == params.floor)

    if params.min_price is not None:
        filters.append(final_price >= params.min_price)

    if params.max_price is not None:
        filters.append(final_price <= params.max_price)

    if params.capacity:
        filters.append(RoomType.max_occupancy >= params.capacity)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(
            or_(
                Room.room_number.ilike(search_term),
                RoomType.name.ilike(search_term),
            )
        )
    return filters


# ----------------- Get All Rooms -----------------
def get_rooms(db: Session, params: RoomRequest) -> Dict:
    base_query = (
        db.query(Room)
        .join(RoomType, Room.room_type_id == RoomType.id)
        .filter(*build_room_filters(params))
    )
    total = base_query.with_entities(func.count(Room.id)).scalar()

    rooms = (
        base_query
        .order_by(Room.floor.asc(), Room.room_number.asc())
        .offset(params.skip)
        .limit(params.take)
        .all()
    )

    return {
        "rooms": [RoomOut.model_validate(r) for r in rooms],
        "pagination": Pagination.build(params, total),
    }


# ----------------- Availability -----------------
def get_available_rooms(db: Session, params: AvailabilityRequest) -> List[RoomOut]:
    validate_date_range(params.start_date, params.end_date)

    query = (
        db.query(Room)
        .join(RoomType, Room.room_type_id == RoomType.id)
        .filter(
            Room.is_active == True,
            Room.status != RoomStatus.maintenance.value,
            Room.id.notin_(unavailable_room_ids_query(params.start_date, params.end_date)),
        )
    )
    if params.room_type_id:
        query = query.filter(Room.room_type_id == params.room_type_id)
    if params.guests:
        query = query.filter(RoomType.max_occupancy >= params.guests)

    rooms = query.order_by(RoomType.base_price.asc(), Room.room_number.asc()).all()
    return [RoomOut.model_validate(r) for r in rooms]


def get_occupancy(db: Session, start_date: date, end_date: date) -> OccupancyResponse:
    validate_date_range(start_date, end_date, allow_same_day=True)
    series = occupancy_series(db, start_date, end_date)

    return OccupancyResponse(
        start_date=start_date,
        end_date=end_date,
        average_occupancy_rate=average_rate(series),
        days=[OccupancyDay(**row) for row in series],
    )


# ----------------- Create Room -----------------
def create_room(db: Session, room: RoomCreate, current_user: UserToken, request_meta: dict) -> RoomOut:
    get_room_type_or_404(db, room.room_type_id)
    _ensure_unique_number(db, room.room_number)

    db_room = Room(**room.model_dump(mode="json"))
    db.add(db_room)
    db.flush()

    log_change(db, "rooms", db_room.id, AuditAction.INSERT,
               new_values=snapshot(db_room), user_id=current_user.user_id,
               request_meta=request_meta)
    db.commit()
    db.refresh(db_room)
    return RoomOut.model_validate(db_room)


# ----------------- Update Room -----------------
def _apply_room_changes(db: Session, db_room: Room, update_data: dict,
                        current_user: UserToken, request_meta: dict) -> RoomOut:
    old_values = snapshot(db_room)
    for key, value in update_data.items():
        setattr(db_room, key, value)
    db.flush()

    log_change(db, "rooms", db_room.id, AuditAction.UPDATE,
               old_values=old_values, new_values=snapshot(db_room),
               user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    db.refresh(db_room)
    return RoomOut.model_validate(db_room)


def update_room(db: Session, room_id: int, room: RoomUpdate,
                current_user: UserToken, request_meta: dict) -> RoomOut:
    db_room = get_room_or_404(db, room_id)
    update_data = room.model_dump(exclude_unset=True, mode="json")

    if update_data.get("room_type_id"):
        get_room_type_or_404(db, update_data["room_type_id"])
    if update_data.get("room_number") and update_data["room_number"] != db_room.room_number:
        _ensure_unique_number(db, update_data["room_number"], exclude_id=room_id)

    return _apply_room_changes(db, db_room, update_data, current_user, request_meta)


def update_room_status(db: Session, room_id: int, room_status: RoomStatusUpdate,
                       current_user: UserToken, request_meta: dict) -> RoomOut:
    db_room = get_room_or_404(db, room_id)
    return _apply_room_changes(db, db_room, {"status": room_status.status.value},
                               current_user, request_meta)


# ----------------- Delete Room -----------------
def delete_room(db: Session, room_id: int, current_user: UserToken, request_meta: dict) -> Dict:
    db_room = get_room_or_404(db, room_id)

    active = db.query(func.count(Reservation.id)).filter(
        Reservation.room_id == room_id,
        Reservation.status.in_(BLOCKING_STATUSES)
    ).scalar() or 0
    if active:
        return error_response(
            message="Cannot delete room with active reservations",
            status_code=AppStatusCode.RESOURCE_IN_USE,
            http_status=status.HTTP_409_CONFLICT
        )

    has_history = db.query(Reservation.id).filter(
        Reservation.room_id == room_id).first()
    old_values = snapshot(db_room)

    # Rooms with past stays stay in place for reporting
    if has_history:
        db_room.is_active = False
        db.flush()
        log_change(db, "rooms", room_id, AuditAction.UPDATE,
                   old_values=old_values, new_values=snapshot(db_room),
                   user_id=current_user.user_id, request_meta=request_meta)
        db.commit()
        return {"id": room_id, "deleted": False, "deactivated": True}

    db.delete(db_room)
    log_change(db, "rooms", room_id, AuditAction.DELETE,
               old_values=old_values, user_id=current_user.user_id,
               request_meta=request_meta)
    db.commit()
    return {"id": room_id, "deleted": True, "deactivated": False}
