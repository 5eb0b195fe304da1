from datetime import date
from typing import Dict, List, Optional
from fastapi import status
from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.core.schemas import Lookup, UserToken
from shared.helpers.audit_helper import log_change, snapshot
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import AuditAction
from ...enum.hospitality_enum import RoomStatus
from ...models.hospitality.room_types import RoomType
from ...models.hospitality.rooms import Room
from .availability_crud import unavailable_room_ids_query
from ...schemas.hospitality.rooms_schemas import (
    RoomTypeAvailability, RoomTypeCreate, RoomTypeOut, RoomTypeUpdate
)


def get_room_types(db: Session) -> List[RoomTypeOut]:
    room_types = db.query(RoomType).order_by(RoomType.base_price.asc()).all()
    return [RoomTypeOut.model_validate(rt) for rt in room_types]


def room_type_lookup(db: Session) -> List[Lookup]:
    rows = db.query(RoomType.id, RoomType.name).order_by(RoomType.name.asc()).all()
    return [Lookup(id=r.id, name=r.name) for r in rows]


def get_room_type(db: Session, room_type_id: int) -> Optional[RoomType]:
    return db.query(RoomType).filter(RoomType.id == room_type_id).first()


def get_room_type_or_404(db: Session, room_type_id: int) -> RoomType:
    room_type = get_room_type(db, room_type_id)
    if not room_type:
        return error_response(
            message="Room type not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )
    return room_type


def _ensure_unique_name(db: Session, name: str, exclude_id: Optional[int] = None):
    query = db.query(RoomType).filter(func.lower(RoomType.name) == name.lower())
    if exclude_id:
        query = query.filter(RoomType.id != exclude_id)
    if query.first():
        error_response(
            message=f"Room type '{name}' already exists",
            status_code=AppStatusCode.DUPLICATE_ADD_ERROR,
            http_status=status.HTTP_409_CONFLICT
        )


# ----------------- Create Room Type -----------------
def create_room_type(db: Session, room_type: RoomTypeCreate,
                     current_user: UserToken, request_meta: dict) -> RoomTypeOut:
    _ensure_unique_name(db, room_type.name)

    db_room_type = RoomType(**room_type.model_dump())
    db.add(db_room_type)
    db.flush()

    log_change(db, "room_types", db_room_type.id, AuditAction.INSERT,
               new_values=snapshot(db_room_type), user_id=current_user.user_id,
               request_meta=request_meta)
    db.commit()
    db.refresh(db_room_type)
    return RoomTypeOut.model_validate(db_room_type)


# ----------------- Update Room Type -----------------
def update_room_type(db: Session, room_type_id: int, room_type: RoomTypeUpdate,
                     current_user: UserToken, request_meta: dict) -> RoomTypeOut:
    db_room_type = get_room_type_or_404(db, room_type_id)
    update_data = room_type.model_dump(exclude_unset=True)

    if update_data.get("name") and update_data["name"] != db_room_type.name:
        _ensure_unique_name(db, update_data["name"], exclude_id=room_type_id)

    old_values = snapshot(db_room_type)
    for key, value in update_data.items():
        setattr(db_room_type, key, value)
    db.flush()

    log_change(db, "room_types", room_type_id, AuditAction.UPDATE,
               old_values=old_values, new_values=snapshot(db_room_type),
               user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    db.refresh(db_room_type)
    return RoomTypeOut.model_validate(db_room_type)


# ----------------- Delete Room Type -----------------
def delete_room_type(db: Session, room_type_id: int,
                     current_user: UserToken, request_meta: dict) -> Dict:
    db_room_type = get_room_type_or_404(db, room_type_id)

    room_count = db.query(func.count(Room.id))\
        .filter(Room.room_type_id == room_type_id).scalar() or 0
    if room_count:
        return error_response(
            message=f"Cannot delete room type with {room_count} room(s) assigned",
            status_code=AppStatusCode.RESOURCE_IN_USE,
            http_status=status.HTTP_409_CONFLICT
        )

    old_values = snapshot(db_room_type)
    db.delete(db_room_type)
    log_change(db, "room_types", room_type_id, AuditAction.DELETE,
               old_values=old_values, user_id=current_user.user_id,
               request_meta=request_meta)
    db.commit()
    return {"id": room_type_id}


# ----------------- Availability per type -----------------
def get_available_room_types(db: Session, start_date: date, end_date: date) -> List[RoomTypeAvailability]:
    busy_ids = unavailable_room_ids_query(start_date, end_date)
    rows = (
        db.query(RoomType, func.count(Room.id))
        .join(Room, Room.room_type_id == RoomType.id)
        .filter(
            Room.is_active == True,
            Room.status != RoomStatus.maintenance.value,
            Room.id.notin_(busy_ids),
        )
        .group_by(RoomType.id)
        .order_by(RoomType.base_price.asc())
        .all()
    )

    result = []
    for room_type, available in rows:
        data = RoomTypeOut.model_validate(room_type).model_dump()
        result.append(RoomTypeAvailability(**data, available_rooms=available))
    return result
