from datetime import date
from typing import List
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, allow_roles
from shared.core.database import get_db
from shared.core.schemas import JsonOutResult, Lookup, UserToken
from shared.helpers.audit_helper import get_request_meta
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import STAFF_ROLES
from ...crud.hospitality import room_types_crud, rooms_crud as crud
from ...schemas.hospitality.rooms_schemas import (
    AvailabilityRequest, OccupancyRequest, OccupancyResponse, RoomCreate, RoomListResponse,
    RoomOut, RoomRequest, RoomStatusUpdate, RoomTypeAvailability, RoomTypeCreate, RoomTypeOut,
    RoomTypeUpdate, RoomUpdate
)

# Browsing is public, changes need a token
router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@router.get("/", response_model=RoomListResponse)
def read_rooms(params: RoomRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_rooms(db, params)


# ----------------- Room Types -----------------
@router.get("/types", response_model=List[RoomTypeOut])
def read_room_types(db: Session = Depends(get_db)):
    return room_types_crud.get_room_types(db)


@router.get("/types/lookup", response_model=List[Lookup])
def room_type_lookup(db: Session = Depends(get_db)):
    return room_types_crud.room_type_lookup(db)


@router.get("/types/available", response_model=List[RoomTypeAvailability])
def available_room_types(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db)
):
    crud.validate_date_range(start_date, end_date)
    return room_types_crud.get_available_room_types(db, start_date, end_date)


@router.get("/types/{room_type_id}", response_model=RoomTypeOut)
def read_room_type(room_type_id: int, db: Session = Depends(get_db)):
    return RoomTypeOut.model_validate(room_types_crud.get_room_type_or_404(db, room_type_id))


@router.post("/types", response_model=JsonOutResult[RoomTypeOut], status_code=201)
def create_room_type(
    room_type: RoomTypeCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = room_types_crud.create_room_type(db, room_type, current_user, get_request_meta(request))
    return success_response(data=result, message="Room type created successfully",
                            status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.put("/types/{room_type_id}", response_model=JsonOutResult[RoomTypeOut])
def update_room_type(
    room_type_id: int,
    room_type: RoomTypeUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = room_types_crud.update_room_type(
        db, room_type_id, room_type, current_user, get_request_meta(request))
    return success_response(data=result, message="Room type updated successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.delete("/types/{room_type_id}")
def delete_room_type(
    room_type_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = room_types_crud.delete_room_type(db, room_type_id, current_user, get_request_meta(request))
    return success_response(data=result, message="Room type deleted successfully",
                            status_code=AppStatusCode.DELETED_SUCCESSFULLY)


# ----------------- Availability / Occupancy -----------------
@router.get("/available", response_model=List[RoomOut])
def available_rooms(params: AvailabilityRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_available_rooms(db, params)


@router.get("/occupancy", response_model=OccupancyResponse)
def room_occupancy(
    params: OccupancyRequest = Depends(),
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_roles(*STAFF_ROLES))
):
    return crud.get_occupancy(db, params.start_date, params.end_date)


@router.get("/{room_id}", response_model=RoomOut)
def read_room(room_id: int, db: Session = Depends(get_db)):
    return RoomOut.model_validate(crud.get_room_or_404(db, room_id))


# ----------------- Create Room -----------------
@router.post("/", response_model=JsonOutResult[RoomOut], status_code=201)
def create_room(
    room: RoomCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = crud.create_room(db, room, current_user, get_request_meta(request))
    return success_response(data=result, message="Room created successfully",
                            status_code=AppStatusCode.CREATED_SUCCESSFULLY)


# ----------------- Update Room -----------------
@router.put("/{room_id}", response_model=JsonOutResult[RoomOut])
def update_room(
    room_id: int,
    room: RoomUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = crud.update_room(db, room_id, room, current_user, get_request_meta(request))
    return success_response(data=result, message="Room updated successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.patch("/{room_id}/status", response_model=JsonOutResult[RoomOut])
def update_room_status(
    room_id: int,
    room_status: RoomStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_roles(*STAFF_ROLES))
):
    result = crud.update_room_status(db, room_id, room_status, current_user, get_request_meta(request))
    return success_response(data=result, message="Room status updated successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


# ---------------- Delete Room ----------------
@router.delete("/{room_id}")
def delete_room(
    room_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = crud.delete_room(db, room_id, current_user, get_request_meta(request))
    message = "Room deleted successfully" if result["deleted"] \
        else "Room has reservation history and was deactivated"
    return success_response(data=result, message=message,
                            status_code=AppStatusCode.DELETED_SUCCESSFULLY)
