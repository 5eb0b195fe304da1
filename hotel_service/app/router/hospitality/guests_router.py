from typing import List
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, allow_roles, validate_current_token
from shared.core.database import get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.audit_helper import get_request_meta
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import STAFF_ROLES
from ...crud.hospitality import guests_crud as crud
from ...schemas.hospitality.guests_schemas import (
    GuestCreate, GuestHistory, GuestListResponse, GuestOut, GuestRequest, GuestStats, GuestUpdate
)
from ...schemas.hospitality.rooms_schemas import RoomOut

router = APIRouter(
    prefix="/api/guests",
    tags=["guests"],
    dependencies=[Depends(validate_current_token)],
)

allow_staff = allow_roles(*STAFF_ROLES)


# ----------------- Own Profile -----------------
@router.get("/profile", response_model=GuestOut)
def read_profile(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return GuestOut.model_validate(crud.get_profile(db, current_user))


@router.put("/profile", response_model=JsonOutResult[GuestOut])
def update_profile(
    guest: GuestUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    result = crud.update_profile(db, guest, current_user, get_request_meta(request))
    return success_response(data=result, message="Profile updated successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


# ----------------- Saved Rooms -----------------
@router.get("/saved-rooms", response_model=List[RoomOut])
def read_saved_rooms(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_saved_rooms(db, current_user)


@router.post("/saved-rooms/{room_id}")
def toggle_saved_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    result = crud.toggle_saved_room(db, current_user, room_id)
    message = "Room saved" if result["saved"] else "Room removed from saved list"
    return success_response(data=result, message=message)


# ----------------- Create Guest -----------------
@router.post("/", response_model=JsonOutResult[GuestOut], status_code=201)
def create_guest(
    guest: GuestCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    result = crud.create_guest(db, guest, current_user, get_request_meta(request))
    return success_response(data=result, message="Guest created successfully",
                            status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.post("/quick-register", response_model=JsonOutResult[GuestOut], status_code=201)
def quick_register_guest(
    guest: GuestCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    result = crud.create_guest(db, guest, current_user, get_request_meta(request))
    return success_response(data=result, message="Walk-in guest registered successfully",
                            status_code=AppStatusCode.CREATED_SUCCESSFULLY)


# ----------------- Listing -----------------
@router.get("/", response_model=GuestListResponse)
def read_guests(
    params: GuestRequest = Depends(),
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_staff)
):
    return crud.get_guests(db, params)


@router.get("/search", response_model=List[GuestOut])
def search_guests(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_staff)
):
    return crud.search_guests(db, q)


@router.get("/stats", response_model=GuestStats)
def guest_stats(
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_staff)
):
    return crud.get_guest_stats(db)


@router.get("/{guest_id}", response_model=GuestOut)
def read_guest(
    guest_id: int,
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_staff)
):
    return GuestOut.model_validate(crud.get_guest_or_404(db, guest_id))


@router.get("/{guest_id}/history", response_model=GuestHistory)
def guest_history(
    guest_id: int,
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_staff)
):
    return crud.get_guest_history(db, guest_id)


# ----------------- Update Guest -----------------
@router.put("/{guest_id}", response_model=JsonOutResult[GuestOut])
def update_guest(
    guest_id: int,
    guest: GuestUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    result = crud.update_guest(db, guest_id, guest, current_user, get_request_meta(request))
    return success_response(data=result, message="Guest updated successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


# ---------------- Delete Guest ----------------
@router.delete("/{guest_id}")
def delete_guest(
    guest_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = crud.delete_guest(db, guest_id, current_user, get_request_meta(request))
    return success_response(data=result, message="Guest deleted successfully",
                            status_code=AppStatusCode.DELETED_SUCCESSFULLY)
