from typing import List
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin
from shared.core.database import get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.audit_helper import get_request_meta
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.access_control import staff_crud as crud
from ...schemas.access_control.staff_schemas import (
    DepartmentStat, StaffCreate, StaffListResponse, StaffOut, StaffRequest, StaffUpdate
)

router = APIRouter(
    prefix="/api/staff",
    tags=["staff"],
    dependencies=[Depends(allow_admin)],
)


# ----------------- Create Staff -----------------
@router.post("/", response_model=JsonOutResult[StaffOut], status_code=201)
def create_staff(
    staff: StaffCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = crud.create_staff(db, staff, current_user, get_request_meta(request))
    return success_response(data=result, message="Staff member created successfully",
                            status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.get("/", response_model=StaffListResponse)
def read_staff(params: StaffRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_staff_list(db, params)


@router.get("/search", response_model=List[StaffOut])
def search_staff(q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return crud.search_staff(db, q)


@router.get("/departments", response_model=List[DepartmentStat])
def department_stats(db: Session = Depends(get_db)):
    return crud.get_department_stats(db)


@router.get("/{staff_id}", response_model=StaffOut)
def read_staff_member(staff_id: int, db: Session = Depends(get_db)):
    return StaffOut.model_validate(crud.get_staff_or_404(db, staff_id))


# ----------------- Update Staff -----------------
@router.put("/{staff_id}", response_model=JsonOutResult[StaffOut])
def update_staff(
    staff_id: int,
    staff: StaffUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = crud.update_staff(db, staff_id, staff, current_user, get_request_meta(request))
    return success_response(data=result, message="Staff member updated successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.put("/{staff_id}/deactivate", response_model=JsonOutResult[StaffOut])
def deactivate_staff(
    staff_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    result = crud.deactivate_staff(db, staff_id, current_user, get_request_meta(request))
    return success_response(data=result, message="Staff member deactivated",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)
