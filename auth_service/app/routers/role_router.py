from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin
from shared.core.database import get_db
from shared.core.schemas import JsonOutResult, Lookup, UserToken
from shared.helpers.audit_helper import get_request_meta
from shared.helpers.json_response_helper import error_response, success_response
from shared.utils.app_status_code import AppStatusCode
from ..schemas.roleschemas import RoleCreate, RoleListResponse, RoleOut, RoleRequest, RoleUpdate
from ..services import roleservices as crud

router = APIRouter(prefix="/api/roles",
                   tags=["role management"], dependencies=[Depends(allow_admin)])


def _role_not_found():
    return error_response(
        message="Role not found",
        status_code=AppStatusCode.NOT_FOUND,
        http_status=status.HTTP_404_NOT_FOUND
    )


@router.get("/", response_model=RoleListResponse)
def get_all_roles(params: RoleRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_roles(db, params)


@router.get("/lookup", response_model=List[Lookup])
def role_lookup(db: Session = Depends(get_db)):
    return crud.get_role_lookup(db)


@router.get("/{role_id}", response_model=RoleOut)
def get_role(role_id: int, db: Session = Depends(get_db)):
    role = crud.get_role(db, role_id)
    if not role:
        return _role_not_found()
    return role


@router.post("/", response_model=JsonOutResult[RoleOut], status_code=201)
def create_role(
    role: RoleCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    try:
        result = crud.create_role(db, role, current_user, get_request_meta(request))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return success_response(data=result, message="Role created successfully",
                            status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.put("/{role_id}", response_model=JsonOutResult[RoleOut])
def update_role(
    role_id: int,
    role: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    try:
        result = crud.update_role(db, role_id, role, current_user, get_request_meta(request))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if not result:
        return _role_not_found()
    return success_response(data=result, message="Role updated successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.delete("/{role_id}")
def delete_role(
    role_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    try:
        deleted = crud.delete_role(db, role_id, current_user, get_request_meta(request))
    except crud.RoleInUseError as e:
        return error_response(
            message=str(e),
            status_code=AppStatusCode.RESOURCE_IN_USE,
            http_status=status.HTTP_409_CONFLICT
        )
    if not deleted:
        return _role_not_found()
    return success_response(data={"id": role_id}, message="Role deleted successfully",
                            status_code=AppStatusCode.DELETED_SUCCESSFULLY)
