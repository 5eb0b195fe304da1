import logging
from typing import Dict, List
from fastapi import status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.schemas import Pagination, UserToken
from shared.helpers.audit_helper import log_change, snapshot
from shared.helpers.json_response_helper import error_response
from shared.models.roles import Roles
from shared.models.staff import Staff
from shared.models.users import Users
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import AuditAction
from ...schemas.access_control.staff_schemas import (
    DepartmentStat, StaffCreate, StaffOut, StaffRequest, StaffUpdate
)

logger = logging.getLogger(__name__)


def get_staff_or_404(db: Session, staff_id: int) -> Staff:
    staff = db.query(Staff).filter(Staff.id == staff_id).first()
    if not staff:
        return error_response(
            message="Staff member not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )
    return staff


# ----------------- Build Filters -----------------
def build_staff_filters(params: StaffRequest):
    filters = []

    if params.department:
        filters.append(func.lower(Staff.department) == params.department.lower())

    if params.position:
        filters.append(func.lower(Staff.position) == params.position.lower())

    if params.is_active is not None:
        filters.append(Staff.is_active == params.is_active)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(
            or_(
                Staff.first_name.ilike(search_term),
                Staff.last_name.ilike(search_term),
                Staff.email.ilike(search_term),
                Staff.position.ilike(search_term),
            )
        )
    return filters


def get_staff_list(db: Session, params: StaffRequest) -> Dict:
    base_query = db.query(Staff).filter(*build_staff_filters(params))
    total = base_query.with_entities(func.count(Staff.id)).scalar()

    staff = (
        base_query
        .order_by(Staff.last_name.asc(), Staff.first_name.asc())
        .offset(params.skip)
        .limit(params.take)
        .all()
    )

    return {
        "staff": [StaffOut.model_validate(s) for s in staff],
        "pagination": Pagination.build(params, total),
    }


def search_staff(db: Session, q: str) -> List[StaffOut]:
    search_term = f"%{q}%"
    staff = (
        db.query(Staff)
        .filter(or_(
            Staff.first_name.ilike(search_term),
            Staff.last_name.ilike(search_term),
            Staff.email.ilike(search_term),
            Staff.department.ilike(search_term),
        ))
        .order_by(Staff.last_name.asc())
        .limit(20)
        .all()
    )
    return [StaffOut.model_validate(s) for s in staff]


def get_department_stats(db: Session) -> List[DepartmentStat]:
    totals: Dict[str, Dict[str, int]] = {}
    for department, is_active in db.query(Staff.department, Staff.is_active).all():
        key = department or "Unassigned"
        bucket = totals.setdefault(key, {"total": 0, "active": 0})
        bucket["total"] += 1
        bucket["active"] += 1 if is_active else 0

    return [
        DepartmentStat(department=key, total=value["total"], active=value["active"])
        for key, value in sorted(totals.items())
    ]


# ----------------- Create Staff -----------------
def create_staff(db: Session, data: StaffCreate, current_user: UserToken, request_meta: dict) -> StaffOut:
    if db.query(Users).filter(func.lower(Users.email) == data.email.lower()).first():
        return error_response(
            message=f"Email '{data.email}' is already registered",
            status_code=AppStatusCode.USER_USERNAME_IS_UNIQUE,
            http_status=status.HTTP_409_CONFLICT
        )

    role = db.query(Roles).filter(Roles.name == data.role).first()
    if not role:
        return error_response(
            message=f"Role '{data.role}' not found",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST
        )

    # user and staff rows commit together
    user = Users(email=data.email.lower(), role_id=role.id,
                 is_active=True, is_verified=True)
    user.set_password(data.password)
    db.add(user)
    db.flush()

    staff = Staff(
        user_id=user.id,
        email=user.email,
        **data.model_dump(exclude={"email", "password", "role"}),
    )
    db.add(staff)
    db.flush()

    log_change(db, "users", user.id, AuditAction.INSERT, new_values=snapshot(user),
               user_id=current_user.user_id, request_meta=request_meta)
    log_change(db, "staff", staff.id, AuditAction.INSERT, new_values=snapshot(staff),
               user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    db.refresh(staff)

    logger.info("Staff member %s created with role %s", staff.id, role.name)
    return StaffOut.model_validate(staff)


# ----------------- Update Staff -----------------
def update_staff(db: Session, staff_id: int, data: StaffUpdate,
                 current_user: UserToken, request_meta: dict) -> StaffOut:
    staff = get_staff_or_404(db, staff_id)

    old_values = snapshot(staff)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(staff, key, value)
    db.flush()

    log_change(db, "staff", staff.id, AuditAction.UPDATE,
               old_values=old_values, new_values=snapshot(staff),
               user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    db.refresh(staff)
    return StaffOut.model_validate(staff)


def deactivate_staff(db: Session, staff_id: int, current_user: UserToken, request_meta: dict) -> StaffOut:
    staff = get_staff_or_404(db, staff_id)
    if staff.user_id == current_user.user_id:
        return error_response(
            message="You cannot deactivate your own account",
            status_code=AppStatusCode.UNAUTHORIZED_ACTION,
            http_status=status.HTTP_400_BAD_REQUEST
        )

    old_values = snapshot(staff)
    old_user_values = snapshot(staff.user) if staff.user else None
    staff.is_active = False
    if staff.user:
        staff.user.is_active = False
    db.flush()

    log_change(db, "staff", staff.id, AuditAction.UPDATE,
               old_values=old_values, new_values=snapshot(staff),
               user_id=current_user.user_id, request_meta=request_meta)
    if staff.user:
        log_change(db, "users", staff.user.id, AuditAction.UPDATE,
                   old_values=old_user_values, new_values=snapshot(staff.user),
                   user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    db.refresh(staff)
    return StaffOut.model_validate(staff)
