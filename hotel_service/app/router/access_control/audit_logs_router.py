from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin
from shared.core.database import get_db
from ...crud.access_control import audit_logs_crud as crud
from ...schemas.access_control.audit_logs_schemas import (
    AuditLogListResponse, AuditLogOut, AuditLogRequest, RecentActivityRequest
)

router = APIRouter(
    prefix="/api/audit-logs",
    tags=["audit logs"],
    dependencies=[Depends(allow_admin)],
)


@router.get("/", response_model=AuditLogListResponse)
def read_audit_logs(params: AuditLogRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_audit_logs(db, params)


@router.get("/recent", response_model=List[AuditLogOut])
def recent_activity(params: RecentActivityRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_recent_activity(db, params.limit)


@router.get("/record/{table_name}/{record_id}", response_model=List[AuditLogOut])
def record_trail(table_name: str, record_id: int, db: Session = Depends(get_db)):
    return crud.get_record_trail(db, table_name, record_id)


@router.get("/{audit_log_id}", response_model=AuditLogOut)
def read_audit_log(audit_log_id: int, db: Session = Depends(get_db)):
    return crud.get_audit_log(db, audit_log_id)
