from datetime import datetime, time
from typing import Dict, List
from fastapi import status
from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.core.schemas import Pagination
from shared.helpers.json_response_helper import error_response
from shared.models.audit_logs import AuditLog
from shared.utils.app_status_code import AppStatusCode
from ...schemas.access_control.audit_logs_schemas import AuditLogOut, AuditLogRequest


# ----------------- Build Filters -----------------
def build_audit_filters(params: AuditLogRequest):
    filters = []

    if params.table_name:
        filters.append(AuditLog.table_name == params.table_name)

    if params.action:
        filters.append(AuditLog.action == params.action.value)

    if params.user_id:
        filters.append(AuditLog.user_id == params.user_id)

    if params.start_date:
        filters.append(AuditLog.created_at >= datetime.combine(params.start_date, time.min))

    if params.end_date:
        filters.append(AuditLog.created_at <= datetime.combine(params.end_date, time.max))

    if params.search:
        filters.append(AuditLog.table_name.ilike(f"%{params.search}%"))
    return filters


def get_audit_logs(db: Session, params: AuditLogRequest) -> Dict:
    base_query = db.query(AuditLog).filter(*build_audit_filters(params))
    total = base_query.with_entities(func.count(AuditLog.id)).scalar()

    logs = (
        base_query
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset(params.skip)
        .limit(params.take)
        .all()
    )

    return {
        "audit_logs": [AuditLogOut.model_validate(log) for log in logs],
        "pagination": Pagination.build(params, total),
    }


def get_audit_log(db: Session, audit_log_id: int) -> AuditLogOut:
    log = db.query(AuditLog).filter(AuditLog.id == audit_log_id).first()
    if not log:
        return error_response(
            message="Audit log not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=status.HTTP_404_NOT_FOUND
        )
    return AuditLogOut.model_validate(log)


def get_record_trail(db: Session, table_name: str, record_id: int) -> List[AuditLogOut]:
    logs = (
        db.query(AuditLog)
        .filter(AuditLog.table_name == table_name, AuditLog.record_id == record_id)
        .order_by(AuditLog.created_at.asc(), AuditLog.id.asc())
        .all()
    )
    return [AuditLogOut.model_validate(log) for log in logs]


def get_recent_activity(db: Session, limit: int = 20) -> List[AuditLogOut]:
    logs = (
        db.query(AuditLog)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )
    return [AuditLogOut.model_validate(log) for log in logs]
