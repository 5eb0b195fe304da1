from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from fastapi import Request
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from shared.models.audit_logs import AuditLog
from shared.utils.enums import AuditAction

SENSITIVE_COLUMNS = {"password_hash", "verification_token"}


def get_client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None


def get_request_meta(request: Optional[Request]) -> Dict[str, Optional[str]]:
    if request is None:
        return {"ip_address": None, "user_agent": None}
    return {
        "ip_address": get_client_ip(request),
        "user_agent": request.headers.get("user-agent"),
    }


def _jsonable(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def snapshot(obj, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    """Column values of an ORM row as a JSON friendly dict."""
    skipped = SENSITIVE_COLUMNS.union(exclude)
    return {
        column.key: _jsonable(getattr(obj, column.key))
        for column in inspect(obj).mapper.column_attrs
        if column.key not in skipped
    }


def log_change(
    db: Session,
    table_name: str,
    record_id: int,
    action: AuditAction,
    old_values: Optional[dict] = None,
    new_values: Optional[dict] = None,
    user_id: Optional[int] = None,
    request_meta: Optional[dict] = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction."""
    meta = request_meta or {}
    entry = AuditLog(
        table_name=table_name,
        record_id=record_id,
        action=action.value if isinstance(action, AuditAction) else action,
        old_values=old_values if action != AuditAction.INSERT else None,
        new_values=new_values if action != AuditAction.DELETE else None,
        user_id=user_id,
        ip_address=meta.get("ip_address"),
        user_agent=meta.get("user_agent"),
    )
    db.add(entry)
    return entry
