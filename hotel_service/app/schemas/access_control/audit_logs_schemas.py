from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from shared.core.schemas import CommonQueryParams, Pagination
from shared.utils.enums import AuditAction


class AuditLogOut(BaseModel):
    id: int
    table_name: str
    record_id: int
    action: str
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    user_id: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AuditLogRequest(CommonQueryParams):
    table_name: Optional[str] = None
    action: Optional[AuditAction] = None
    user_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class RecentActivityRequest(BaseModel):
    limit: int = Field(20, ge=1, le=100)


class AuditLogListResponse(BaseModel):
    audit_logs: List[AuditLogOut]
    pagination: Pagination
