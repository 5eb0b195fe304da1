from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, EmailStr, Field

from shared.core.schemas import CommonQueryParams, Pagination
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class StaffCreate(EmptyStringModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Literal["admin", "receptionist"] = "receptionist"
    first_name: str
    last_name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    hire_date: Optional[date] = None


class StaffUpdate(EmptyStringModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    hire_date: Optional[date] = None


class StaffOut(BaseModel):
    id: int
    user_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    hire_date: Optional[date] = None
    is_active: bool
    role_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StaffRequest(CommonQueryParams):
    department: Optional[str] = None
    position: Optional[str] = None
    is_active: Optional[bool] = None


class StaffListResponse(BaseModel):
    staff: List[StaffOut]
    pagination: Pagination


class DepartmentStat(BaseModel):
    department: str
    total: int
    active: int
