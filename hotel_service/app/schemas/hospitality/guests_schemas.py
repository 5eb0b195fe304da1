from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr

from shared.core.schemas import CommonQueryParams, Pagination
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.hospitality_enum import GuestType


# ----------------- Base -----------------
class GuestBase(EmptyStringModel):
    first_name: str
    last_name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None


# ----------------- Create -----------------
class GuestCreate(GuestBase):
    pass


# ----------------- Update -----------------
class GuestUpdate(EmptyStringModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None


# ----------------- Out -----------------
class GuestOut(BaseModel):
    id: int
    user_id: Optional[int] = None
    created_by: Optional[int] = None
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None
    guest_type: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class GuestSummary(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = {"from_attributes": True}


# ----------------- Request -----------------
class GuestRequest(CommonQueryParams):
    guest_type: Optional[GuestType] = None


# ----------------- List Response -----------------
class GuestListResponse(BaseModel):
    guests: List[GuestOut]
    pagination: Pagination


class GuestStats(BaseModel):
    total_guests: int
    online_guests: int
    walk_in_guests: int
    new_this_month: int


class GuestHistoryItem(BaseModel):
    reservation_id: int
    room_number: Optional[str] = None
    room_type: Optional[str] = None
    check_in_date: date
    check_out_date: date
    status: str
    total_amount: float


class GuestHistory(BaseModel):
    guest: GuestOut
    total_stays: int
    total_spent: float
    reservations: List[GuestHistoryItem]
