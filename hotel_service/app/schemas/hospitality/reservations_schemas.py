from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, model_validator

from shared.core.schemas import CommonQueryParams, Pagination
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.hospitality_enum import ReservationPaymentStatus, ReservationStatus
from .guests_schemas import GuestSummary
from .rooms_schemas import RoomSummary


def _check_dates(check_in: Optional[date], check_out: Optional[date]):
    if check_in and check_out and check_out <= check_in:
        raise ValueError("Check-out date must be after check-in date")


# ----------------- Create -----------------
class ReservationCreate(EmptyStringModel):
    guest_id: Optional[int] = None
    room_id: int
    check_in_date: date
    check_out_date: date
    number_of_guests: int = Field(1, ge=1, le=20)
    special_requests: Optional[str] = None

    @model_validator(mode="after")
    def validate_dates(self):
        _check_dates(self.check_in_date, self.check_out_date)
        return self


# ----------------- Update -----------------
class ReservationUpdate(EmptyStringModel):
    room_id: Optional[int] = None
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    number_of_guests: Optional[int] = Field(None, ge=1, le=20)
    special_requests: Optional[str] = None

    @model_validator(mode="after")
    def validate_dates(self):
        _check_dates(self.check_in_date, self.check_out_date)
        return self


class ReservationCancel(EmptyStringModel):
    reason: Optional[str] = None


# ----------------- Price -----------------
class PriceCalculationRequest(EmptyStringModel):
    room_id: int
    check_in_date: date
    check_out_date: date

    @model_validator(mode="after")
    def validate_dates(self):
        _check_dates(self.check_in_date, self.check_out_date)
        return self


class PriceCalculationOut(BaseModel):
    room_id: int
    room_number: str
    check_in_date: date
    check_out_date: date
    nights: int
    nightly_price: float
    total_amount: float


# ----------------- Out -----------------
class ReservationOut(BaseModel):
    id: int
    guest_id: int
    room_id: int
    created_by: Optional[int] = None
    check_in_date: date
    check_out_date: date
    actual_check_in: Optional[datetime] = None
    actual_check_out: Optional[datetime] = None
    number_of_guests: int
    nights: int
    total_amount: float
    status: str
    payment_status: str
    special_requests: Optional[str] = None
    cancellation_reason: Optional[str] = None
    guest: Optional[GuestSummary] = None
    room: Optional[RoomSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ----------------- Request -----------------
class ReservationRequest(CommonQueryParams):
    status: Optional[ReservationStatus] = None
    payment_status: Optional[ReservationPaymentStatus] = None
    guest_id: Optional[int] = None
    room_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    sort_by: Optional[Literal["check_in_date", "check_out_date", "created_at", "total_amount"]] = "created_at"
    sort_order: Optional[Literal["asc", "desc"]] = "desc"


# ----------------- List Response -----------------
class ReservationListResponse(BaseModel):
    reservations: List[ReservationOut]
    pagination: Pagination
