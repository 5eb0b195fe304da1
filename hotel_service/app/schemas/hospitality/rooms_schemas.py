from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from shared.core.schemas import CommonQueryParams, Pagination
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.hospitality_enum import RoomStatus


# ----------------- Room Types -----------------
class RoomTypeBase(EmptyStringModel):
    name: str = Field(..., max_length=50)
    description: Optional[str] = None
    base_price: float = Field(..., ge=0, le=10000)
    max_occupancy: int = Field(..., ge=1, le=20)
    amenities: List[str] = []
    size_sqft: Optional[int] = Field(None, ge=0)


class RoomTypeCreate(RoomTypeBase):
    pass


class RoomTypeUpdate(EmptyStringModel):
    name: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    base_price: Optional[float] = Field(None, ge=0, le=10000)
    max_occupancy: Optional[int] = Field(None, ge=1, le=20)
    amenities: Optional[List[str]] = None
    size_sqft: Optional[int] = Field(None, ge=0)


class RoomTypeOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    base_price: float
    max_occupancy: int
    amenities: List[str] = []
    size_sqft: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RoomTypeAvailability(RoomTypeOut):
    available_rooms: int


class RoomTypeSummary(BaseModel):
    id: int
    name: str
    base_price: float
    max_occupancy: int

    model_config = {"from_attributes": True}


# ----------------- Rooms -----------------
class RoomBase(EmptyStringModel):
    room_type_id: int
    room_number: str = Field(..., max_length=10)
    floor: int = Field(..., ge=0)
    status: RoomStatus = RoomStatus.available
    price_adjustment: float = Field(0, ge=-1000, le=1000)
    special_features: List[str] = []
    is_active: bool = True


class RoomCreate(RoomBase):
    pass


class RoomUpdate(EmptyStringModel):
    room_type_id: Optional[int] = None
    room_number: Optional[str] = Field(None, max_length=10)
    floor: Optional[int] = Field(None, ge=0)
    status: Optional[RoomStatus] = None
    price_adjustment: Optional[float] = Field(None, ge=-1000, le=1000)
    special_features: Optional[List[str]] = None
    is_active: Optional[bool] = None


class RoomStatusUpdate(BaseModel):
    status: RoomStatus


class RoomOut(BaseModel):
    id: int
    room_type_id: int
    room_number: str
    floor: int
    status: str
    price_adjustment: float
    special_features: List[str] = []
    is_active: bool
    final_price: float
    room_type: Optional[RoomTypeSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RoomSummary(BaseModel):
    id: int
    room_number: str
    floor: int
    room_type: Optional[RoomTypeSummary] = None

    model_config = {"from_attributes": True}


# ----------------- Request -----------------
class RoomRequest(CommonQueryParams):
    room_type_id: Optional[int] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    capacity: Optional[int] = None
    status: Optional[RoomStatus] = None
    floor: Optional[int] = None
    include_inactive: Optional[bool] = False


class AvailabilityRequest(EmptyStringModel):
    start_date: date
    end_date: date
    room_type_id: Optional[int] = None
    guests: Optional[int] = None


class OccupancyRequest(EmptyStringModel):
    start_date: date
    end_date: date


# ----------------- List Response -----------------
class RoomListResponse(BaseModel):
    rooms: List[RoomOut]
    pagination: Pagination


class OccupancyDay(BaseModel):
    day: date
    occupied_rooms: int
    total_rooms: int
    occupancy_rate: float


class OccupancyResponse(BaseModel):
    start_date: date
    end_date: date
    average_occupancy_rate: float
    days: List[OccupancyDay]
