from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel

MINIMUM_GUEST_AGE = 18


# -------- Register --------
class RegisterRequest(EmptyStringModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None


# -------- Username & Password --------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


# -------Common----------
class UserOut(BaseModel):
    id: int
    email: str
    role: Optional[str] = None
    permissions: List[str] = []
    is_active: bool
    is_verified: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ProfileOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = {"from_attributes": True}


class MeResponse(UserOut):
    guest_profile: Optional[ProfileOut] = None
    staff_profile: Optional[ProfileOut] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserOut


class RegisterResponse(BaseModel):
    user: UserOut
    guest_id: int
    verification_required: bool = True
