from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from shared.core.schemas import CommonQueryParams, Pagination
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class RoleBase(EmptyStringModel):
    name: str = Field(..., max_length=50)
    description: Optional[str] = None
    permissions: List[str] = []


class RoleCreate(RoleBase):
    pass


class RoleUpdate(EmptyStringModel):
    name: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    permissions: Optional[List[str]] = None


class RoleOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    permissions: List[str] = []
    user_count: int = 0
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RoleRequest(CommonQueryParams):
    pass


class RoleListResponse(BaseModel):
    roles: List[RoleOut]
    pagination: Pagination
