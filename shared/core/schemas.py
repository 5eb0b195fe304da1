from pydantic import BaseModel
from typing import Any, Dict, Generic, List, Optional, TypeVar

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel

# Shared properties
T = TypeVar("T")


class UserToken(BaseModel):
    user_id: int
    email: str
    role: str
    permissions: List[str] = []
    status: Optional[str] = None
    exp: Optional[int] = None

    def has_permission(self, permission: str) -> bool:
        return "*" in self.permissions or permission in self.permissions


class CommonQueryParams(EmptyStringModel):
    search: Optional[str] = None
    page: Optional[int] = 1
    limit: Optional[int] = 10

    @property
    def skip(self) -> int:
        page = self.page if self.page and self.page > 0 else 1
        return (page - 1) * self.take

    @property
    def take(self) -> int:
        if not self.limit or self.limit < 1:
            return 10
        return min(self.limit, 100)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, params: CommonQueryParams, total: int) -> "Pagination":
        limit = params.take
        page = params.page if params.page and params.page > 0 else 1
        total_pages = (total + limit - 1) // limit
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class Lookup(BaseModel):
    id: int | str
    name: str

    model_config = {"from_attributes": True}


class ExportResponse(BaseModel):
    filename: str
    data: List[Dict[str, Any]]

    model_config = {"from_attributes": True}


class JsonOutResult(BaseModel, Generic[T]):
    data: Optional[T] = None
    status: str
    status_code: str
    message: str
