from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.storecare.schemas.common import AuditedItem


class StoreCreateRequest(BaseModel):
    store_name: str = Field(..., min_length=1, max_length=255)
    address: str | None = Field(default=None, max_length=500)
    contact_number: str | None = Field(default=None, max_length=30)
    email: EmailStr | None = None
    status_id: int | None = None


class StoreUpdateRequest(BaseModel):
    store_name: str | None = Field(default=None, min_length=1, max_length=255)
    address: str | None = Field(default=None, max_length=500)
    contact_number: str | None = Field(default=None, max_length=30)
    email: EmailStr | None = None


class StoreItem(AuditedItem):
    id: str
    store_code: str
    store_name: str
    address: str | None = None
    contact_number: str | None = None
    email: str | None = None
    total_employees: int = 0
    total_products: int = 0


class StoreResponse(BaseModel):
    store: StoreItem
    trace_id: str


class StoreListResponse(BaseModel):
    stores: list[StoreItem]
    count: int
    trace_id: str


class StoreDeleteResponse(BaseModel):
    ok: bool = True
    retired: dict[str, int]
    trace_id: str


class StoreOverview(BaseModel):
    total_stores: int
    active_stores: int
    suspended_stores: int
    inactive_stores: int


class StoreStatisticsResponse(BaseModel):
    overview: StoreOverview
    store_performance: list[StoreItem]
    trace_id: str


class UserUpdateRequest(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)


class UserActiveRequest(BaseModel):
    active: bool


class UserItem(AuditedItem):
    id: str
    user_code: str
    full_name: str
    email: str
    phone: str | None = None
    role: str
    store_id: str | None = None
    last_login: datetime | None = None


class UserResponse(BaseModel):
    user: UserItem
    trace_id: str


class UserListResponse(BaseModel):
    users: list[UserItem]
    count: int
    trace_id: str
