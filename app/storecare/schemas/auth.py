from pydantic import BaseModel, EmailStr, Field

from app.storecare.schemas.directory import UserItem


class LoginRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"email": "superadmin@example.com", "password": "change-me"}]
        }
    }

    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    full_name: str
    email: str
    store_id: str | None = None
    trace_id: str


class OAuth2TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = Field(default=None, pattern=r"^[0-9]{10}$")
    password: str
    confirm_password: str
    store_id: str | None = Field(default=None, description="Optional home store of the customer.")


class StoreAdminCreateRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = Field(default=None, pattern=r"^[0-9]{10}$")
    password: str
    confirm_password: str
    store_name: str | None = Field(default=None, max_length=255)
    address: str | None = Field(default=None, max_length=500)
    contact_number: str | None = Field(default=None, max_length=30)


class StoreAdminCreateResponse(BaseModel):
    store_id: str
    store_name: str
    user_id: str
    trace_id: str


class ProfileUpdateRequest(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=200)
    phone: str | None = Field(default=None, pattern=r"^[0-9]{10}$")


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str
    confirm_new_password: str


class MeResponse(BaseModel):
    user: UserItem
    trace_id: str
