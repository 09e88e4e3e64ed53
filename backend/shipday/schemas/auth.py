"""
Customer account Pydantic schemas
"""

from datetime import datetime
from typing import Literal

from shipday.models.user import UserRole
from shipday.schemas.common import CamelModel


class UserRegister(CamelModel):
    name: str
    email: str
    phone: str
    password: str
    code: str


class VerificationRequest(CamelModel):
    email: str
    source: Literal["register", "forgot"] = "register"


class VerificationCheck(CamelModel):
    email: str
    code: str


class PasswordReset(CamelModel):
    email: str
    code: str
    new_password: str


class UserLogin(CamelModel):
    email: str
    password: str


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    phone: str
    role: UserRole
    location: str | None = None
    created_at: datetime | None = None


class ProfileUpdate(CamelModel):
    name: str | None = None
    phone: str | None = None
    location: str | None = None
    fcm_token: str | None = None


class UserLoginResponse(CamelModel):
    message: str
    token: str
    user: UserResponse


class CustomerResponse(CamelModel):
    id: int
    name: str
    email: str
    phone: str
    total_orders: int


class CustomerListResponse(CamelModel):
    customers: list[CustomerResponse]


class UserEnvelope(CamelModel):
    message: str | None = None
    user: UserResponse
