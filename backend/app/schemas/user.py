"""Pydantic schemas for Users, registration and login."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from app.models.user import UserRole
from app.schemas.fields import UtcDatetime, email_address, person_name, required_text

PASSWORD_MIN = 6
PASSWORD_MAX = 100


class RegisterRequest(BaseModel):
    name: str = Field(default=None, validate_default=True)
    email: str = Field(default=None, validate_default=True)
    password: str = Field(default=None, validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value):
        return person_name(value, max_length=50)

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, value):
        return email_address(value)

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, value):
        if not isinstance(value, str) or not value:
            raise PydanticCustomError("required", "Password is required")
        if len(value) < PASSWORD_MIN:
            raise PydanticCustomError("too_short", "Password must be at least 6 characters long")
        if len(value) > PASSWORD_MAX:
            raise PydanticCustomError("too_long", "Password must be less than 100 characters")
        if not (any(c.islower() for c in value) and any(c.isupper() for c in value) and any(c.isdigit() for c in value)):
            raise PydanticCustomError(
                "password_strength",
                "Password must contain at least one uppercase letter, one lowercase letter, and one number",
            )
        return value


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return required_text(value, "Email address is required").lower()


class UserOut(BaseModel):
    user_id: str
    name: Optional[str] = None
    email: str
    role: UserRole
    created_at: UtcDatetime

    model_config = {"from_attributes": True}


class AdminUserOut(UserOut):
    event_count: int
    rsvp_count: int


class RegisterResponse(BaseModel):
    message: str
    user: UserOut


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class RoleUpdate(BaseModel):
    user_id: str
    role: str


class RoleUpdateResponse(BaseModel):
    message: str
    user: UserOut
