"""
Pydantic schemas for user requests and responses.
Handles registration, profile updates and the public user projection.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from app.models.user import UserRole, MIN_PASSWORD_LENGTH
from app.schemas.common import CamelModel
import re
import uuid

PHONE_PATTERN = re.compile(r"^\d{10}$")


def _normalize_phone(v: str) -> str:
    phone = re.sub(r"[\s-]", "", v or "")
    if not PHONE_PATTERN.match(phone):
        raise ValueError("Phone number must be exactly 10 digits")
    return phone


def _clean_name(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Name cannot be empty")
    return v.strip()


class UserRegister(CamelModel):
    """Schema for self-registration."""

    name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="User's display name",
        examples=["Rahul Patil"]
    )

    email: Optional[EmailStr] = Field(
        None,
        description="Optional email address",
        examples=["rahul@example.com"]
    )

    phone: str = Field(
        ...,
        description="10-digit phone number used to log in",
        examples=["9876543210"]
    )

    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        max_length=128,
        description=f"Password (minimum {MIN_PASSWORD_LENGTH} characters)"
    )

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_to_none(cls, v):
        """Treat an empty email as not supplied."""
        if isinstance(v, str):
            v = v.strip()
            return v.lower() or None
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return _normalize_phone(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)


class ProfileUpdate(CamelModel):
    """Fields a user may change on their own profile."""

    name: Optional[str] = Field(
        None,
        min_length=2,
        max_length=100
    )
    phone: Optional[str] = Field(None)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v is None:
            return v
        return _normalize_phone(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        return _clean_name(v)


class UserResponse(CamelModel):
    """Public projection of a user; never includes the password hash."""

    id: uuid.UUID
    name: str
    email: Optional[str] = None
    phone: str
    role: UserRole
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime


class UserData(CamelModel):
    user: UserResponse
