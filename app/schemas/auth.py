"""
Pydantic schemas for authentication requests and responses.
"""

from pydantic import Field, field_validator
from app.schemas.common import CamelModel
from app.schemas.user import UserResponse
import re


class LoginRequest(CamelModel):
    """Login request schema, shared by user and admin login."""

    phone: str = Field(
        ...,
        min_length=1,
        description="Registered phone number",
        examples=["9876543210"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Account password"
    )

    @field_validator("phone")
    @classmethod
    def strip_phone(cls, v):
        """Drop spaces and dashes so formatted numbers still match."""
        return re.sub(r"[\s-]", "", v)


class AuthData(CamelModel):
    """User projection plus the issued session token."""

    user: UserResponse
    token: str = Field(
        ...,
        description="Bearer token valid for 7 days"
    )
