"""
Pydantic schemas for request/response validation.
"""

from .common import CamelModel, APIResponse

# Authentication schemas
from .auth import LoginRequest, AuthData

# User schemas
from .user import (
    UserRegister,
    ProfileUpdate,
    UserResponse,
    UserData
)

# Property schemas
from .property import (
    PropertyBase,
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyData,
    PropertyListData,
    PropertyCollection,
    PropertySearchFilters,
    PaginationMeta,
    OwnerSummary
)

__all__ = [
    "CamelModel",
    "APIResponse",

    # Authentication
    "LoginRequest",
    "AuthData",

    # User
    "UserRegister",
    "ProfileUpdate",
    "UserResponse",
    "UserData",

    # Property
    "PropertyBase",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertyData",
    "PropertyListData",
    "PropertyCollection",
    "PropertySearchFilters",
    "PaginationMeta",
    "OwnerSummary"
]
