"""
Utility modules for the property listing API.
"""

from .auth import (
    create_access_token,
    verify_token,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    InternalServerError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InactiveUserError,
    InsufficientPermissionsError,
    PropertyNotFoundError,
    UserNotFoundError,
    DuplicateUserError
)

from .permissions import Permission, permissions_for, has_permission

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "verify_token",
    "TokenPayload",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "InternalServerError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InactiveUserError",
    "InsufficientPermissionsError",
    "PropertyNotFoundError",
    "UserNotFoundError",
    "DuplicateUserError",

    # Permissions
    "Permission",
    "permissions_for",
    "has_permission",
]
