"""
FastAPI dependency injection utilities for authentication and services.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models.user import User
from app.services.auth import AuthService
from app.services.property import PropertyService
from app.services.notification import NotificationService
from app.utils.permissions import Permission, has_permission
from app.utils.exceptions import UnauthorizedError, InsufficientPermissionsError


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)

# Human-readable actions for permission failures
_PERMISSION_ACTIONS = {
    Permission.VIEW_PROFILE: "view this profile",
    Permission.UPDATE_PROFILE: "update this profile",
    Permission.CREATE_PROPERTY: "create properties",
    Permission.UPDATE_PROPERTY: "update properties",
    Permission.DELETE_PROPERTY: "delete properties",
    Permission.VIEW_ALL_PROPERTIES: "view all properties",
}


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


async def get_property_service(db: AsyncSession = Depends(get_db)) -> PropertyService:
    """
    Get property service instance.

    Args:
        db: Database session

    Returns:
        PropertyService instance
    """
    return PropertyService(db)


def get_notification_service() -> NotificationService:
    return NotificationService()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current active User object

    Raises:
        UnauthorizedError: If no token is provided, the token is invalid or expired,
            or its user is missing or deactivated
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


def require_permission(permission: Permission):
    """
    Create a dependency that requires a capability derived from the user's role.

    Args:
        permission: Capability the route needs

    Returns:
        Dependency function yielding the authenticated user
    """
    async def permission_dependency(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if not has_permission(current_user, permission):
            raise InsufficientPermissionsError(_PERMISSION_ACTIONS.get(permission, permission.value))
        return current_user

    return permission_dependency

