"""
Role-based capabilities.

Maps a user's role to the set of operations it may perform. Route handlers
check a required capability before running any business logic.
"""

from typing import Dict, FrozenSet, Optional
import enum

from app.models.user import User, UserRole


class Permission(str, enum.Enum):
    """Operations gated by role."""
    VIEW_PROFILE = "view_profile"
    UPDATE_PROFILE = "update_profile"
    CREATE_PROPERTY = "create_property"
    UPDATE_PROPERTY = "update_property"
    DELETE_PROPERTY = "delete_property"
    VIEW_ALL_PROPERTIES = "view_all_properties"


_USER_PERMISSIONS = frozenset({
    Permission.VIEW_PROFILE,
    Permission.UPDATE_PROFILE,
})

ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[Permission]] = {
    UserRole.USER: _USER_PERMISSIONS,
    UserRole.ADMIN: _USER_PERMISSIONS | {
        Permission.CREATE_PROPERTY,
        Permission.UPDATE_PROPERTY,
        Permission.DELETE_PROPERTY,
        Permission.VIEW_ALL_PROPERTIES,
    },
}


def permissions_for(user: Optional[User]) -> FrozenSet[Permission]:
    """Return the capabilities granted to a user; anonymous callers get none."""
    if user is None or not user.is_active:
        return frozenset()
    return ROLE_PERMISSIONS.get(user.role, frozenset())


def has_permission(user: Optional[User], permission: Permission) -> bool:
    return permission in permissions_for(user)
