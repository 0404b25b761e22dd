"""
Database models for the property listing backend.
Includes User and Property models with their relationship.
"""

from app.models.user import User, UserRole
from app.models.property import Property, PropertyType, ListingStatus

__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyType",
    "ListingStatus",
]
