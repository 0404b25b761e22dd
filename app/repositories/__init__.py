"""
Repository layer for data access operations.
"""

from app.repositories.base import BaseRepository
from app.repositories.property import PropertyRepository
from app.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "UserRepository"
]
