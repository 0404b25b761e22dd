"""
User repository for account storage and lookup.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from app.repositories.base import BaseRepository
from app.models.user import User, UserRole
from app.database import utcnow
from typing import Optional, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management.
    Phone and email uniqueness is enforced by the database; callers pre-check for nicer messages.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user, hashing the supplied password.

        Args:
            user_data: Dictionary containing user information
                      Must include: name, phone, password
                      Optional: email, role (defaults to USER), is_active

        Returns:
            Created user instance

        Raises:
            ValueError: If the password is too short
            IntegrityError: If phone or email is already taken
        """
        data = dict(user_data)
        password = data.pop("password")

        create_data = {
            **data,
            "hashed_password": User.hash_password(password),
            "role": data.get("role", UserRole.USER),
            "is_active": data.get("is_active", True),
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.phone} (ID: {created_user.id})")
        return created_user

    async def get_by_phone(self, phone: str) -> Optional[User]:
        """Get user by phone number."""
        return await self.get_by_field("phone", phone)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)."""
        return await self.get_by_field("email", email.lower().strip())

    async def record_login(self, user: User) -> User:
        """
        Stamp the user's last login time.

        Args:
            user: User that just authenticated

        Returns:
            The refreshed user
        """
        try:
            await self.db.execute(
                update(User).where(User.id == user.id).values(last_login=utcnow())
            )
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to record login for user {user.id}: {e}")
            raise

    async def update_profile(self, user_id: uuid.UUID, changes: Dict[str, Any]) -> Optional[User]:
        """Apply profile changes; a no-op update just returns the user."""
        if not changes:
            return await self.get_by_id(user_id)
        return await self.update(user_id, changes)
