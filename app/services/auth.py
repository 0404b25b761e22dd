"""
Authentication service for registration, login, token management and profiles.
Handles JWT issuance and validation plus the user-facing account rules.
"""

from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from jose import JWTError, ExpiredSignatureError
from app.repositories.user import UserRepository
from app.models.user import User, UserRole
from app.schemas.user import UserRegister, ProfileUpdate
from app.utils.auth import create_access_token, verify_token
from app.utils.exceptions import (
    ConflictError,
    DuplicateUserError,
    InactiveUserError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    UnauthorizedError,
    UserNotFoundError,
)
import uuid
import logging

logger = logging.getLogger(__name__)

ADMIN_CREDENTIALS_MESSAGE = "Invalid admin credentials"


class AuthService:
    """
    Authentication service for account creation, login and session tokens.
    Login failures for unknown phones and wrong passwords are indistinguishable.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(self, user_data: UserRegister) -> Tuple[User, str]:
        """
        Register a new user and issue a session token.

        Args:
            user_data: Validated registration payload

        Returns:
            Tuple of (created user, token)

        Raises:
            ConflictError: If the phone or email is already registered
        """
        if await self.user_repo.get_by_phone(user_data.phone):
            raise ConflictError("User already exists with this phone number")

        if user_data.email and await self.user_repo.get_by_email(user_data.email):
            raise ConflictError("User already exists with this email address")

        try:
            user = await self.user_repo.create_user({
                "name": user_data.name,
                "email": user_data.email,
                "phone": user_data.phone,
                "password": user_data.password,
            })
        except IntegrityError:
            # Lost a race with a concurrent registration
            logger.warning(f"Duplicate registration rejected by database for phone {user_data.phone}")
            raise DuplicateUserError()

        logger.info(f"User registered: {user.phone} (ID: {user.id})")
        return user, self.create_token(user)

    def create_token(self, user: User, include_role: bool = False) -> str:
        """Issue a session token; admin logins embed the role claim."""
        return create_access_token(
            user_id=user.id,
            role=user.role if include_role else None
        )

    async def authenticate_user(self, phone: str, password: str) -> User:
        """
        Check phone and password.

        Raises:
            InvalidCredentialsError: Unknown phone or wrong password
            InactiveUserError: Account is deactivated
        """
        user = await self.user_repo.get_by_phone(phone)
        if not user:
            logger.warning(f"Failed login attempt for unknown phone: {phone}")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning(f"Login attempt on deactivated account: {phone}")
            raise InactiveUserError()

        if not user.verify_password(password):
            logger.warning(f"Failed login attempt for phone: {phone}")
            raise InvalidCredentialsError()

        return user

    async def login(self, phone: str, password: str) -> Tuple[User, str]:
        """
        Authenticate a user, stamp last login and issue a token.

        Returns:
            Tuple of (user, token)
        """
        user = await self.authenticate_user(phone, password)
        user = await self.user_repo.record_login(user)

        logger.info(f"User logged in: {user.phone}")
        return user, self.create_token(user)

    async def admin_login(self, phone: str, password: str) -> Tuple[User, str]:
        """
        Authenticate an administrator.
        The role is checked before the password, and no token is issued to non-admins.

        Returns:
            Tuple of (admin user, token carrying the role claim)
        """
        user = await self.user_repo.get_by_phone(phone)
        if not user or user.role != UserRole.ADMIN:
            logger.warning(f"Rejected admin login for phone: {phone}")
            raise InvalidCredentialsError(ADMIN_CREDENTIALS_MESSAGE)

        if not user.is_active:
            raise InactiveUserError()

        if not user.verify_password(password):
            logger.warning(f"Failed admin login attempt for phone: {phone}")
            raise InvalidCredentialsError(ADMIN_CREDENTIALS_MESSAGE)

        user = await self.user_repo.record_login(user)

        logger.info(f"Admin logged in: {user.phone}")
        return user, self.create_token(user, include_role=True)

    async def get_current_user(self, token: str) -> User:
        """
        Resolve a bearer token to an active user.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token cannot be verified
            UnauthorizedError: If the subject no longer exists
            InactiveUserError: If the account is deactivated
        """
        try:
            token_payload = verify_token(token)
            user_id = uuid.UUID(token_payload.user_id)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise UnauthorizedError("User not found for token")

        if not user.is_active:
            raise InactiveUserError()

        return user

    async def get_profile(self, user_id: uuid.UUID) -> User:
        """
        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise UserNotFoundError()
        return user

    async def update_profile(self, user_id: uuid.UUID, profile_data: ProfileUpdate) -> User:
        """
        Apply the supplied profile fields.

        Args:
            user_id: Authenticated user's ID
            profile_data: Fields to change; omitted fields are left as-is

        Returns:
            Updated user

        Raises:
            UserNotFoundError: If the user does not exist
            ConflictError: If the new phone belongs to another user
        """
        changes = profile_data.model_dump(exclude_unset=True, exclude_none=True)

        if "phone" in changes:
            existing = await self.user_repo.get_by_phone(changes["phone"])
            if existing and existing.id != user_id:
                raise ConflictError("User already exists with this phone number")

        try:
            user = await self.user_repo.update_profile(user_id, changes)
        except IntegrityError:
            raise DuplicateUserError()

        if not user:
            raise UserNotFoundError()

        logger.info(f"Profile updated for user {user_id}: {sorted(changes)}")
        return user

    async def ensure_admin(self, name: str, phone: str, password: str) -> Optional[User]:
        """
        Create an administrator unless the phone is already registered.

        Returns:
            The created admin, or None if a user with that phone exists
        """
        if await self.user_repo.get_by_phone(phone):
            logger.info(f"User with phone {phone} already exists, skipping admin creation")
            return None

        admin = await self.user_repo.create_user({
            "name": name,
            "phone": phone,
            "password": password,
            "role": UserRole.ADMIN,
            "is_active": True,
        })
        logger.info(f"Admin user created: {admin.phone} (ID: {admin.id})")
        return admin
