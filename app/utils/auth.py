"""
Authentication utilities for JWT session tokens.
Provides token generation and validation.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from app.config import settings
from app.models.user import UserRole
import uuid


class TokenPayload:
    """JWT token payload structure."""

    def __init__(self, user_id: str, role: Optional[str], exp: datetime):
        self.user_id = user_id
        self.role = role
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from dictionary."""
        return cls(
            user_id=data["sub"],
            role=data.get("role"),  # Only admin-issued tokens carry a role
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


def create_access_token(
    user_id: uuid.UUID,
    role: Optional[UserRole] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed session token.

    Args:
        user_id: User's UUID, stored as the subject
        role: Optional role claim (set for admin logins)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(days=settings.access_token_expire_days)

    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "iat": now,
        "type": "access"
    }
    if role is not None:
        to_encode["role"] = role.value

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def verify_token(token: str) -> TokenPayload:
    """
    Verify and decode a session token.

    Args:
        token: JWT token string

    Returns:
        Decoded TokenPayload

    Raises:
        ExpiredSignatureError: If the token has expired
        JWTError: If the token is otherwise invalid
    """
    payload = jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm]
    )

    if payload.get("type") != "access":
        raise JWTError("Invalid token type")

    if not payload.get("sub") or not payload.get("exp"):
        raise JWTError("Invalid token payload")

    return TokenPayload.from_dict(payload)

