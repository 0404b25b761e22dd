"""
Test configuration and fixtures for the property listing API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os

# Settings are read at import time; keep hashing cheap and mail off
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SMTP_HOST", "")

import pytest
import uuid
from typing import AsyncGenerator, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from app.main import create_app
from app.database import Database
from app.models.user import User, UserRole
from app.models.property import Property, PropertyType, ListingStatus
from app.repositories.user import UserRepository
from app.repositories.property import PropertyRepository
from app.services.auth import AuthService
from app.services.property import PropertyService
from app.services.notification import NotificationService
from app.utils.auth import create_access_token
from app.utils.dependencies import get_notification_service


# Test database configuration
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

TEST_PASSWORD = "testpassword123"


def random_phone() -> str:
    """A unique 10-digit phone number."""
    return f"9{uuid.uuid4().int % 10**9:09d}"


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh schema on a dedicated engine for every test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False} if "sqlite" in TEST_DATABASE_URL else {}
    )
    db = Database(TEST_DATABASE_URL, engine=engine)
    await db.create_tables()
    yield db
    await db.drop_tables()
    await db.dispose()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with database.session_factory() as session:
        yield session


class RecordingNotificationService(NotificationService):
    """Notification service that records outgoing mail instead of sending it."""

    def __init__(self, fail: bool = False):
        super().__init__()
        self.fail = fail
        self.sent: List[Tuple[str, str, str]] = []

    async def send_email(self, to: str, subject: str, body: str) -> bool:
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append((to, subject, body))
        return True

    def recipients(self) -> List[str]:
        return [to for to, _, _ in self.sent]


@pytest.fixture
def notifications() -> RecordingNotificationService:
    return RecordingNotificationService()


@pytest.fixture
def app(database: Database, notifications: RecordingNotificationService) -> FastAPI:
    """Application wired to the test database and recording notifications."""
    test_app = create_app(database)
    test_app.dependency_overrides[get_notification_service] = lambda: notifications
    return test_app


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client against the in-process application."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    """Create a user repository instance."""
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    """Create a property repository instance."""
    return PropertyRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    """Create an auth service instance."""
    return AuthService(db_session)


@pytest.fixture
def property_service(db_session: AsyncSession) -> PropertyService:
    """Create a property service instance."""
    return PropertyService(db_session, placeholder_image_url="https://example.com/placeholder.jpg")


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        phone: Optional[str] = None,
        password: str = TEST_PASSWORD,
        name: str = "Test User",
        email: Optional[str] = None,
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> dict:
        """Create user data dictionary."""
        return {
            "phone": phone or random_phone(),
            "password": password,
            "name": name,
            "email": email,
            "role": role,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        """Create a test user in the database."""
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        owner_id: uuid.UUID,
        title: str = "Spacious 2BHK Flat",
        description: str = "Sunny flat close to the station",
        type: PropertyType = PropertyType.FLAT,
        bhk: Optional[str] = "2",
        location: str = "Vasai West",
        price: int = 4500000,
        status: ListingStatus = ListingStatus.SALE,
        area: Optional[int] = 850,
        images: Optional[List[str]] = None,
        is_approved: bool = True,
        is_active: bool = True
    ) -> dict:
        """Create property data dictionary."""
        return {
            "owner_id": owner_id,
            "title": title,
            "description": description,
            "type": type,
            "bhk": bhk,
            "location": location,
            "price": price,
            "status": status,
            "area": area,
            "images": images or ["https://example.com/listing.jpg"],
            "is_approved": is_approved,
            "is_active": is_active
        }

    @staticmethod
    async def create_property(property_repo: PropertyRepository, owner_id: uuid.UUID, **kwargs) -> Property:
        """Create a test property in the database."""
        return await property_repo.create_property(
            PropertyFactory.create_property_data(owner_id, **kwargs)
        )


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    """Create a regular user."""
    return await UserFactory.create_user(
        user_repository,
        phone="9876543210",
        name="Rahul Patil",
        email="rahul@example.com"
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    """Create a test admin user."""
    return await UserFactory.create_user(
        user_repository,
        phone="2222222222",
        name="Super Admin",
        email="admin@example.com",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    """Create a deactivated user."""
    return await UserFactory.create_user(
        user_repository,
        phone="9000000001",
        name="Inactive User",
        is_active=False
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_admin: User) -> Property:
    """Create a visible listing."""
    return await PropertyFactory.create_property(property_repository, test_admin.id)


@pytest.fixture
async def test_unapproved_property(property_repository: PropertyRepository, test_admin: User) -> Property:
    """Create a listing hidden from the public."""
    return await PropertyFactory.create_property(
        property_repository,
        test_admin.id,
        title="Pending Villa",
        type=PropertyType.VILLA,
        is_approved=False
    )


# Utility functions for tests
def auth_headers(user: User, include_role: bool = False) -> Dict[str, str]:
    """Bearer header for a user, as issued by login (or admin login)."""
    token = create_access_token(user.id, role=user.role if include_role else None)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(test_user: User) -> Dict[str, str]:
    return auth_headers(test_user)


@pytest.fixture
def admin_headers(test_admin: User) -> Dict[str, str]:
    return auth_headers(test_admin, include_role=True)
