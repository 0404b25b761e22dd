"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, mail transport and environment variables.
"""

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import make_url
from typing import List
from functools import lru_cache


DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"


def ensure_database_name(url: str, database_name: str) -> str:
    """
    Append the database name to a connection URL that does not carry one.

    Args:
        url: Database connection URL
        database_name: Name to use when the URL has no database component

    Returns:
        Connection URL with a database name
    """
    parsed = make_url(url)
    if parsed.database or parsed.get_backend_name() == "sqlite":
        return url
    return parsed.set(database=database_name).render_as_string(hide_password=False)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application configuration
    app_name: str = "Vasai Properties API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Database configuration
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/"
    database_name: str = "vasai_property"

    # JWT configuration
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # Password hashing work factor
    bcrypt_rounds: int = 10

    # Mail transport, disabled while smtp_host is empty
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    mail_from: str = "no-reply@vasaiproperties.com"
    admin_email: str = "admin@vasaiproperties.com"

    # Listings
    placeholder_image_url: str = (
        "https://images.pexels.com/photos/106399/pexels-photo-106399.jpeg"
        "?auto=compress&cs=tinysrgb&w=800"
    )

    # API configuration
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Pagination defaults
    default_page_size: int = 12
    max_page_size: int = 100

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if v and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v and v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @model_validator(mode="after")
    def normalize_database_url(self):
        """Append the configured database name when the URL has none."""
        self.database_url = ensure_database_name(self.database_url, self.database_name)
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def mail_enabled(self) -> bool:
        """Whether outbound email is configured."""
        return bool(self.smtp_host)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
