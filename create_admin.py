#!/usr/bin/env python3
"""
Create the initial administrator account.
Ensures the tables exist, then inserts a single admin unless the phone is already registered.

Usage:
    python create_admin.py --phone 2222222222 --password s3cret [--name "Super Admin"]
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.database import Database
from app.models.user import User
from app.schemas.user import UserRegister
from app.services.auth import AuthService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def create_admin(
    database: Database,
    name: str,
    phone: str,
    password: str
) -> Optional[User]:
    """
    Create an administrator account.

    Returns:
        The new admin, or None if a user with that phone already exists
    """
    # Same phone, name and password rules as self-registration
    details = UserRegister(name=name, phone=phone, password=password)

    await database.create_tables()
    async with database.session_factory() as session:
        return await AuthService(session).ensure_admin(details.name, details.phone, details.password)


async def run(name: str, phone: str, password: str) -> int:
    database = Database(settings.database_url)
    logger.info(f"Using database: {database.engine.url.render_as_string(hide_password=True)}")

    try:
        admin = await create_admin(database, name, phone, password)
    finally:
        await database.dispose()

    if admin is None:
        logger.warning(f"Admin not created: a user with phone {phone} already exists")
        return 0

    logger.info(f"Admin user created successfully (phone: {admin.phone}, ID: {admin.id})")
    return 0


def main():
    """Command line entry point."""
    parser = argparse.ArgumentParser(description="Create the administrator account")
    parser.add_argument("--phone", required=True, help="Admin phone number (10 digits), used to log in")
    parser.add_argument("--password", required=True, help="Admin password (minimum 6 characters)")
    parser.add_argument("--name", default="Super Admin", help="Admin display name")

    args = parser.parse_args()

    try:
        sys.exit(asyncio.run(run(args.name, args.phone, args.password)))
    except PydanticValidationError as e:
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            logger.error(f"Invalid {field}: {error['msg']}")
        sys.exit(2)
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
