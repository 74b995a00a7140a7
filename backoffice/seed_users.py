"""
Database seeding script for the first admin user.

Users are only created by an admin, so a fresh database needs one admin
to bootstrap. Run this script after the database is reachable.

Environment:
    SEED_ADMIN_EMAIL     (default: admin@logistics-backoffice.com)
    SEED_ADMIN_PASSWORD  (default: admin123)
"""

import asyncio
import os

from email_validator import validate_email
from sqlalchemy import select

from backoffice.app.core.config import settings
from backoffice.app.core.security import get_password_hash
from backoffice.app.db.session import Database
from backoffice.app.models.enums import UserRole
from backoffice.app.models.user import User


def normalize_email(email: str) -> str:
    """Normalise the address the same way the login schema does."""
    return validate_email(email.strip(), check_deliverability=False).normalized


async def seed_users():
    """Create the bootstrap ADMIN user unless one with the same email exists."""
    email = normalize_email(os.environ.get("SEED_ADMIN_EMAIL", "admin@logistics-backoffice.com"))
    password = os.environ.get("SEED_ADMIN_PASSWORD", "admin123")

    database = Database.from_settings(settings)
    await database.connect()
    try:
        async with database.session() as db:
            print("🌱 Starting user seeding...")

            result = await db.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none():
                print(f"ℹ️  {email} already exists, skipping seeding")
                return

            db.add(User(
                name="Administrator",
                email=email,
                hashed_password=get_password_hash(password),
                role=UserRole.ADMIN,
                is_active=True,
            ))
            await db.commit()
            print(f"✅ Created ADMIN user ({email})")
    finally:
        await database.disconnect()


if __name__ == "__main__":
    asyncio.run(seed_users())
