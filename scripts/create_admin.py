#!/usr/bin/env python3
"""Create or reset an admin account.

Admins cannot register through the API, so they are created here.
"""

import asyncio

from sqlalchemy import select

from stayfinder.core.security import get_password_hash
from stayfinder.database import async_session, close_db
from stayfinder.models.user import User


async def create_admin(
    email: str = "admin@stayfinder.local",
    password: str = "Admin@123",
    name: str = "StayFinder Admin",
) -> None:
    """Create an admin user if it doesn't exist, otherwise reset its password."""
    email = email.lower()
    async with async_session() as session:
        result = await session.execute(select(User).where(User.email == email))
        existing = result.scalar_one_or_none()

        if existing:
            if existing.host_profile is not None:
                raise SystemExit(f"{email} is a host account; use a different email for the admin")
            existing.password_hash = get_password_hash(password)
            existing.role = "admin"
            existing.is_verified = True
            existing.is_active = True
            await session.commit()
            print(f"Updated existing admin user: {email}")
        else:
            session.add(
                User(
                    email=email,
                    name=name,
                    password_hash=get_password_hash(password),
                    role="admin",
                    is_verified=True,
                    is_active=True,
                    host_profile=None,
                )
            )
            await session.commit()
            print(f"Created admin user: {email}")

    await close_db()
    print(f"Email: {email}")
    print("Role: admin")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", default="admin@stayfinder.local", help="Admin email")
    parser.add_argument("--password", default="Admin@123", help="Admin password")
    parser.add_argument("--name", default="StayFinder Admin", help="Display name")

    args = parser.parse_args()

    asyncio.run(create_admin(email=args.email, password=args.password, name=args.name))
