# ============================================================================
# Create Admin User
# ============================================================================
"""
Script to create an admin user, or promote an existing account.

Self-registration only allows students and teachers, so the first admin
has to be created here.

Usage:
    python scripts/create_admin.py --email admin@example.com --name "Site Admin" --password SecurePass123
"""

import asyncio
import argparse
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from app.config import get_settings
from app.core.context import AppContext
from app.core.security import get_password_hash
from app.models.user import User, UserRole

async def create_admin(email: str, name: str, password: str):
    """Create an admin user"""
    context = AppContext.from_settings(get_settings())
    await context.database.create_all()
    email = email.strip().lower()

    try:
        async with context.database.session() as db:
            result = await db.execute(select(User).where(User.email == email))
            existing = result.scalar_one_or_none()

            if existing:
                print(f"User with email {email} already exists")
                existing.role = UserRole.ADMIN
                existing.is_active = True
                existing.password_hash = get_password_hash(password)
                await db.commit()
                print("Updated existing user to admin")
            else:
                user = User(
                    name=name,
                    email=email,
                    password_hash=get_password_hash(password),
                    role=UserRole.ADMIN,
                    is_active=True
                )
                db.add(user)
                await db.commit()
                print(f"Created admin user: {email}")
    finally:
        await context.database.dispose()

def main():
    parser = argparse.ArgumentParser(description="Create admin user")
    parser.add_argument("--email", required=True, help="Email address")
    parser.add_argument("--name", default="Administrator", help="Display name")
    parser.add_argument("--password", required=True, help="Password (8-72 characters)")

    args = parser.parse_args()
    if not 8 <= len(args.password) <= 72:
        parser.error("password must be between 8 and 72 characters")
    asyncio.run(create_admin(args.email, args.name, args.password))

if __name__ == "__main__":
    main()
