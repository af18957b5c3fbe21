"""
Database seeding script for initial users.

Creates ADMIN, SENDER, RECEIVER and DELIVERY users for local development.
Run this script after the database is set up but before first use.
"""

import asyncio

from parceltrack.app.core.config import settings
from parceltrack.app.db.session import AsyncSessionLocal, engine, Base
from parceltrack.app.domain.identifiers.generator import generate_short_id
from parceltrack.app.models.user import User
from parceltrack.app.models.parcel import Parcel, ParcelStatusLog  # register tables with Base
from parceltrack.app.models.enums import UserRole
from parceltrack.app.core.security import get_password_hash
from parceltrack.app.repositories.user_repository import UserRepository

SEED_USERS = [
    ("Admin", "admin@parceltrack.io", "admin123", UserRole.ADMIN),
    ("Sam Sender", "sender@parceltrack.io", "sender123", UserRole.SENDER),
    ("Rita Receiver", "receiver@parceltrack.io", "receiver123", UserRole.RECEIVER),
    ("Dan Delivery", "delivery@parceltrack.io", "delivery123", UserRole.DELIVERY),
]


async def seed_users():
    """
    Seed one user per role.
    
    Admins cannot self-register, so this is the way to get the first one.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    async with AsyncSessionLocal() as db:
        print("🌱 Starting user seeding...")
        users = UserRepository(db)
        
        if await users.find_by_email(SEED_USERS[0][1]):
            print("ℹ️  ADMIN user already exists, skipping seeding")
            return
        
        for name, email, password, role in SEED_USERS:
            db.add(User(
                name=name,
                email=email,
                hashed_password=get_password_hash(password),
                role=role,
                short_id=generate_short_id(settings.short_id_length),
                is_blocked=False,
            ))
            print(f"✅ Created {role.value.upper()} user ({email} / {password})")
        
        await db.commit()
        print("\n🎉 User seeding completed successfully!")
        print("\nNote: further users register via POST /v1/auth/register")


if __name__ == "__main__":
    asyncio.run(seed_users())
