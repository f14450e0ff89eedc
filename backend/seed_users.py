"""
Database seeding script for demo accounts.

Creates a SuperAdmin, one Active driver with a Car and one passenger so the
web client can be exercised end to end. Admins can only be created here.
Run this script after database is set up but before first use.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.db.session import AsyncSessionLocal, engine, Base
from backend.app.models.admin import Admin
from backend.app.models.driver import Driver
from backend.app.models.passenger import Passenger
from backend.app.models.vehicle import Vehicle
from backend.app.models.enums import AdminRole, DriverStatus, VehicleType
from backend.app.core.security import get_password_hash
from sqlalchemy import select

# Register remaining tables with Base before create_all
from backend.app.models import route, promo, ride, payment, feedback, accident, traffic_report, audit_log  # noqa: F401


async def seed_users():
    """
    Seed demo accounts.

    Creates:
    - 1 SuperAdmin
    - 1 Active driver owning a Car
    - 1 passenger
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting account seeding...")

        # Check if the admin already exists
        result = await db.execute(
            select(Admin).where(Admin.email == "admin@ridehail.com")
        )
        existing_admin = result.scalar_one_or_none()

        if existing_admin:
            print("ℹ️  Admin already exists, skipping seeding")
            return

        admin = Admin(
            name="Platform Admin",
            email="admin@ridehail.com",
            phone="9000000001",
            role=AdminRole.SUPER_ADMIN,
            hashed_password=get_password_hash("admin123")
        )
        db.add(admin)
        print("✅ Created SuperAdmin (admin@ridehail.com / admin123)")

        driver = Driver(
            full_name="Ravi Kumar",
            email="driver@ridehail.com",
            phone="9000000002",
            license_no="DL-0420110012345",
            status=DriverStatus.ACTIVE,
            hashed_password=get_password_hash("driver123")
        )
        db.add(driver)
        await db.flush()

        db.add(Vehicle(
            driver_id=driver.id,
            model="Maruti Swift Dzire",
            capacity=4,
            vehicle_type=VehicleType.CAR
        ))
        print("✅ Created driver with a Car (driver@ridehail.com / driver123)")

        passenger = Passenger(
            full_name="Asha Verma",
            email="passenger@ridehail.com",
            phone="9000000003",
            hashed_password=get_password_hash("passenger123")
        )
        db.add(passenger)
        print("✅ Created passenger (passenger@ridehail.com / passenger123)")

        await db.commit()

        print("\n🎉 Account seeding completed successfully!")
        print("\nNote: further passengers and drivers register via POST /v1/auth/register")


if __name__ == "__main__":
    asyncio.run(seed_users())
