"""
Database seeding script for the fleet roster.

Creates a small set of vehicles, drivers and clients so trips can be booked
against them in development. Run this script after database is set up.
"""

import asyncio

from sqlalchemy import select

from fleet_ledger.app.db.session import AsyncSessionLocal, Base, engine
from fleet_ledger.app.models.vehicle import Vehicle
from fleet_ledger.app.models.driver import Driver
from fleet_ledger.app.models.client import Client
from fleet_ledger.app.models.enums import VehicleStatus


async def seed_fleet():
    """
    Seed the fleet roster.

    Creates:
    - 2 vehicles (one in maintenance)
    - 2 drivers
    - 2 clients
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting fleet seeding...")

        existing = (await db.execute(select(Vehicle).limit(1))).scalar_one_or_none()
        if existing:
            print("ℹ️  Vehicles already exist, skipping seeding")
            return

        db.add_all([
            Vehicle(vehicle_number="MH12AB1234", vehicle_type="truck", make="Tata", model="LPT 1613",
                    fuel_type="diesel", status=VehicleStatus.ACTIVE),
            Vehicle(vehicle_number="MH14CD5678", vehicle_type="tempo", make="Mahindra", model="Bolero Pik-Up",
                    fuel_type="diesel", status=VehicleStatus.MAINTENANCE),
        ])
        print("✅ Created 2 vehicles")

        db.add_all([
            Driver(name="Ramesh Kumar", phone="9876543210", license_number="MH1220110012345"),
            Driver(name="Suresh Patil", phone="9123456780", license_number="MH1420150067890"),
        ])
        print("✅ Created 2 drivers")

        db.add_all([
            Client(name="Acme Traders", company_name="Acme Pvt Ltd", gst_number="27ABCDE1234F1Z5",
                   address="Bhosari MIDC, Pune", phone="02027120000"),
            Client(name="Zenith Foods", company_name="Zenith Foods LLP", phone="02226540000"),
        ])
        print("✅ Created 2 clients")

        await db.commit()

        print("\n🎉 Fleet seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(seed_fleet())
