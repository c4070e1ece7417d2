import asyncio
import os
import sys
from datetime import datetime, timedelta

# Ensure usage of the current directory for imports
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from app.config.database import db_config, Collections
from app.database.db_operations import db_ops
from app.models.vehicle import VehicleCreate
from app.models.team_member import TeamMemberCreate
from app.services.vehicle_service import to_document

today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)

VEHICLES = [
    {
        "number": "KA01AB1234",
        "type": "car",
        "model": "Toyota Innova Crysta",
        "capacity": 7,
        "driver": {"name": "Ravi Kumar", "phone": "9845012345", "license": "KA0120190001234"},
        "compliance": {
            "rcExpiry": today + timedelta(days=900),
            "insurance": {"number": "INS-778812", "expiry": today + timedelta(days=20)},
            "fitnessExpiry": today + timedelta(days=400),
            "permit": {"number": "PRM-55120", "expiry": today + timedelta(days=180)},
            "pocExpiry": today + timedelta(days=75),
        },
    },
    {
        "number": "KA05MN4521",
        "type": "bus",
        "model": "Ashok Leyland Falcon",
        "capacity": 45,
        "driver": {"name": "Manjunath S", "phone": "9900112233", "license": "KA0520150004521"},
        "compliance": {
            "rcExpiry": today + timedelta(days=1200),
            "insurance": {"number": "INS-991044", "expiry": today + timedelta(days=300)},
            "fitnessExpiry": today - timedelta(days=3),
            "permit": {"number": "PRM-88231", "expiry": today + timedelta(days=60)},
            "pocExpiry": today + timedelta(days=10),
        },
    },
    {
        "number": "KA03TT0789",
        "type": "tempo",
        "model": "Force Traveller 26",
        "capacity": 26,
        "status": "maintenance",
        "ownership": "leased",
    },
]

ADMIN = {
    "name": "Fleet Admin",
    "email": "admin@fleetbooking.in",
    "phone": "9000000000",
    "role": "owner",
    "permissions": ["bookings", "vehicles", "consumers", "team"],
}

async def seed_data():
    print("🌱 Starting database seeding...")

    try:
        await db_config.connect_db()

        for data in VEHICLES:
            vehicle = VehicleCreate(**data)
            existing = await db_ops.get_one(Collections.VEHICLES, {"number": vehicle.number})
            if existing:
                print(f"⚠️ Vehicle already exists: {vehicle.number}")
                continue
            await db_ops.create(Collections.VEHICLES, to_document(vehicle))
            print(f"✅ Created Vehicle: {vehicle.number} ({vehicle.type})")

        admin = TeamMemberCreate(**ADMIN)
        existing_admin = await db_ops.get_one(Collections.TEAM_MEMBERS, {"email": admin.email})
        if existing_admin:
            print(f"⚠️ Team member already exists: {admin.email}")
        else:
            await db_ops.create(Collections.TEAM_MEMBERS, admin.model_dump())
            print(f"✅ Created Team Member: {admin.email}")

        print("🎉 Seeding complete!")
    finally:
        await db_config.close_db()

if __name__ == "__main__":
    asyncio.run(seed_data())
