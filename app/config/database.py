"""
Database configuration and connection management for MongoDB
"""
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING
from typing import Optional
import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

class DatabaseConfig:
    """MongoDB database configuration"""

    def __init__(self):
        self.MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
        self.DATABASE_NAME = os.getenv("DATABASE_NAME", "fleet_booking_db")
        self.client: Optional[AsyncIOMotorClient] = None
        self.database = None

    async def connect_db(self):
        """Connect to MongoDB"""
        try:
            self.client = AsyncIOMotorClient(self.MONGO_URI)
            self.database = self.client[self.DATABASE_NAME]
            # Test connection
            await self.client.admin.command('ping')
            logger.info("✅ Connected to MongoDB: %s", self.DATABASE_NAME)
        except Exception as e:
            logger.error("❌ Error connecting to MongoDB: %s", e)
            raise
        await self.ensure_indexes()

    async def close_db(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            logger.info("✅ MongoDB connection closed")

    def get_collection(self, collection_name: str):
        """Get a specific collection"""
        if self.database is None:
            raise Exception("Database not connected")
        return self.database[collection_name]

    async def ensure_indexes(self):
        """Create the unique and sort indexes every collection relies on"""
        vehicles = self.get_collection(Collections.VEHICLES)
        await vehicles.create_index([("number", ASCENDING)], unique=True)

        bookings = self.get_collection(Collections.BOOKINGS)
        await bookings.create_index([("bookingNumber", ASCENDING)], unique=True)
        await bookings.create_index([("createdAt", DESCENDING)])

        # A unique phone makes find-or-create a single conditional insert
        consumers = self.get_collection(Collections.CONSUMERS)
        await consumers.create_index([("phone", ASCENDING)], unique=True)
        await consumers.create_index([("email", ASCENDING)], unique=True)

        team_members = self.get_collection(Collections.TEAM_MEMBERS)
        await team_members.create_index([("email", ASCENDING)], unique=True)

# Global database instance
db_config = DatabaseConfig()

# Collection names
class Collections:
    VEHICLES = "vehicles"
    BOOKINGS = "bookings"
    CONSUMERS = "consumers"
    TEAM_MEMBERS = "team_members"

    # Referenced only (vehicle.vendor.vendorId), no routes of its own
    VENDORS = "vendors"
