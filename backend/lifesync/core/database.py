"""
MongoDB Connection

Async MongoDB client using motor.
"""

from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
import logging

from lifesync.core.config import settings

logger = logging.getLogger(__name__)

# Global client instance
_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


async def connect_mongodb() -> AsyncIOMotorDatabase:
    """Connect to MongoDB and return database instance."""
    global _client, _database

    if _database is not None:
        return _database

    logger.info(f"Connecting to MongoDB: {settings.MONGO_URL}")
    _client = AsyncIOMotorClient(settings.MONGO_URL)
    _database = _client[settings.MONGO_DB_NAME]

    # Test connection
    await _client.admin.command('ping')
    logger.info(f"Connected to MongoDB database: {settings.MONGO_DB_NAME}")

    return _database


async def close_mongodb():
    """Close MongoDB connection."""
    global _client, _database

    if _client:
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


def get_database() -> AsyncIOMotorDatabase:
    """Get current database instance (must be connected first)."""
    if _database is None:
        raise RuntimeError("MongoDB not connected. Call connect_mongodb() first.")
    return _database


# Collection names
TASKS_COLLECTION = "tasks"
CALENDAR_EVENTS_COLLECTION = "calendar_events"
GOALS_COLLECTION = "goals"
MOOD_ENTRIES_COLLECTION = "mood_entries"
