"""Database models and connection setup."""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING
from typing import Optional
from config.settings import settings
from utils.logger import setup_logger

logger = setup_logger(__name__)

USERS = "users"
EXERCISES = "exercises"


class Database:
    """Database connection manager."""

    client: Optional[AsyncIOMotorClient] = None


db = Database()


def database_name(url: str) -> str:
    """Database name is the last path segment of the MongoDB URL."""
    name = url.rsplit("/", 1)[-1].split("?", 1)[0]
    return name or "exercise_tracker"


async def connect_to_mongo():
    """Create database connection."""
    db.client = AsyncIOMotorClient(
        settings.mongodb_url,
        serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
    )
    logger.info(f"Connected to MongoDB database '{database_name(settings.mongodb_url)}'")


async def close_mongo_connection():
    """Close database connection."""
    if db.client:
        db.client.close()
        db.client = None
        logger.info("Disconnected from MongoDB")


async def init_mongo() -> AsyncIOMotorDatabase:
    """Connect to MongoDB and make sure both collections have their indexes."""
    await connect_to_mongo()

    database = get_database()

    # Users collection: usernames are unique
    await database[USERS].create_index([("username", ASCENDING)], unique=True)

    # Exercises collection: logs are read per user in date order
    await database[EXERCISES].create_index([("user_id", ASCENDING), ("date", ASCENDING)])

    logger.info("MongoDB initialized: collections ready with indexes")
    return database


def get_database() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return db.client[database_name(settings.mongodb_url)]
