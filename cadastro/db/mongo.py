"""
cadastro/db/mongo.py

Purpose: MongoDB connection setup

- Initializes Motor client with connection pooling
- Single collection: registrations
- Health checks and retry logic
- Proper connection lifecycle management
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from typing import Optional
import asyncio
from cadastro.core.config import settings
from cadastro.core.logging import get_logger

logger = get_logger(__name__)

# Global MongoDB client
_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


async def connect_to_mongo():
    """
    Establishes connection to MongoDB with retry logic.
    Called during application startup.
    """
    global _client, _database

    if _client is not None:
        logger.warning("MongoDB client already initialized")
        return

    max_retries = 3
    retry_delay = 2

    for attempt in range(1, max_retries + 1):
        try:
            logger.info(
                f"Attempting to connect to MongoDB (attempt {attempt}/{max_retries})"
            )

            client = AsyncIOMotorClient(
                settings.MONGODB_URL,
                maxPoolSize=50,
                minPoolSize=5,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000,
                retryWrites=True,
                retryReads=True,
            )

            # Verify connection
            await client.admin.command("ping")

            _client = client
            _database = client[settings.MONGODB_DB_NAME]

            logger.info(
                f"✅ Successfully connected to MongoDB: {settings.MONGODB_DB_NAME}"
            )
            return

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(
                f"Failed to connect to MongoDB (attempt {attempt}/{max_retries}): {e}"
            )

            if attempt < max_retries:
                logger.info(f"Retrying in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logger.critical("Failed to connect to MongoDB after all retries")
                raise ConnectionError("Could not establish MongoDB connection") from e


async def close_mongo_connection():
    """
    Closes the MongoDB connection.
    Called during application shutdown.
    """
    global _client, _database

    if _client:
        logger.info("Closing MongoDB connection")
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


async def check_database_health() -> bool:
    """
    Checks if the database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    if _client is None:
        logger.error("MongoDB client not initialized")
        return False

    try:
        await _client.admin.command("ping")
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


def get_registrations_collection():
    """
    Returns the registrations collection.

    Fields:
    - name: str
    - email: str
    - individual_id: str | None (CPF, digits only)
    - business_id: str | None (CNPJ, digits only)
    - password_hash: str | None (bcrypt)
    - document_ref: str | None (document store reference)
    - document_validated: bool | None
    - created_at: datetime
    """
    if _database is None:
        raise RuntimeError(
            "Database not initialized. Call connect_to_mongo() during startup."
        )
    return _database["registrations"]
