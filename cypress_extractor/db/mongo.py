from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from cypress_extractor.core.config import get_settings
from cypress_extractor.core.logging import logger
from cypress_extractor.models.schemas import APILog

settings = get_settings()

# -------------------------------------------------------
# MongoDB client (shared across the application)
# Created on first use; an empty MONGO_URI disables audit storage.
# -------------------------------------------------------
_client: Optional[AsyncIOMotorClient] = None


def get_db() -> Optional[AsyncIOMotorDatabase]:
    global _client
    if not settings.MONGO_URI:
        return None
    if _client is None:
        _client = AsyncIOMotorClient(settings.MONGO_URI)
    return _client[settings.MONGO_DB]


async def check_mongo_connection() -> bool:
    """
    Verify MongoDB connectivity using a lightweight ping.

    Called during startup to confirm Mongo availability.
    """
    db = get_db()
    if db is None:
        logger.info("MONGO_URI not set; API audit logs are disabled")
        return False

    try:
        await db.client.admin.command("ping")
        logger.info("MongoDB connection successful")
        return True
    except Exception as e:
        logger.error(f"MongoDB connection failed: {e}")
        return False


async def log_api_call(record: dict) -> None:
    """
    Insert API audit logs into MongoDB.

    Validation and database write errors are logged and never reach the
    API response.
    """
    db = get_db()
    if db is None:
        return

    try:
        model = APILog(**record)
        await db[settings.COLLECTION_API_LOGS].insert_one(
            model.model_dump(mode="python")
        )
    except Exception as e:
        logger.error(f"MongoDB log_api_call failed: {e}")


def close_mongo_connection() -> None:
    """
    Close MongoDB client on application shutdown.
    """
    global _client
    if _client is None:
        return
    try:
        _client.close()
        logger.info("MongoDB connection closed")
    except Exception as e:
        logger.error(f"MongoDB close failed: {e}")
    finally:
        _client = None
