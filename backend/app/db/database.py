# app/db/database.py
import motor.motor_asyncio
import logging
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone

from app.core.config import settings, MONGODB_URL, DB_NAME, PROJECT_NAME

logger = logging.getLogger(f"{PROJECT_NAME}.db")

# One pooled client per process, shared by every request
_client: Optional[motor.motor_asyncio.AsyncIOMotorClient] = None
_db: Optional[motor.motor_asyncio.AsyncIOMotorDatabase] = None

async def connect_to_mongo() -> bool:
    """
    Opens the pooled Motor client and verifies it with a ping.

    Returns:
        bool: True once the survey database is reachable, False otherwise.
    """
    global _client, _db
    if _db is not None:
        return True
    if not MONGODB_URL:
        logger.error("MONGODB_URL is not set; survey data cannot be stored.")
        return False

    client = motor.motor_asyncio.AsyncIOMotorClient(
        MONGODB_URL,
        serverSelectionTimeoutMS=10000,
        maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
        uuidRepresentation='standard',
        appname=PROJECT_NAME,
    )
    try:
        await client.admin.command('ping')
    except Exception as e:
        logger.error(f"MongoDB did not answer the startup ping: {e}", exc_info=True)
        client.close()
        return False

    _client, _db = client, client[DB_NAME]
    logger.info(f"Connected to survey database '{DB_NAME}' (pool size {settings.MONGODB_MAX_POOL_SIZE})")
    return True

async def close_mongo_connection():
    global _client, _db
    if _client is None:
        return
    _client.close()
    _client, _db = None, None
    logger.info("MongoDB client closed.")

def get_database() -> Optional[motor.motor_asyncio.AsyncIOMotorDatabase]:
    """Survey database handle, or None when startup could not connect."""
    if _db is None:
        logger.warning("Survey database requested before a connection was made.")
    return _db

def _survey_collections() -> List[str]:
    from . import crud
    return [
        crud.USER_COLLECTION,
        crud.SCHOOL_COLLECTION,
        crud.BEGGAR_COLLECTION,
        crud.DRAFT_COLLECTION,
        crud.FILE_COLLECTION,
    ]

async def check_database_health() -> Dict[str, Any]:
    """
    Pings the database and lists which survey collections exist yet.

    status is ERROR when the database is unreachable, WARNING when it answers
    but a collection has not been created (collections appear on first insert),
    OK otherwise.
    """
    health_info: Dict[str, Any] = {
        "status": "ERROR",
        "connected": False,
        "missing_collections": [],
        "error": None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    db_instance = get_database()
    if db_instance is None:
        health_info["error"] = "No database connection (startup could not connect)"
        return health_info

    try:
        await db_instance.client.admin.command('ping')
        existing = await db_instance.list_collection_names()
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        health_info["error"] = str(e)
        return health_info

    missing = [name for name in _survey_collections() if name not in existing]
    health_info.update({"connected": True, "missing_collections": missing})
    health_info["status"] = "WARNING" if missing else "OK"
    if missing:
        logger.warning(f"Survey collections not created yet: {missing}")
    return health_info
