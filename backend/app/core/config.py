# app/core/config.py
import os
import logging
from dotenv import load_dotenv
from pathlib import Path
from typing import Optional, List
from pydantic_settings import BaseSettings

# --- Path Setup & .env Loading ---
# .env lives in the backend project root, two levels up from core
BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_PATH = BASE_DIR / '.env'

if ENV_PATH.is_file():
    load_dotenv(dotenv_path=ENV_PATH)
else:
    # Logging is not configured yet at this point
    print(f"Warning: .env file not found at {ENV_PATH}. Relying on system environment variables.")

DEFAULT_JWT_SECRET = "change-me-access-secret"
DEFAULT_JWT_REFRESH_SECRET = "change-me-refresh-secret"

# --- Pydantic Settings Class ---
class Settings(BaseSettings):
    PROJECT_NAME: str = "Almajiri Survey API"
    DEBUG: bool = False
    VERSION: str = "0.1.0"
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Database Settings
    MONGODB_URL: Optional[str] = None
    DB_NAME: str = "almajiri_survey"
    MONGODB_MAX_POOL_SIZE: int = 10

    # Token Settings
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_REFRESH_SECRET: str = DEFAULT_JWT_REFRESH_SECRET
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Password hashing and identifier generation
    BCRYPT_ROUNDS: int = 12
    INTERVIEWER_ID_MAX_ATTEMPTS: int = 20

    # Azure Blob Storage Settings
    AZURE_BLOB_CONNECTION_STRING: Optional[str] = None
    AZURE_BLOB_CONTAINER_NAME: str = "survey-attachments"

    # Upload limits
    MAX_FILE_SIZE: int = 10 * 1024 * 1024
    ALLOWED_FILE_TYPES: List[str] = [
        "image/jpeg",
        "image/png",
        "image/webp",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
        "text/csv",
    ]

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

# Create an instance of the Settings class
settings = Settings()

# --- Logging Setup ---
LOG_LEVEL_NAME: str = os.getenv("LOG_LEVEL", settings.LOG_LEVEL).upper()
if settings.DEBUG:
    LOG_LEVEL_NAME = "DEBUG"

ACTUAL_LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)

logging.basicConfig(
    level=ACTUAL_LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logging.getLogger('uvicorn').setLevel(logging.WARNING)
logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
logging.getLogger('fastapi').setLevel(logging.INFO if settings.DEBUG else logging.WARNING)
logging.getLogger('motor').setLevel(logging.WARNING)
logging.getLogger('azure').setLevel(logging.WARNING)
logging.getLogger('pymongo').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# --- Validate critical settings after loading ---
if not settings.MONGODB_URL:
    logger.critical("CRITICAL: MONGODB_URL environment variable is not set and no default provided.")

if settings.JWT_SECRET == DEFAULT_JWT_SECRET:
    logger.warning("JWT_SECRET is using the built-in default. Set it before deploying.")
if settings.JWT_REFRESH_SECRET == DEFAULT_JWT_REFRESH_SECRET:
    logger.warning("JWT_REFRESH_SECRET is using the built-in default. Set it before deploying.")
if settings.JWT_SECRET == settings.JWT_REFRESH_SECRET:
    logger.warning("JWT_SECRET and JWT_REFRESH_SECRET are identical. Token classes are then told apart only by their type claim.")

if not settings.AZURE_BLOB_CONNECTION_STRING:
    logger.warning("AZURE_BLOB_CONNECTION_STRING environment variable is not set. File uploads will fail.")

if settings.DEBUG:
    logger.debug(f"PROJECT_NAME: {settings.PROJECT_NAME}")
    logger.debug(f"API_V1_PREFIX: {settings.API_V1_PREFIX}")
    logger.debug(f"DB_NAME: {settings.DB_NAME}")
    logger.debug(f"AZURE_BLOB_CONTAINER_NAME: {settings.AZURE_BLOB_CONTAINER_NAME}")
    logger.debug(f"MONGODB_URL Set: {'Yes' if settings.MONGODB_URL else 'No - CRITICAL'}")
    logger.debug(f"AZURE_BLOB_CONNECTION_STRING Set: {'Yes' if settings.AZURE_BLOB_CONNECTION_STRING else 'No - WARNING'}")

# Module-level aliases for modules that import constants directly
PROJECT_NAME = settings.PROJECT_NAME
DEBUG = settings.DEBUG
VERSION = settings.VERSION
API_V1_PREFIX = settings.API_V1_PREFIX
MONGODB_URL = settings.MONGODB_URL
DB_NAME = settings.DB_NAME
AZURE_BLOB_CONNECTION_STRING = settings.AZURE_BLOB_CONNECTION_STRING
AZURE_BLOB_CONTAINER_NAME = settings.AZURE_BLOB_CONTAINER_NAME
