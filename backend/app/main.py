# app/main.py
import logging
import psutil # For system metrics in health check
import time   # For uptime calculation
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Dict, Any, List
from datetime import datetime, timedelta, timezone # For uptime calculation
from fastapi import status

from app.core.config import settings, PROJECT_NAME, API_V1_PREFIX, VERSION
from app.db.database import connect_to_mongo, close_mongo_connection, check_database_health
from app.db.init_db import init_db_indexes
from app.services.auth_service import IdentifierGenerationError
from app.services.blob_storage import close_blob_service_client

# Import all endpoint routers
from app.api.v1.endpoints.auth import router as auth_router
from app.api.v1.endpoints.users import router as users_router
from app.api.v1.endpoints.schools import router as schools_router
from app.api.v1.endpoints.beggars import router as beggars_router
from app.api.v1.endpoints.drafts import router as drafts_router
from app.api.v1.endpoints.files import router as files_router
from app.api.v1.endpoints.analytics import router as analytics_router

logger = logging.getLogger(__name__)

# Track application start time for uptime calculation
APP_START_TIME = time.time()

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    description="Field survey API for Almajiri schools, their students and street beggars",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Error envelope ---

def error_response(status_code: int, message: str, errors: List[str] = None, headers: Dict[str, str] = None) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)

def format_validation_errors(errors) -> List[str]:
    """One "<field.path>: <reason>" entry per violation; the leading 'body' segment is dropped."""
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] == "body":
            loc = loc[1:]
        formatted.append(f"{'.'.join(loc) or 'body'}: {error.get('msg')}")
    return formatted

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = format_validation_errors(exc.errors())
    logger.info(f"Validation failed for {request.method} {request.url.path}: {errors}")
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors=errors)

@app.exception_handler(IdentifierGenerationError)
async def identifier_generation_handler(request: Request, exc: IdentifierGenerationError):
    logger.error(f"Identifier generation failed for {request.url.path}: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Could not generate a unique interviewer ID")

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

# --- Event Handlers for DB Connection ---
@app.on_event("startup")
async def startup_event():
    """Connect to MongoDB and ensure indexes on application startup."""
    logger.info("Executing startup event: Connecting to database...")
    connected = await connect_to_mongo()
    if not connected:
        logger.critical("FATAL: Database connection failed on startup. Application might not function correctly.")
        return
    logger.info("Startup event: Database connection successful.")
    if await init_db_indexes():
        logger.info("Database indexes ensured.")
    else:
        logger.warning("Some database indexes could not be ensured; uniqueness may not be enforced.")

@app.on_event("shutdown")
async def shutdown_event():
    """Close blob storage and MongoDB clients on application shutdown."""
    logger.info("Executing shutdown event...")
    await close_blob_service_client()
    logger.info("Disconnecting from database...")
    await close_mongo_connection()

# --- API Endpoints ---
@app.get("/", tags=["Root"], include_in_schema=False)
async def read_root():
    """Root endpoint welcome message."""
    return {"message": f"Welcome to {PROJECT_NAME}"}

@app.get("/health", status_code=200, tags=["Health Check"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint that verifies:
    - Application status and metrics (uptime, memory)
    - Database connectivity and collections
    """
    db_health = await check_database_health()

    process = psutil.Process()
    memory_info = process.memory_info()

    uptime_seconds = time.time() - APP_START_TIME
    uptime = str(timedelta(seconds=int(uptime_seconds)))

    health_info = {
        "status": "OK",
        "application": {
            "name": PROJECT_NAME,
            "version": VERSION,
            "status": "OK",
            "uptime": uptime,
            "memory_usage": {
                "rss_bytes": memory_info.rss,
                "vms_bytes": memory_info.vms,
                "percent": f"{process.memory_percent():.2f}%"
            }
        },
        "database": db_health,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

    if db_health.get("status") == "ERROR":
        health_info["status"] = "ERROR"
    elif db_health.get("status") == "WARNING":
        health_info["status"] = "WARNING"

    return health_info

# --- Liveness and Readiness Probes ---
@app.get("/healthz", tags=["Probes"], status_code=status.HTTP_200_OK)
async def liveness_probe():
    """Liveness probe: Checks if the application process is running and responsive."""
    return {"status": "live"}

@app.get("/readyz", tags=["Probes"])
async def readiness_probe(response: Response):
    """Readiness probe: ready once the database answers. Missing collections only warn."""
    db_health = await check_database_health()
    if db_health.get("status") in ("OK", "WARNING"):
        response.status_code = status.HTTP_200_OK
        return {"status": "ready", "database": db_health}
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "not_ready", "database": db_health}

# --- Include API Routers ---
app.include_router(auth_router, prefix=API_V1_PREFIX)
app.include_router(users_router, prefix=API_V1_PREFIX)
app.include_router(schools_router, prefix=API_V1_PREFIX)
app.include_router(beggars_router, prefix=API_V1_PREFIX)
app.include_router(drafts_router, prefix=API_V1_PREFIX)
app.include_router(files_router, prefix=API_V1_PREFIX)
app.include_router(analytics_router, prefix=API_V1_PREFIX)
