"""
cadastro/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers API routes (webhook)
- No business logic should be written here
- Manages application lifecycle (startup/shutdown, maintenance task)
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager, suppress
import asyncio
import time

from cadastro.core.config import settings, validate_settings
from cadastro.core.errors import add_exception_handlers
from cadastro.core.logging import setup_logging, get_logger
from cadastro.db.mongo import connect_to_mongo, close_mongo_connection, check_database_health
from cadastro.db.indexes import create_indexes
from cadastro.flow.dispatcher import get_controller
from cadastro.services.maintenance_service import maintenance_loop
from cadastro.api import webhook

# Initialize logging first
setup_logging()
logger = get_logger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("🚀 Starting Cadastro application...")

    try:
        logger.info("Validating configuration...")
        validate_settings()
        logger.info("✅ Configuration validated")

        logger.info("Connecting to MongoDB...")
        await connect_to_mongo()
        await create_indexes()

        controller = get_controller()
        maintenance_task = asyncio.create_task(
            maintenance_loop(
                controller.context.document_store,
                controller.sessions,
                max_age_seconds=settings.DOCUMENT_MAX_AGE_HOURS * 3600,
                interval_seconds=settings.SWEEP_INTERVAL_MINUTES * 60,
            )
        )

        logger.info("🎉 Cadastro application started successfully!")
        logger.info(f"Environment: {settings.ENVIRONMENT}")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield  # Application runs here

    logger.info("🛑 Shutting down Cadastro application...")

    maintenance_task.cancel()
    with suppress(asyncio.CancelledError):
        await maintenance_task

    await close_mongo_connection()
    logger.info("👋 Cadastro application shut down successfully")


app = FastAPI(
    title="Cadastro - Registration Assistant",
    description="WhatsApp-based conversational registration",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,  # Disable docs in production
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    if process_time > 5.0:
        logger.warning(f"Slow request detected: {request.method} {request.url.path} ({process_time:.2f}s)")

    return response


app.include_router(webhook.router, prefix=settings.API_PREFIX, tags=["Webhook"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic info."""
    return {
        "name": "Cadastro API",
        "version": APP_VERSION,
        "description": "WhatsApp-based registration assistant",
        "status": "running",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    Checks database connectivity and reports active sessions.
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": APP_VERSION,
        "checks": {},
        "active_sessions": len(get_controller().sessions),
    }

    db_healthy = await check_database_health()
    health_status["checks"]["database"] = "healthy" if db_healthy else "unhealthy"
    if not db_healthy:
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


@app.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness probe - indicates if app is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cadastro.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
