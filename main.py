"""
Mealwise Backend Service - Main API Server
Recipes, meal planning, grocery lists and recipe import
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import structlog
import logging
import asyncio
import time
from typing import AsyncGenerator

from core.config import settings
from core.database import init_db, close_db, DatabaseHealthCheck
from core.redis import init_redis, close_redis, RedisHealthCheck
from api.routes import api_router
from middleware.rate_limiting import RateLimitMiddleware
from middleware.security import SecurityMiddleware
from middleware.logging import LoggingMiddleware, get_request_id
from services.video_processing_queue import video_processing_queue

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.LOG_LEVEL.upper())
    ),
    logger_factory=structlog.WriteLoggerFactory(),
    cache_logger_on_first_use=True,
)
logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

logger = structlog.get_logger()

VIDEO_CLEANUP_INTERVAL = 3600  # seconds


async def cleanup_video_jobs() -> None:
    """Periodically drop finished video jobs older than a day"""
    while True:
        await asyncio.sleep(VIDEO_CLEANUP_INTERVAL)
        removed = video_processing_queue.cleanup_old_jobs()
        if removed:
            logger.info("Old video jobs cleaned up", removed=removed)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} Backend Service")

    try:
        await init_db()
        logger.info("Database connection established")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")

    try:
        await init_redis()
        logger.info("Redis connection established")
    except Exception as e:
        logger.error(f"Failed to initialize Redis: {e}")

    cleanup_task = asyncio.create_task(cleanup_video_jobs())
    logger.info("Backend service startup complete")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME} Backend Service")
    cleanup_task.cancel()
    await video_processing_queue.shutdown()
    await close_db()
    await close_redis()
    logger.info("Backend service shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=f"{settings.APP_NAME} Backend Service",
    description="Recipes, meal plans, grocery lists and recipe import for Mealwise",
    version=settings.VERSION,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan
)

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.ALLOWED_HOSTS
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time", "X-Request-ID"]
)

# Custom Middleware
app.add_middleware(SecurityMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(LoggingMiddleware)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add response time header"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(
        "Unhandled exception",
        exception=str(exc),
        path=request.url.path,
        method=request.method
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred",
            "request_id": get_request_id() or request.headers.get("X-Request-ID")
        }
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": f"{settings.APP_NAME} Backend Service",
        "version": settings.VERSION,
        "status": "healthy",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    """Health check with database and Redis status"""
    health_status = {
        "status": "healthy",
        "service": "backend",
        "timestamp": time.time(),
        "version": settings.VERSION,
        "checks": {}
    }

    db_healthy, redis_healthy = await asyncio.gather(
        DatabaseHealthCheck.check_connection(),
        RedisHealthCheck.check_connection(),
    )
    health_status["checks"]["database"] = {"status": "healthy" if db_healthy else "unhealthy"}
    health_status["checks"]["redis"] = {"status": "healthy" if redis_healthy else "unhealthy"}
    health_status["checks"]["video_queue"] = video_processing_queue.get_queue_stats()

    if not (db_healthy and redis_healthy):
        health_status["status"] = "degraded"

    return health_status


# Include API routes
app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        log_config=None  # Use structlog instead
    )
