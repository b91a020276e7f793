"""
Mealwise Health Check Endpoints
System health monitoring and diagnostics
"""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse
import asyncio
import time

from core.database import DatabaseHealthCheck
from core.redis import RedisHealthCheck
from core.config import settings
from services.video_processing_queue import video_processing_queue

router = APIRouter()


@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "timestamp": time.time()
    }


@router.get("/live")
async def liveness_check():
    """Kubernetes liveness probe endpoint"""
    return {"status": "alive"}


@router.get("/ready")
async def readiness_check():
    """
    Kubernetes readiness probe endpoint
    Checks the database and Redis in parallel
    """
    try:
        db_healthy, redis_healthy = await asyncio.wait_for(
            asyncio.gather(
                DatabaseHealthCheck.check_connection(),
                RedisHealthCheck.check_connection(),
            ),
            timeout=5.0
        )
    except asyncio.TimeoutError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "not_ready", "error": "Health check timeout"}
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "not_ready", "error": str(e)}
        )

    if not (db_healthy and redis_healthy):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "status": "not_ready",
                "database": "connected" if db_healthy else "disconnected",
                "redis": "connected" if redis_healthy else "disconnected"
            }
        )

    return {
        "status": "ready",
        "database": "connected",
        "redis": "connected",
        "timestamp": time.time()
    }


@router.get("/detailed")
async def detailed_health_check():
    """
    Detailed health check with component information
    Only available in development environment
    """
    if not settings.is_development:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Endpoint not available in production"
        )

    try:
        db_info, redis_info = await asyncio.gather(
            DatabaseHealthCheck.get_connection_info(),
            RedisHealthCheck.get_info(),
        )

        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "timestamp": time.time(),
            "components": {
                "database": db_info,
                "redis": redis_info,
                "video_queue": video_processing_queue.get_queue_stats(),
                "recipe_catalogue": {
                    "source": "spoonacular" if settings.spoonacular_enabled else "mock"
                }
            },
            "configuration": {
                "debug": settings.DEBUG,
                "rate_limit": {
                    "requests": settings.RATE_LIMIT_REQUESTS,
                    "window": settings.RATE_LIMIT_WINDOW
                },
                "cache_ttl": {
                    "short": settings.CACHE_TTL_SHORT,
                    "medium": settings.CACHE_TTL_MEDIUM,
                    "long": settings.CACHE_TTL_LONG
                }
            }
        }

    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "unhealthy",
                "error": str(e),
                "timestamp": time.time()
            }
        )


@router.get("/version")
async def version_info():
    """Application version information"""
    return {
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "features": {
            "external_catalogue": settings.spoonacular_enabled,
            "url_import": True,
            "image_import": True,
            "video_import": True
        }
    }
