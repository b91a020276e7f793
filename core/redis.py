"""
Mealwise Redis Configuration
Async Redis setup for response caching and rate limiting
"""

from redis import asyncio as redis_async
import json
import time
import uuid
import structlog
from typing import Any, Optional, Dict
from contextlib import asynccontextmanager

from core.config import settings

logger = structlog.get_logger()

# Global Redis connection pool
redis_pool = None


async def init_redis() -> None:
    """Initialize Redis connection pool"""
    global redis_pool

    try:
        redis_pool = redis_async.ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_POOL_SIZE,
            retry_on_timeout=True,
            health_check_interval=30,
            decode_responses=False
        )

        # Test connection
        redis = redis_async.Redis(connection_pool=redis_pool)
        await redis.ping()
        await redis.aclose()

        logger.info("Redis connection pool initialized successfully")

    except Exception as e:
        redis_pool = None
        logger.error(f"Failed to initialize Redis: {str(e)}")
        raise


async def close_redis() -> None:
    """Close Redis connection pool"""
    global redis_pool

    if redis_pool:
        await redis_pool.disconnect()
        redis_pool = None
        logger.info("Redis connection pool closed")


@asynccontextmanager
async def get_redis():
    """Get Redis connection from pool"""
    if not redis_pool:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")

    redis = redis_async.Redis(connection_pool=redis_pool)
    try:
        yield redis
    finally:
        await redis.aclose()


class RedisCache:
    """JSON cache with namespaced keys; errors are treated as misses"""

    def __init__(self):
        self.prefix = f"{settings.APP_NAME}:cache:"

    def _make_key(self, key: str, namespace: str = "default") -> str:
        """Create a namespaced cache key"""
        return f"{self.prefix}{namespace}:{key}"

    async def get_json(self, key: str, namespace: str = "default") -> Optional[Any]:
        """Get JSON serialized value from cache"""
        try:
            async with get_redis() as redis:
                value = await redis.get(self._make_key(key, namespace))
                if value:
                    return json.loads(value.decode("utf-8"))
                return None
        except Exception as e:
            logger.debug(f"Redis get_json miss: {str(e)}")
            return None

    async def set_json(
        self,
        key: str,
        value: Any,
        ttl: int = settings.CACHE_TTL_MEDIUM,
        namespace: str = "default"
    ) -> bool:
        """Set JSON serialized value in cache"""
        try:
            async with get_redis() as redis:
                json_value = json.dumps(value, default=str)
                return bool(await redis.setex(
                    self._make_key(key, namespace),
                    ttl,
                    json_value
                ))
        except Exception as e:
            logger.debug(f"Redis set_json skipped: {str(e)}")
            return False

    async def delete(self, key: str, namespace: str = "default") -> bool:
        """Delete key from cache"""
        try:
            async with get_redis() as redis:
                result = await redis.delete(self._make_key(key, namespace))
                return result > 0
        except Exception as e:
            logger.error(f"Redis delete error: {str(e)}")
            return False


class RedisRateLimiter:
    """Redis sliding-window rate limiter"""

    def __init__(self):
        self.prefix = f"{settings.APP_NAME}:ratelimit:"

    def _make_key(self, identifier: str, endpoint: str = "global") -> str:
        """Create rate limit key"""
        return f"{self.prefix}{endpoint}:{identifier}"

    async def is_allowed(
        self,
        identifier: str,
        limit: int,
        window: int,
        endpoint: str = "global"
    ) -> tuple[bool, Dict[str, int]]:
        """
        Check if request is allowed and return rate limit info
        Returns: (is_allowed, {"remaining": int, "reset": int, "limit": int})
        """
        try:
            async with get_redis() as redis:
                key = self._make_key(identifier, endpoint)

                current_time = time.time()
                window_start = current_time - window

                await redis.zremrangebyscore(key, 0, window_start)
                current_requests = await redis.zcard(key)

                if current_requests < limit:
                    await redis.zadd(key, {uuid.uuid4().hex: current_time})
                    await redis.expire(key, window)

                    return True, {
                        "remaining": limit - current_requests - 1,
                        "reset": int(current_time + window),
                        "limit": limit
                    }

                oldest = await redis.zrange(key, 0, 0, withscores=True)
                reset_time = int(oldest[0][1] + window) if oldest else int(current_time + window)

                return False, {
                    "remaining": 0,
                    "reset": reset_time,
                    "limit": limit
                }

        except Exception as e:
            logger.debug(f"Rate limiter unavailable: {str(e)}")
            # Fail open - allow request if Redis is down
            return True, {}


class RedisHealthCheck:
    """Redis health check utilities"""

    @staticmethod
    async def check_connection() -> bool:
        """Check if Redis connection is healthy"""
        try:
            async with get_redis() as redis:
                await redis.ping()
                return True
        except Exception as e:
            logger.error(f"Redis health check failed: {str(e)}")
            return False

    @staticmethod
    async def get_info() -> Dict[str, Any]:
        """Get Redis server information"""
        try:
            async with get_redis() as redis:
                info = await redis.info()
                return {
                    "status": "healthy",
                    "version": info.get("redis_version"),
                    "used_memory": info.get("used_memory_human"),
                    "connected_clients": info.get("connected_clients"),
                    "uptime": info.get("uptime_in_seconds")
                }
        except Exception as e:
            logger.error(f"Failed to get Redis info: {str(e)}")
            return {"status": "error", "error": str(e)}


# Create global instances
cache = RedisCache()
rate_limiter = RedisRateLimiter()

__all__ = [
    "init_redis",
    "close_redis",
    "get_redis",
    "cache",
    "rate_limiter",
    "RedisCache",
    "RedisRateLimiter",
    "RedisHealthCheck"
]
