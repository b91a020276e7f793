"""
Mealwise Core Module
Central configuration and utilities
"""

from .config import settings
from .database import Base, get_db, get_db_session, init_db, close_db
from .redis import cache, rate_limiter, init_redis, close_redis

__all__ = [
    "settings",
    "Base",
    "get_db",
    "get_db_session",
    "init_db",
    "close_db",
    "cache",
    "rate_limiter",
    "init_redis",
    "close_redis"
]
