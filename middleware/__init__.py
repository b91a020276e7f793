"""
Mealwise Middleware
Custom middleware for security, rate limiting, and logging
"""

from .security import SecurityMiddleware
from .rate_limiting import RateLimitMiddleware
from .logging import LoggingMiddleware, log_user_activity, log_business_event

__all__ = [
    "SecurityMiddleware",
    "RateLimitMiddleware",
    "LoggingMiddleware",
    "log_user_activity",
    "log_business_event"
]
