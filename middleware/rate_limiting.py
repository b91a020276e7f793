"""
Mealwise Rate Limiting Middleware
Per-IP sliding window rate limiting backed by Redis
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
import time
from typing import Dict, Tuple

from core.config import settings
from core.redis import rate_limiter
from utils.request_utils import get_client_ip

logger = structlog.get_logger()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    IP rate limiting with a stricter bucket for uploads.
    Fails open when Redis is unavailable.
    """

    def __init__(self, app):
        super().__init__(app)

        self.ip_limits = {
            "global": {"requests": settings.RATE_LIMIT_REQUESTS, "window": settings.RATE_LIMIT_WINDOW},
            "upload": {"requests": 50, "window": 3600},
        }

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path.startswith("/health") or path.startswith("/api/v1/health"):
            return await call_next(request)

        client_ip = get_client_ip(request)
        endpoint_type = self._classify_endpoint(request)

        allowed, headers = await self._check_ip_rate_limit(client_ip, endpoint_type)
        if not allowed:
            logger.warning(
                "Rate limit exceeded",
                client_ip=client_ip,
                endpoint_type=endpoint_type,
                path=path
            )
            return self._create_rate_limit_response(headers)

        response = await call_next(request)

        for key, value in headers.items():
            response.headers[f"X-RateLimit-{key}"] = str(value)

        return response

    def _classify_endpoint(self, request: Request) -> str:
        path = request.url.path
        if request.method == "POST" and (path.endswith("/upload") or path.endswith("/recipes/import")):
            return "upload"
        return "global"

    async def _check_ip_rate_limit(self, client_ip: str, endpoint_type: str) -> Tuple[bool, Dict[str, int]]:
        limit_config = self.ip_limits.get(endpoint_type, self.ip_limits["global"])

        is_allowed, rate_info = await rate_limiter.is_allowed(
            identifier=f"ip:{client_ip}",
            limit=limit_config["requests"],
            window=limit_config["window"],
            endpoint=f"ip_{endpoint_type}"
        )

        if not rate_info:
            return is_allowed, {}

        return is_allowed, {
            "Limit": rate_info["limit"],
            "Remaining": rate_info["remaining"],
            "Reset": rate_info["reset"],
            "Window": limit_config["window"]
        }

    def _create_rate_limit_response(self, headers: Dict[str, int]) -> JSONResponse:
        reset_time = headers.get("Reset", int(time.time()) + 3600)

        response = JSONResponse(
            status_code=429,
            content={
                "error": "Rate limit exceeded",
                "message": f"Too many requests. Try again after {reset_time}",
                "retry_after": reset_time
            }
        )

        for key, value in headers.items():
            response.headers[f"X-RateLimit-{key}"] = str(value)

        response.headers["Retry-After"] = str(max(reset_time - int(time.time()), 0))
        return response
