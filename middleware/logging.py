"""
Mealwise Logging Middleware
Structured request/response logging with request ids and slow request detection
"""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
import time
import uuid
from typing import Dict, Any, Optional
from contextvars import ContextVar

from core.config import settings
from services.auth_service import token_verifier
from utils.request_utils import get_client_ip

logger = structlog.get_logger()

# Context variables for request tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')

SLOW_REQUEST_SECONDS = 2.0


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with a unique id, echoed back in X-Request-ID.
    Health probes are passed through without detailed logging.
    """

    def __init__(self, app):
        super().__init__(app)

        self.exclude_paths = {
            "/health", "/api/v1/health", "/favicon.ico"
        }

        self.sensitive_headers = {
            "authorization", "cookie", "x-api-key", "x-auth-token"
        }

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())

        request_id_var.set(request_id)
        user_id_var.set("")

        try:
            if any(request.url.path.startswith(path) for path in self.exclude_paths):
                response = await call_next(request)
                response.headers["X-Request-ID"] = request_id
                return response

            request_info = self._extract_request_info(request, request_id)

            logger.info(
                "Request started",
                **request_info,
                event_type="request_start"
            )

            response = await call_next(request)
            process_time = time.time() - start_time

            response_info = {
                "status_code": response.status_code,
                "process_time": round(process_time, 4),
            }

            logger.log(
                self._determine_log_level(response.status_code),
                "Request completed",
                **request_info,
                **response_info,
                event_type="request_complete"
            )

            if process_time > SLOW_REQUEST_SECONDS:
                logger.warning(
                    "Slow request detected",
                    endpoint=f"{request.method} {request.url.path}",
                    response_time=process_time,
                    status_code=response.status_code,
                    request_id=request_id,
                    event_type="slow_request"
                )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            process_time = time.time() - start_time

            logger.error(
                "Request failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                client_ip=get_client_ip(request),
                process_time=process_time,
                error=str(e),
                error_type=type(e).__name__,
                event_type="request_error"
            )
            raise

    def _extract_request_info(self, request: Request, request_id: str) -> Dict[str, Any]:
        info = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client_ip": get_client_ip(request),
            "user_agent": request.headers.get("user-agent", ""),
        }

        if settings.DEBUG:
            info["headers"] = self._filter_headers(dict(request.headers))

        user_id = self._extract_user_id(request)
        if user_id:
            info["user_id"] = user_id
            user_id_var.set(user_id)

        return info

    def _extract_user_id(self, request: Request) -> Optional[str]:
        """Provider subject from the bearer token, unverified; log context only"""
        auth_header = request.headers.get("authorization")
        if auth_header and auth_header.startswith("Bearer "):
            return token_verifier.peek_subject(auth_header.split(" ", 1)[1])
        return None

    def _filter_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        """Mask sensitive headers"""
        filtered = {}
        for key, value in headers.items():
            if key.lower() in self.sensitive_headers:
                filtered[key] = "***MASKED***"
            else:
                filtered[key] = value
        return filtered

    def _determine_log_level(self, status_code: int) -> int:
        if status_code >= 500:
            return 40  # ERROR
        elif status_code >= 400:
            return 30  # WARNING
        return 20  # INFO


def get_request_id() -> str:
    """Get current request ID from context"""
    return request_id_var.get()


def get_user_id() -> str:
    """Get current user ID from context"""
    return user_id_var.get()


def log_user_activity(activity: str, details: Dict[str, Any] = None):
    """Log user activity with context"""
    logger.info(
        "User activity",
        request_id=get_request_id(),
        user_id=get_user_id(),
        activity=activity,
        details=details or {},
        event_type="user_activity"
    )


def log_business_event(event: str, data: Dict[str, Any] = None):
    """Log business events for analytics"""
    logger.info(
        "Business event",
        request_id=get_request_id(),
        user_id=get_user_id(),
        business_event=event,
        data=data or {},
        event_type="business_event"
    )
