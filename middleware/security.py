"""
Mealwise Security Middleware
Security headers and rejection of obvious probe requests
"""

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from urllib.parse import unquote
import structlog
import re
from typing import Optional

from utils.request_utils import get_client_ip

logger = structlog.get_logger()


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers and rejects path traversal and script injection
    in the URL with 400. Request bodies are not inspected; recipe text
    legitimately contains quotes and punctuation.
    """

    def __init__(self, app):
        super().__init__(app)

        self.xss_patterns = [
            re.compile(r"<script[^>]*>", re.IGNORECASE),
            re.compile(r"javascript:", re.IGNORECASE),
            re.compile(r"<iframe[^>]*>", re.IGNORECASE),
            re.compile(r"\bon(load|error|click|mouseover)\s*=", re.IGNORECASE),
        ]

        self.path_traversal_patterns = ["../", "..\\", "..%2f", "..%5c", "%2e%2e%2f", "%2e%2e%5c"]

    async def dispatch(self, request: Request, call_next):
        rejection = self._validate_request(request)
        if rejection:
            return rejection

        response = await call_next(request)
        self._add_security_headers(response, request)
        return response

    def _validate_request(self, request: Request) -> Optional[JSONResponse]:
        raw_path = request.scope.get("raw_path", b"").decode("latin-1") or request.url.path

        if self._has_path_traversal(raw_path):
            return self._reject(request, "path_traversal")

        query = unquote(request.url.query or "")
        if self._has_script_injection(query) or self._has_script_injection(unquote(raw_path)):
            return self._reject(request, "script_injection")

        return None

    def _has_path_traversal(self, path: str) -> bool:
        path_lower = path.lower()
        return any(pattern in path_lower for pattern in self.path_traversal_patterns)

    def _has_script_injection(self, text: str) -> bool:
        if not text:
            return False
        return any(pattern.search(text) for pattern in self.xss_patterns)

    def _reject(self, request: Request, violation_type: str) -> JSONResponse:
        logger.warning(
            "Security violation detected",
            client_ip=get_client_ip(request),
            path=request.url.path,
            violation_type=violation_type
        )
        return JSONResponse(
            status_code=400,
            content={"error": "Bad request"}
        )

    def _add_security_headers(self, response: Response, request: Request):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # HSTS (only for HTTPS)
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"
