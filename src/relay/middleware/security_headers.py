"""
Security Headers Middleware
===========================
Conservative response headers for every route.
"""

from __future__ import annotations

from typing import Callable, TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.types import ASGIApp


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds hardening headers. No CSP is set so the docs UI can load its assets."""

    BASE_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "Referrer-Policy": "no-referrer",
    }
    HSTS_VALUE = "max-age=15552000; includeSubDomains"

    def __init__(self, app: "ASGIApp", enable_hsts: bool = False):
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        for key, value in self.BASE_HEADERS.items():
            response.headers.setdefault(key, value)

        if self.enable_hsts:
            response.headers.setdefault("Strict-Transport-Security", self.HSTS_VALUE)

        return response
