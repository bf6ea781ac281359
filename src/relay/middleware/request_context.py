"""
Request Context Middleware
==========================
Request IDs, client address resolution, timing and access logging.
"""

from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TYPE_CHECKING
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.types import ASGIApp


logger = logging.getLogger(__name__)

ErrorHandler = Callable[[Request, Exception], Awaitable[Response]]


# =============================================================================
# Context Variables
# =============================================================================

_request_context: ContextVar[Optional["RequestContext"]] = ContextVar(
    "request_context", default=None
)


@dataclass
class RequestContext:
    """Per-request tracking data."""
    request_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    start_time: float

    @property
    def elapsed_ms(self) -> float:
        return (time.time() - self.start_time) * 1000

    def to_log_dict(self, status_code: int) -> dict[str, Any]:
        """Fields attached to the access log line."""
        return {
            "method": self.method,
            "path": self.path,
            "status_code": status_code,
            "duration_ms": round(self.elapsed_ms, 2),
            "user_agent": self.user_agent,
            "client_ip": self.client_ip,
        }


def get_request_context() -> Optional[RequestContext]:
    """Get the context of the request being served, if any."""
    return _request_context.get()


def resolve_client_ip(request: Request, trust_proxy: bool = False) -> str:
    """
    Resolve the caller's address.

    The first X-Forwarded-For hop is only honoured behind a trusted proxy;
    otherwise the header is caller-controlled and the peer address is used.
    """
    if trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


# =============================================================================
# Request Context Middleware
# =============================================================================

class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Assigns a request ID, records the client address and writes one access
    log line per request.

    With an error_handler, unexpected exceptions are turned into a response
    here, so it still carries the request ID and passes through the outer
    middleware.
    """

    REQUEST_ID_HEADER = "X-Request-ID"

    def __init__(
        self,
        app: "ASGIApp",
        trust_proxy: bool = False,
        generate_request_id: Optional[Callable[[], str]] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        super().__init__(app)
        self.trust_proxy = trust_proxy
        self.error_handler = error_handler
        self._generate_request_id = generate_request_id or self._default_generate_id

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = (
            request.headers.get(self.REQUEST_ID_HEADER) or
            self._generate_request_id()
        )

        context = RequestContext(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=resolve_client_ip(request, self.trust_proxy),
            user_agent=request.headers.get("User-Agent", ""),
            start_time=time.time(),
        )
        token = _request_context.set(context)

        request.state.request_id = request_id
        request.state.client_ip = context.client_ip

        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                if self.error_handler is None:
                    logger.warning(
                        "Request completed with error", extra=context.to_log_dict(500)
                    )
                    raise
                response = await self.error_handler(request, exc)

            response.headers[self.REQUEST_ID_HEADER] = request_id
            response.headers["X-Response-Time"] = f"{context.elapsed_ms:.2f}ms"

            log_fields = context.to_log_dict(response.status_code)
            if response.status_code >= 400:
                logger.warning("Request completed with error", extra=log_fields)
            else:
                logger.info("Request completed", extra=log_fields)

            return response

        finally:
            _request_context.reset(token)

    @staticmethod
    def _default_generate_id() -> str:
        return str(uuid4())


# =============================================================================
# Logging Integration
# =============================================================================

class RequestContextFilter(logging.Filter):
    """Logging filter that stamps request_id and client_ip on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_request_context()

        if context:
            record.request_id = context.request_id
            if not hasattr(record, "client_ip"):
                record.client_ip = context.client_ip
        else:
            record.request_id = "-"
            if not hasattr(record, "client_ip"):
                record.client_ip = "-"

        return True
