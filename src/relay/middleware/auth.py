"""
Authentication Middleware
=========================
Bearer token gate in front of every relayed API route.
"""

from __future__ import annotations

import hmac
from typing import Any, Callable, Optional, Protocol, TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

if TYPE_CHECKING:
    from starlette.types import ASGIApp

from ..errors import UnauthorizedError, error_response
from ..models import ErrorCode


MISSING_BEARER_MESSAGE = "Authorization header with Bearer token is required"
NOT_CONFIGURED_MESSAGE = "MCP_API_KEY not configured"
INVALID_KEY_MESSAGE = "Invalid API key"

BEARER_PREFIX = "Bearer "


# =============================================================================
# Credential Verification
# =============================================================================

class CredentialVerifier(Protocol):
    """Decides whether a presented bearer token is acceptable."""

    @property
    def is_configured(self) -> bool:
        ...

    def verify(self, token: str) -> bool:
        ...


class SharedSecretVerifier:
    """Accepts exactly one shared secret."""

    def __init__(self, secret: Optional[str]):
        self._secret = secret or None

    @property
    def is_configured(self) -> bool:
        return self._secret is not None

    def verify(self, token: str) -> bool:
        if self._secret is None:
            return False
        return hmac.compare_digest(token.encode(), self._secret.encode())


# =============================================================================
# Authentication Middleware
# =============================================================================

class BearerAuthMiddleware(BaseHTTPMiddleware):
    """
    Rejects requests under the protected prefix that do not carry the
    configured bearer token.

    Health, docs and static files live outside the prefix and pass through.
    The token is never logged.
    """

    def __init__(
        self,
        app: "ASGIApp",
        verifier: CredentialVerifier,
        protected_prefix: str = "/api",
    ):
        super().__init__(app)
        self.verifier = verifier
        self.protected_prefix = protected_prefix.rstrip("/")

    async def dispatch(self, request: Request, call_next: Callable) -> Any:
        if not self._is_protected(request.url.path):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith(BEARER_PREFIX):
            return error_response(ErrorCode.UNAUTHORIZED, MISSING_BEARER_MESSAGE, 401)

        if not self.verifier.is_configured:
            return error_response(ErrorCode.SERVER_ERROR, NOT_CONFIGURED_MESSAGE, 500)

        token = auth_header[len(BEARER_PREFIX):]
        if not self.verifier.verify(token):
            return error_response(ErrorCode.UNAUTHORIZED, INVALID_KEY_MESSAGE, 401)

        request.state.authenticated = True

        return await call_next(request)

    def _is_protected(self, path: str) -> bool:
        return path == self.protected_prefix or path.startswith(self.protected_prefix + "/")


# =============================================================================
# FastAPI Dependencies
# =============================================================================

async def require_authenticated(request: Request) -> None:
    """
    FastAPI dependency guaranteeing the auth gate admitted this request.

    Usage:
        router = APIRouter(dependencies=[Depends(require_authenticated)])
    """
    if not getattr(request.state, "authenticated", False):
        raise UnauthorizedError(MISSING_BEARER_MESSAGE)
