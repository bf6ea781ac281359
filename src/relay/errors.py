"""
Relay Errors
============
Exceptions translated into error envelopes by the application's handlers.
"""

from __future__ import annotations

from typing import Optional

from starlette.responses import JSONResponse

from .models import ApiResponse, ErrorCode


class ConfigurationError(Exception):
    """Raised when the relay configuration is invalid or incomplete."""
    pass


class RelayError(Exception):
    """Base exception carrying an error code and HTTP status."""

    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR
    status_code: int = 500

    def __init__(self, message: str, headers: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.headers = headers


class UnauthorizedError(RelayError):
    """Missing or invalid credential."""
    code = ErrorCode.UNAUTHORIZED
    status_code = 401


class RateLimitExceededError(RelayError):
    """Client exceeded a rate tier."""
    code = ErrorCode.RATE_LIMIT_EXCEEDED
    status_code = 429


def error_response(
    code: ErrorCode,
    message: str,
    status_code: int,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build an error envelope response."""
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.fail(code, message).to_content(),
        headers=headers,
    )
