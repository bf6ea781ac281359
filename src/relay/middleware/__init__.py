"""
Relay Middleware
================
Authentication, rate limiting, request context and security headers.
"""

from __future__ import annotations

from .auth import BearerAuthMiddleware, SharedSecretVerifier, require_authenticated
from .rate_limit import (
    InMemoryCounterStore,
    RateGovernor,
    RateLimitMiddleware,
    RedisCounterStore,
    create_counter_store,
    WriteTierRoute,
    write_rate_limit,
)
from .request_context import RequestContextMiddleware, get_request_context
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "BearerAuthMiddleware",
    "SharedSecretVerifier",
    "require_authenticated",
    "InMemoryCounterStore",
    "RateGovernor",
    "RateLimitMiddleware",
    "RedisCounterStore",
    "create_counter_store",
    "WriteTierRoute",
    "write_rate_limit",
    "RequestContextMiddleware",
    "get_request_context",
    "SecurityHeadersMiddleware",
]
