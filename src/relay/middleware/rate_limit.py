"""
Rate Limiting Middleware
========================
Fixed-window rate tiers with in-memory or Redis counters.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Optional, Protocol, TYPE_CHECKING

from fastapi.routing import APIRoute
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.types import ASGIApp

from ..config import RateLimitRule
from ..errors import RateLimitExceededError, error_response
from ..models import ErrorCode
from .request_context import resolve_client_ip


logger = logging.getLogger(__name__)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class WindowEntry:
    """Counter for one key within the current window."""
    window_start: float
    expires_at: float
    count: int = 0

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class RateLimitDecision:
    """Outcome of counting one request against a tier."""
    allowed: bool
    limit: int
    remaining: int
    reset_after: int  # seconds until the window resets

    def headers(self) -> dict[str, str]:
        """Standard rate limit headers for this decision."""
        headers = {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.reset_after)
        return headers


# =============================================================================
# Counter Stores
# =============================================================================

class CounterStore(Protocol):
    """Storage for fixed-window counters."""

    async def increment(self, key: str, window_seconds: int) -> WindowEntry:
        """Count one hit and return the window it landed in."""
        ...

    async def reset(self, key: str) -> None:
        ...


class InMemoryCounterStore:
    """Process-local counter storage."""

    def __init__(self):
        self._entries: dict[str, WindowEntry] = {}
        self._lock = asyncio.Lock()

    async def increment(self, key: str, window_seconds: int) -> WindowEntry:
        async with self._lock:
            now = time.time()

            entry = self._entries.get(key)
            if entry is None or entry.expired(now):
                entry = WindowEntry(window_start=now, expires_at=now + window_seconds)
                self._entries[key] = entry

            entry.count += 1

            # Each entry expires on its own window
            self._cleanup_expired(now)

            return WindowEntry(entry.window_start, entry.expires_at, entry.count)

    async def reset(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    def _cleanup_expired(self, now: float) -> None:
        expired = [k for k, v in self._entries.items() if v.expired(now)]
        for k in expired:
            del self._entries[k]


class RedisCounterStore:
    """Redis-backed counter storage shared between processes."""

    KEY_PREFIX = "ratelimit:"

    def __init__(self, redis_url: str, client: Any = None):
        self.redis_url = redis_url
        self._redis: Any = client

    async def _get_redis(self) -> Any:
        if self._redis is None:
            import redis.asyncio as redis
            self._redis = redis.from_url(self.redis_url)
        return self._redis

    async def increment(self, key: str, window_seconds: int) -> WindowEntry:
        now = time.time()
        counter_key = f"{self.KEY_PREFIX}{key}"

        try:
            redis = await self._get_redis()
            count = await redis.incr(counter_key)
            if count == 1:
                await redis.expire(counter_key, window_seconds)
                ttl = window_seconds
            else:
                ttl = await redis.ttl(counter_key)
                if ttl < 0:
                    # Key lost its expiry; start a fresh window
                    await redis.expire(counter_key, window_seconds)
                    ttl = window_seconds
        except Exception as exc:
            logger.warning("Rate limit store unavailable, allowing request: %s", exc)
            return WindowEntry(window_start=now, expires_at=now + window_seconds, count=0)

        return WindowEntry(
            window_start=now - (window_seconds - ttl),
            expires_at=now + ttl,
            count=count,
        )

    async def reset(self, key: str) -> None:
        redis = await self._get_redis()
        await redis.delete(f"{self.KEY_PREFIX}{key}")


def create_counter_store(redis_url: Optional[str] = None) -> CounterStore:
    """Redis store when a URL is configured, otherwise in-memory."""
    if redis_url:
        return RedisCounterStore(redis_url)
    return InMemoryCounterStore()


# =============================================================================
# Rate Governor
# =============================================================================

class RateGovernor:
    """Applies one rate tier. Keys are namespaced by tier name."""

    def __init__(self, store: CounterStore, rule: RateLimitRule):
        self.store = store
        self.rule = rule

    async def hit(self, client_key: str) -> RateLimitDecision:
        """Count a request from client_key and decide whether it may proceed."""
        entry = await self.store.increment(
            f"{self.rule.name}:{client_key}", self.rule.window_seconds
        )

        reset_after = max(0, math.ceil(entry.expires_at - time.time()))

        return RateLimitDecision(
            allowed=entry.count <= self.rule.max_requests,
            limit=self.rule.max_requests,
            remaining=max(0, self.rule.max_requests - entry.count),
            reset_after=reset_after,
        )


# =============================================================================
# Rate Limit Middleware
# =============================================================================

class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    General tier for every request under the protected prefix.

    Runs before the auth gate, so unauthenticated and malformed requests are
    counted too.
    """

    def __init__(
        self,
        app: "ASGIApp",
        governor: RateGovernor,
        protected_prefix: str = "/api",
        trust_proxy: bool = False,
    ):
        super().__init__(app)
        self.governor = governor
        self.protected_prefix = protected_prefix.rstrip("/")
        self.trust_proxy = trust_proxy

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not (path == self.protected_prefix or path.startswith(self.protected_prefix + "/")):
            return await call_next(request)

        decision = await self.governor.hit(resolve_client_ip(request, self.trust_proxy))
        headers = decision.headers()

        if not decision.allowed:
            return error_response(
                ErrorCode.RATE_LIMIT_EXCEEDED,
                self.governor.rule.message,
                429,
                headers=headers,
            )

        response = await call_next(request)

        for key, value in headers.items():
            response.headers[key] = value

        return response


# =============================================================================
# Write Tier
# =============================================================================

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


async def write_rate_limit(request: Request) -> None:
    """Count a mutating request against the write tier."""
    governor: RateGovernor = request.app.state.write_governor
    trust_proxy = request.app.state.config.rate_limits.trust_proxy

    decision = await governor.hit(resolve_client_ip(request, trust_proxy))
    if not decision.allowed:
        raise RateLimitExceededError(governor.rule.message, headers=decision.headers())


class WriteTierRoute(APIRoute):
    """
    Route class applying the write tier to mutating routes.

    The tier is checked before the body is read, so an exhausted budget
    answers 429 even when the body would fail to parse.

    Usage:
        router = APIRouter(route_class=WriteTierRoute)
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()
        if not self.methods & WRITE_METHODS:
            return handler

        async def write_limited_handler(request: Request) -> Response:
            await write_rate_limit(request)
            return await handler(request)

        return write_limited_handler
