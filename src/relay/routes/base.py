"""
Route Class
===========
APIRoute shared by the relayed routers.
"""

from __future__ import annotations

from typing import Any, Callable, Coroutine

from starlette.requests import Request
from starlette.responses import Response

from ..middleware.rate_limit import WriteTierRoute


class JSONObjectRequest(Request):
    """Request whose missing body reads as an empty JSON object."""

    async def body(self) -> bytes:
        body = await super().body()
        return body or b"{}"


class RelayRoute(WriteTierRoute):
    """
    Write tier on mutating routes; a request without a body is validated as
    ``{}`` so callers get the schema's own complaints.

    Usage:
        router = APIRouter(route_class=RelayRoute)
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()
        if self.body_field is None:
            return handler

        async def relay_handler(request: Request) -> Response:
            return await handler(JSONObjectRequest(request.scope, request.receive))

        return relay_handler
