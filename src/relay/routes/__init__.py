"""
Relay Routes
============
FastAPI routers for the relayed upstream APIs.
"""

from __future__ import annotations

from .google import router as google_router
from .hubspot import router as hubspot_router

__all__ = [
    "google_router",
    "hubspot_router",
]
