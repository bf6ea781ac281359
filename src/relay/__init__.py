"""
Workspace Relay - HTTP Layer
============================
Authenticated, rate-governed REST surface over Google Workspace
and HubSpot CRM.
"""

from __future__ import annotations

from .config import Environment, RelayConfig
from .errors import ConfigurationError, RelayError
from .models import ApiResponse, ErrorCode
from .app import create_app, main

__all__ = [
    # Config
    "Environment",
    "RelayConfig",
    # Errors
    "ConfigurationError",
    "RelayError",
    # Models
    "ApiResponse",
    "ErrorCode",
    # App
    "create_app",
    "main",
]
