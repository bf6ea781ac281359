"""
Route Dependencies
==================
Connector lookup for route handlers.
"""

from __future__ import annotations

from fastapi import Request

from connectors import CRMConnector, WorkspaceConnector


async def get_workspace_connector(request: Request) -> WorkspaceConnector:
    """Workspace connector installed on the application."""
    return request.app.state.workspace


async def get_crm_connector(request: Request) -> CRMConnector:
    """CRM connector installed on the application."""
    return request.app.state.crm
