"""
Upstream Connectors
===================
Adapters for the SaaS APIs the relay fronts.
"""

from __future__ import annotations

from .base import ConnectorError, CRMConnector, CrmObject, WorkspaceConnector
from .google_workspace import GoogleWorkspaceConnector
from .hubspot import HubSpotConnector

__all__ = [
    "ConnectorError",
    "CRMConnector",
    "CrmObject",
    "WorkspaceConnector",
    "GoogleWorkspaceConnector",
    "HubSpotConnector",
]
