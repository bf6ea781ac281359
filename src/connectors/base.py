"""
Connector Interfaces
====================
Capability interfaces for the upstream providers the relay fronts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional


class ConnectorError(Exception):
    """An upstream call failed."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.provider} request failed ({self.status_code}): {self.message}"
        return f"{self.provider} request failed: {self.message}"


# =============================================================================
# Google Workspace
# =============================================================================

class WorkspaceConnector(ABC):
    """
    Documents, spreadsheets, files and calendar events.

    Every method returns the upstream resource as a dict keyed by the
    upstream's own (camelCase) field names.
    """

    @abstractmethod
    async def create_document(self, title: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_document(self, document_id: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def insert_document_text(self, document_id: str, content: str) -> dict[str, Any]:
        """Insert text at the start of the document body and return the document."""
        pass

    @abstractmethod
    async def create_spreadsheet(self, title: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_spreadsheet(self, spreadsheet_id: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def update_spreadsheet_values(
        self,
        spreadsheet_id: str,
        cell_range: str,
        values: list[list[Any]],
    ) -> dict[str, Any]:
        """Write raw values into a range and return the update summary."""
        pass

    @abstractmethod
    async def list_files(self, query: Optional[str] = None, limit: int = 100) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def get_file(self, file_id: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def delete_file(self, file_id: str) -> None:
        pass

    @abstractmethod
    async def create_event(
        self,
        summary: str,
        start_date_time: str,
        end_date_time: str,
        time_zone: str = "UTC",
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    async def list_events(
        self,
        time_min: Optional[str] = None,
        time_max: Optional[str] = None,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """Upcoming single events ordered by start time."""
        pass

    @abstractmethod
    async def get_event(self, event_id: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def delete_event(self, event_id: str) -> None:
        pass


# =============================================================================
# CRM
# =============================================================================

class CrmObject(str, Enum):
    """CRM object types and the properties read back for each."""
    CONTACTS = "contacts"
    COMPANIES = "companies"
    DEALS = "deals"

    @property
    def properties(self) -> list[str]:
        return list(_CRM_PROPERTIES[self])


_CRM_PROPERTIES = {
    CrmObject.CONTACTS: ("firstname", "lastname", "email", "phone", "company"),
    CrmObject.COMPANIES: ("name", "domain", "industry", "city", "state"),
    CrmObject.DEALS: ("dealname", "amount", "dealstage", "closedate"),
}


class CRMConnector(ABC):
    """
    Create/read/list/update/archive for CRM records.

    Records are returned as {id, properties, createdAt, updatedAt, archived}.
    """

    @abstractmethod
    async def create_record(self, object_type: CrmObject, properties: dict[str, Any]) -> dict[str, Any]:
        """Create a record from the non-empty properties."""
        pass

    @abstractmethod
    async def get_record(self, object_type: CrmObject, record_id: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def list_records(self, object_type: CrmObject, limit: int = 100) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def update_record(
        self,
        object_type: CrmObject,
        record_id: str,
        properties: dict[str, Any],
    ) -> dict[str, Any]:
        """Update only the given properties."""
        pass

    @abstractmethod
    async def archive_record(self, object_type: CrmObject, record_id: str) -> None:
        pass
