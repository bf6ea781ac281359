"""
HubSpot Connector
=================
CRM contacts, companies and deals through the HubSpot API client.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from hubspot.crm import companies, contacts, deals

from .base import ConnectorError, CRMConnector, CrmObject


logger = logging.getLogger(__name__)

PROVIDER = "hubspot"

# Each CRM object has its own generated SDK module
SDK_MODULES = {
    CrmObject.CONTACTS: contacts,
    CrmObject.COMPANIES: companies,
    CrmObject.DEALS: deals,
}

API_EXCEPTIONS = tuple(module.ApiException for module in SDK_MODULES.values())


def project_record(record: Any) -> dict[str, Any]:
    """Reduce an SDK record to id, properties and timestamps."""
    return {
        "id": record.id,
        "properties": record.properties or {},
        "createdAt": record.created_at,
        "updatedAt": record.updated_at,
        "archived": getattr(record, "archived", None),
    }


class HubSpotConnector(CRMConnector):
    """HubSpot CRM connector authenticated with a private app token."""

    def __init__(self, access_token: Optional[str] = None, client: Any = None):
        self.access_token = access_token
        self._client = client

    def _get_client(self) -> Any:
        """Get or create the HubSpot client."""
        if self._client is None:
            if not self.access_token:
                raise ConnectorError(PROVIDER, "HubSpot access token is not configured")

            from hubspot import HubSpot

            self._client = HubSpot(access_token=self.access_token)

        return self._client

    def _basic_api(self, object_type: CrmObject) -> Any:
        return getattr(self._get_client().crm, object_type.value).basic_api

    async def _run(self, operation: str, fn: Callable[[], Any]) -> Any:
        """Run a blocking SDK call in the default executor."""
        loop = asyncio.get_running_loop()

        def _call():
            try:
                return fn()
            except API_EXCEPTIONS as e:
                raise ConnectorError(PROVIDER, f"{operation}: {e.reason}", e.status) from e

        return await loop.run_in_executor(None, _call)

    async def create_record(self, object_type: CrmObject, properties: dict[str, Any]) -> dict[str, Any]:
        api = self._basic_api(object_type)
        payload = SDK_MODULES[object_type].SimplePublicObjectInputForCreate(
            properties={k: v for k, v in properties.items() if v},
            associations=[],
        )

        record = await self._run(
            f"create {object_type.value}",
            lambda: api.create(simple_public_object_input_for_create=payload),
        )
        logger.info("Created HubSpot %s %s", object_type.value, record.id)
        return project_record(record)

    async def get_record(self, object_type: CrmObject, record_id: str) -> dict[str, Any]:
        api = self._basic_api(object_type)

        record = await self._run(
            f"get {object_type.value}",
            lambda: api.get_by_id(record_id, properties=object_type.properties),
        )
        return project_record(record)

    async def list_records(self, object_type: CrmObject, limit: int = 100) -> list[dict[str, Any]]:
        api = self._basic_api(object_type)

        page = await self._run(
            f"list {object_type.value}",
            lambda: api.get_page(limit=limit, properties=object_type.properties),
        )
        return [project_record(record) for record in page.results or []]

    async def update_record(
        self,
        object_type: CrmObject,
        record_id: str,
        properties: dict[str, Any],
    ) -> dict[str, Any]:
        api = self._basic_api(object_type)
        payload = SDK_MODULES[object_type].SimplePublicObjectInput(
            properties={k: v for k, v in properties.items() if v is not None},
        )

        record = await self._run(
            f"update {object_type.value}",
            lambda: api.update(record_id, simple_public_object_input=payload),
        )
        logger.info("Updated HubSpot %s %s", object_type.value, record_id)
        return project_record(record)

    async def archive_record(self, object_type: CrmObject, record_id: str) -> None:
        api = self._basic_api(object_type)

        await self._run(f"archive {object_type.value}", lambda: api.archive(record_id))
        logger.info("Archived HubSpot %s %s", object_type.value, record_id)
