"""
Tests for the HubSpot Connector
===============================
"""

import pytest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

from hubspot.crm import contacts, deals

from ..base import ConnectorError, CrmObject
from ..hubspot import HubSpotConnector, project_record


CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)
UPDATED = datetime(2024, 1, 2, tzinfo=timezone.utc)


def sdk_record(record_id="1", **properties):
    return SimpleNamespace(
        id=record_id,
        properties=properties,
        created_at=CREATED,
        updated_at=UPDATED,
        archived=False,
    )


@pytest.fixture
def client():
    """Fake HubSpot client."""
    return MagicMock()


@pytest.fixture
def connector(client):
    return HubSpotConnector(client=client)


class TestProjection:
    def test_project_record(self):
        assert project_record(sdk_record("7", name="Acme")) == {
            "id": "7",
            "properties": {"name": "Acme"},
            "createdAt": CREATED,
            "updatedAt": UPDATED,
            "archived": False,
        }


class TestRecords:
    """Tests for CRM record calls."""

    @pytest.mark.asyncio
    async def test_create_sends_only_truthy_properties(self, connector, client):
        api = client.crm.contacts.basic_api
        api.create.return_value = sdk_record(firstname="Ada")

        result = await connector.create_record(
            CrmObject.CONTACTS, {"firstname": "Ada", "phone": "", "email": None}
        )

        payload = api.create.call_args.kwargs["simple_public_object_input_for_create"]
        assert isinstance(payload, contacts.SimplePublicObjectInputForCreate)
        assert payload.properties == {"firstname": "Ada"}
        assert result["id"] == "1"

    @pytest.mark.asyncio
    async def test_get_requests_declared_properties(self, connector, client):
        api = client.crm.companies.basic_api
        api.get_by_id.return_value = sdk_record("7", name="Acme")

        result = await connector.get_record(CrmObject.COMPANIES, "7")

        api.get_by_id.assert_called_once_with(
            "7", properties=["name", "domain", "industry", "city", "state"]
        )
        assert result["properties"] == {"name": "Acme"}

    @pytest.mark.asyncio
    async def test_list(self, connector, client):
        api = client.crm.deals.basic_api
        api.get_page.return_value = SimpleNamespace(results=[sdk_record("1"), sdk_record("2")])

        result = await connector.list_records(CrmObject.DEALS, 25)

        api.get_page.assert_called_once_with(
            limit=25, properties=["dealname", "amount", "dealstage", "closedate"]
        )
        assert [r["id"] for r in result] == ["1", "2"]

    @pytest.mark.asyncio
    async def test_update_sends_given_properties(self, connector, client):
        api = client.crm.deals.basic_api
        api.update.return_value = sdk_record("9", amount="")

        await connector.update_record(CrmObject.DEALS, "9", {"amount": "", "dealstage": None})

        args, kwargs = api.update.call_args
        assert args == ("9",)
        payload = kwargs["simple_public_object_input"]
        assert isinstance(payload, deals.SimplePublicObjectInput)
        assert payload.properties == {"amount": ""}

    @pytest.mark.asyncio
    async def test_archive(self, connector, client):
        await connector.archive_record(CrmObject.CONTACTS, "3")

        client.crm.contacts.basic_api.archive.assert_called_once_with("3")

    @pytest.mark.asyncio
    async def test_api_exception_becomes_connector_error(self, connector, client):
        api = client.crm.contacts.basic_api
        api.get_by_id.side_effect = contacts.ApiException(status=404, reason="Not Found")

        with pytest.raises(ConnectorError) as exc_info:
            await connector.get_record(CrmObject.CONTACTS, "404")

        assert exc_info.value.provider == "hubspot"
        assert exc_info.value.status_code == 404


class TestClient:
    def test_missing_token(self):
        with pytest.raises(ConnectorError, match="not configured"):
            HubSpotConnector()._get_client()

    def test_object_properties(self):
        assert CrmObject.CONTACTS.properties == ["firstname", "lastname", "email", "phone", "company"]
