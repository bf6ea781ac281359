"""
Google Workspace Connector
==========================
Docs, Sheets, Drive and Calendar through the Google API discovery clients.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .base import ConnectorError, WorkspaceConnector


logger = logging.getLogger(__name__)

PROVIDER = "google"

# (service name, version)
SERVICES = {
    "docs": ("docs", "v1"),
    "sheets": ("sheets", "v4"),
    "drive": ("drive", "v3"),
    "calendar": ("calendar", "v3"),
}

CALENDAR_ID = "primary"
FILE_FIELDS = "id,name,mimeType,size,modifiedTime,webViewLink"


class GoogleWorkspaceConnector(WorkspaceConnector):
    """
    Google Workspace connector using OAuth user credentials.

    The access token is refreshed by google-auth from the refresh token.
    Requests are not retried.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        refresh_token: Optional[str] = None,
        token_uri: str = "https://oauth2.googleapis.com/token",
        credentials: Any = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.token_uri = token_uri
        self._credentials = credentials

    def _get_credentials(self) -> Any:
        """Get or create the OAuth user credentials."""
        if self._credentials is None:
            if not (self.client_id and self.client_secret and self.refresh_token):
                raise ConnectorError(PROVIDER, "Google credentials are not configured")

            from google.oauth2.credentials import Credentials

            self._credentials = Credentials(
                token=None,
                refresh_token=self.refresh_token,
                client_id=self.client_id,
                client_secret=self.client_secret,
                token_uri=self.token_uri,
            )

        return self._credentials

    def _service(self, name: str) -> Any:
        """Build a discovery client. Clients are not thread-safe, so one per call."""
        service_name, version = SERVICES[name]
        return build(
            service_name,
            version,
            credentials=self._get_credentials(),
            cache_discovery=False,
        )

    async def _run(self, operation: str, fn: Callable[[], Any]) -> Any:
        """Run a blocking SDK call in the default executor."""
        loop = asyncio.get_running_loop()

        def _call():
            try:
                return fn()
            except HttpError as e:
                raise ConnectorError(PROVIDER, f"{operation}: {e.reason}", e.resp.status) from e

        return await loop.run_in_executor(None, _call)

    # -------------------------------------------------------------------------
    # Docs
    # -------------------------------------------------------------------------

    async def create_document(self, title: str) -> dict[str, Any]:
        def _create():
            docs = self._service("docs")
            return docs.documents().create(body={"title": title}).execute(num_retries=0)

        document = await self._run("create document", _create)
        logger.info("Created document %s", document.get("documentId"))
        return document

    async def get_document(self, document_id: str) -> dict[str, Any]:
        def _get():
            docs = self._service("docs")
            return docs.documents().get(documentId=document_id).execute(num_retries=0)

        return await self._run("get document", _get)

    async def insert_document_text(self, document_id: str, content: str) -> dict[str, Any]:
        def _insert():
            docs = self._service("docs")
            docs.documents().batchUpdate(
                documentId=document_id,
                body={
                    "requests": [
                        {"insertText": {"location": {"index": 1}, "text": content}},
                    ],
                },
            ).execute(num_retries=0)
            return docs.documents().get(documentId=document_id).execute(num_retries=0)

        return await self._run("update document", _insert)

    # -------------------------------------------------------------------------
    # Sheets
    # -------------------------------------------------------------------------

    async def create_spreadsheet(self, title: str) -> dict[str, Any]:
        def _create():
            sheets = self._service("sheets")
            return sheets.spreadsheets().create(
                body={"properties": {"title": title}},
            ).execute(num_retries=0)

        spreadsheet = await self._run("create spreadsheet", _create)
        logger.info("Created spreadsheet %s", spreadsheet.get("spreadsheetId"))
        return spreadsheet

    async def get_spreadsheet(self, spreadsheet_id: str) -> dict[str, Any]:
        def _get():
            sheets = self._service("sheets")
            return sheets.spreadsheets().get(spreadsheetId=spreadsheet_id).execute(num_retries=0)

        return await self._run("get spreadsheet", _get)

    async def update_spreadsheet_values(
        self,
        spreadsheet_id: str,
        cell_range: str,
        values: list[list[Any]],
    ) -> dict[str, Any]:
        def _update():
            sheets = self._service("sheets")
            return sheets.spreadsheets().values().update(
                spreadsheetId=spreadsheet_id,
                range=cell_range,
                valueInputOption="RAW",
                body={"values": values},
            ).execute(num_retries=0)

        return await self._run("update spreadsheet", _update)

    # -------------------------------------------------------------------------
    # Drive
    # -------------------------------------------------------------------------

    async def list_files(self, query: Optional[str] = None, limit: int = 100) -> list[dict[str, Any]]:
        def _list():
            params: dict[str, Any] = {
                "fields": f"files({FILE_FIELDS})",
                "pageSize": limit,
            }
            if query:
                params["q"] = query
            drive = self._service("drive")
            return drive.files().list(**params).execute(num_retries=0)

        response = await self._run("list files", _list)
        return response.get("files", [])

    async def get_file(self, file_id: str) -> dict[str, Any]:
        def _get():
            drive = self._service("drive")
            return drive.files().get(fileId=file_id, fields=FILE_FIELDS).execute(num_retries=0)

        return await self._run("get file", _get)

    async def delete_file(self, file_id: str) -> None:
        def _delete():
            drive = self._service("drive")
            drive.files().delete(fileId=file_id).execute(num_retries=0)

        await self._run("delete file", _delete)
        logger.info("Deleted file %s", file_id)

    # -------------------------------------------------------------------------
    # Calendar
    # -------------------------------------------------------------------------

    async def create_event(
        self,
        summary: str,
        start_date_time: str,
        end_date_time: str,
        time_zone: str = "UTC",
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "summary": summary,
            "start": {"dateTime": start_date_time, "timeZone": time_zone},
            "end": {"dateTime": end_date_time, "timeZone": time_zone},
        }
        if description is not None:
            body["description"] = description

        def _create():
            calendar = self._service("calendar")
            return calendar.events().insert(calendarId=CALENDAR_ID, body=body).execute(num_retries=0)

        event = await self._run("create event", _create)
        logger.info("Created calendar event %s", event.get("id"))
        return event

    async def list_events(
        self,
        time_min: Optional[str] = None,
        time_max: Optional[str] = None,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "calendarId": CALENDAR_ID,
            "timeMin": time_min or datetime.now(timezone.utc).isoformat(),
            "maxResults": limit,
            "singleEvents": True,
            "orderBy": "startTime",
        }
        if time_max:
            params["timeMax"] = time_max

        def _list():
            calendar = self._service("calendar")
            return calendar.events().list(**params).execute(num_retries=0)

        response = await self._run("list events", _list)
        return response.get("items", [])

    async def get_event(self, event_id: str) -> dict[str, Any]:
        def _get():
            calendar = self._service("calendar")
            return calendar.events().get(calendarId=CALENDAR_ID, eventId=event_id).execute(num_retries=0)

        return await self._run("get event", _get)

    async def delete_event(self, event_id: str) -> None:
        def _delete():
            calendar = self._service("calendar")
            calendar.events().delete(calendarId=CALENDAR_ID, eventId=event_id).execute(num_retries=0)

        await self._run("delete event", _delete)
        logger.info("Deleted calendar event %s", event_id)
