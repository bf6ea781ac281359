"""
Google Workspace Routes
=======================
Docs, Sheets, Drive and Calendar endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from connectors import WorkspaceConnector

from ..middleware.auth import require_authenticated
from ..models import (
    ApiResponse,
    CalendarEvent,
    CreateCalendarEventRequest,
    CreateDocumentRequest,
    CreateSpreadsheetRequest,
    Document,
    DriveFile,
    Spreadsheet,
    SpreadsheetUpdate,
    UpdateDocumentRequest,
    UpdateSpreadsheetRequest,
)
from .base import RelayRoute
from .dependencies import get_workspace_connector


router = APIRouter(
    prefix="/google",
    tags=["Google Workspace"],
    dependencies=[Depends(require_authenticated)],
    route_class=RelayRoute,
)


# =============================================================================
# Docs
# =============================================================================

@router.post(
    "/docs",
    response_model=ApiResponse[Document],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create document",
)
async def create_document(
    body: CreateDocumentRequest,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[Document]:
    document = await workspace.create_document(body.title)
    return ApiResponse.ok(
        Document.model_validate(document), "Document created successfully"
    )


@router.get(
    "/docs/{document_id}",
    response_model=ApiResponse[Document],
    response_model_exclude_none=True,
    summary="Get document",
)
async def get_document(
    document_id: str,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[Document]:
    document = await workspace.get_document(document_id)
    return ApiResponse.ok(Document.model_validate(document))


@router.patch(
    "/docs/{document_id}",
    response_model=ApiResponse[Document],
    response_model_exclude_none=True,
    summary="Insert text at the start of a document",
)
async def update_document(
    document_id: str,
    body: UpdateDocumentRequest,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[Document]:
    document = await workspace.insert_document_text(document_id, body.content)
    return ApiResponse.ok(
        Document.model_validate(document), "Document updated successfully"
    )


# =============================================================================
# Sheets
# =============================================================================

@router.post(
    "/sheets",
    response_model=ApiResponse[Spreadsheet],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create spreadsheet",
)
async def create_spreadsheet(
    body: CreateSpreadsheetRequest,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[Spreadsheet]:
    spreadsheet = await workspace.create_spreadsheet(body.title)
    return ApiResponse.ok(
        Spreadsheet.model_validate(spreadsheet), "Spreadsheet created successfully"
    )


@router.get(
    "/sheets/{spreadsheet_id}",
    response_model=ApiResponse[Spreadsheet],
    response_model_exclude_none=True,
    summary="Get spreadsheet",
)
async def get_spreadsheet(
    spreadsheet_id: str,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[Spreadsheet]:
    spreadsheet = await workspace.get_spreadsheet(spreadsheet_id)
    return ApiResponse.ok(Spreadsheet.model_validate(spreadsheet))


@router.patch(
    "/sheets/{spreadsheet_id}",
    response_model=ApiResponse[SpreadsheetUpdate],
    response_model_exclude_none=True,
    summary="Write values into a range",
)
async def update_spreadsheet(
    spreadsheet_id: str,
    body: UpdateSpreadsheetRequest,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[SpreadsheetUpdate]:
    summary = await workspace.update_spreadsheet_values(
        spreadsheet_id, body.cell_range, body.values
    )
    return ApiResponse.ok(
        SpreadsheetUpdate.model_validate(summary), "Spreadsheet updated successfully"
    )


# =============================================================================
# Drive
# =============================================================================

@router.get(
    "/drive/files",
    response_model=ApiResponse[list[DriveFile]],
    response_model_exclude_none=True,
    summary="List files",
)
async def list_files(
    q: Optional[str] = Query(None, description="Drive search query"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of files"),
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[list[DriveFile]]:
    files = await workspace.list_files(q, limit)
    return ApiResponse.ok([DriveFile.model_validate(f) for f in files])


@router.get(
    "/drive/files/{file_id}",
    response_model=ApiResponse[DriveFile],
    response_model_exclude_none=True,
    summary="Get file metadata",
)
async def get_file(
    file_id: str,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[DriveFile]:
    drive_file = await workspace.get_file(file_id)
    return ApiResponse.ok(DriveFile.model_validate(drive_file))


@router.delete(
    "/drive/files/{file_id}",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Delete file",
)
async def delete_file(
    file_id: str,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse:
    await workspace.delete_file(file_id)
    return ApiResponse.ok(message="File deleted successfully")


# =============================================================================
# Calendar
# =============================================================================

@router.post(
    "/calendar/events",
    response_model=ApiResponse[CalendarEvent],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create calendar event",
)
async def create_calendar_event(
    body: CreateCalendarEventRequest,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[CalendarEvent]:
    event = await workspace.create_event(
        summary=body.summary,
        start_date_time=body.start_date_time,
        end_date_time=body.end_date_time,
        time_zone=body.time_zone,
        description=body.description,
    )
    return ApiResponse.ok(
        CalendarEvent.model_validate(event), "Calendar event created successfully"
    )


@router.get(
    "/calendar/events",
    response_model=ApiResponse[list[CalendarEvent]],
    response_model_exclude_none=True,
    summary="List upcoming calendar events",
)
async def list_calendar_events(
    time_min: Optional[str] = Query(None, alias="timeMin", description="RFC 3339 lower bound; defaults to now"),
    time_max: Optional[str] = Query(None, alias="timeMax", description="RFC 3339 upper bound"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of events"),
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[list[CalendarEvent]]:
    events = await workspace.list_events(time_min=time_min, time_max=time_max, limit=limit)
    return ApiResponse.ok([CalendarEvent.model_validate(e) for e in events])


@router.get(
    "/calendar/events/{event_id}",
    response_model=ApiResponse[CalendarEvent],
    response_model_exclude_none=True,
    summary="Get calendar event",
)
async def get_calendar_event(
    event_id: str,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse[CalendarEvent]:
    event = await workspace.get_event(event_id)
    return ApiResponse.ok(CalendarEvent.model_validate(event))


@router.delete(
    "/calendar/events/{event_id}",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Delete calendar event",
)
async def delete_calendar_event(
    event_id: str,
    workspace: WorkspaceConnector = Depends(get_workspace_connector),
) -> ApiResponse:
    await workspace.delete_event(event_id)
    return ApiResponse.ok(message="Calendar event deleted successfully")
