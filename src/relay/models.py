"""
Relay Models
============
Response envelope, request schemas and upstream entity projections.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError


# Error type for complaints whose message already names the field
FIELD_ERROR_TYPE = "field_error"


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Error codes carried by failed envelopes."""
    UNAUTHORIZED = "UNAUTHORIZED"
    SERVER_ERROR = "SERVER_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"


# =============================================================================
# Response Envelope
# =============================================================================

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform success/error wrapper for every response."""
    success: bool
    data: Optional[T] = None
    error: Optional[ErrorCode] = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def _check_envelope(self) -> "ApiResponse[T]":
        if self.success and self.error is not None:
            raise ValueError("successful responses cannot carry an error code")
        if not self.success:
            if self.error is None:
                raise ValueError("failed responses must carry an error code")
            if self.data is not None:
                raise ValueError("failed responses cannot carry data")
        return self

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ApiResponse":
        """Build a success envelope."""
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: ErrorCode, message: str) -> "ApiResponse":
        """Build an error envelope."""
        return cls(success=False, error=error, message=message)

    def to_content(self) -> dict[str, Any]:
        """Serialize for a JSON response, omitting absent keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HealthStatus(BaseModel):
    """Health probe payload."""
    status: str = "healthy"
    timestamp: datetime
    version: str
    uptime: float


# =============================================================================
# Validation Helpers
# =============================================================================

def _required_text(value: Any, message: str) -> Any:
    """Reject missing, null and empty strings with a self-describing message."""
    if value is None or value == "":
        raise PydanticCustomError(FIELD_ERROR_TYPE, message)
    return value


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# Google Workspace Requests
# =============================================================================

class CreateDocumentRequest(_RequestModel):
    """Document creation request."""
    title: str = Field("", validate_default=True)

    @field_validator("title", mode="before")
    @classmethod
    def _title_required(cls, value: Any) -> Any:
        return _required_text(value, "Title is required")


class UpdateDocumentRequest(_RequestModel):
    """Text to insert at the start of a document."""
    content: str = Field("", validate_default=True)

    @field_validator("content", mode="before")
    @classmethod
    def _content_required(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value:
            raise PydanticCustomError(
                FIELD_ERROR_TYPE, "Content is required and must be a string"
            )
        return value


class CreateSpreadsheetRequest(_RequestModel):
    """Spreadsheet creation request."""
    title: str = Field("", validate_default=True)

    @field_validator("title", mode="before")
    @classmethod
    def _title_required(cls, value: Any) -> Any:
        return _required_text(value, "Title is required")


class UpdateSpreadsheetRequest(_RequestModel):
    """Values written into an A1-notation range."""
    cell_range: str = Field("", alias="range", validate_default=True)
    values: list[list[Any]] = Field(default=None, validate_default=True)

    @field_validator("cell_range", mode="before")
    @classmethod
    def _range_required(cls, value: Any) -> Any:
        return _required_text(value, "Range is required")

    @field_validator("values", mode="before")
    @classmethod
    def _values_two_dimensional(cls, value: Any) -> Any:
        if not isinstance(value, list) or not all(isinstance(row, list) for row in value):
            raise PydanticCustomError(
                FIELD_ERROR_TYPE, "Values must be a two-dimensional array"
            )
        return value


class CreateCalendarEventRequest(_RequestModel):
    """Calendar event creation request."""
    summary: str = Field("", validate_default=True)
    description: Optional[str] = None
    start_date_time: str = Field("", alias="startDateTime", validate_default=True)
    end_date_time: str = Field("", alias="endDateTime", validate_default=True)
    time_zone: str = Field("UTC", alias="timeZone")

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_required(cls, value: Any) -> Any:
        return _required_text(value, "Summary is required")

    @field_validator("start_date_time", mode="before")
    @classmethod
    def _start_required(cls, value: Any) -> Any:
        return _required_text(value, "Start date/time is required")

    @field_validator("end_date_time", mode="before")
    @classmethod
    def _end_required(cls, value: Any) -> Any:
        return _required_text(value, "End date/time is required")

    @field_validator("time_zone", mode="before")
    @classmethod
    def _default_time_zone(cls, value: Any) -> Any:
        return "UTC" if value is None or value == "" else value


# =============================================================================
# HubSpot Requests
# =============================================================================

class ContactInput(_RequestModel):
    """Contact properties for create and update."""
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    company: Optional[str] = None


class CreateCompanyRequest(_RequestModel):
    """Company creation request."""
    name: str = Field("", validate_default=True)
    domain: Optional[str] = None
    industry: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_required(cls, value: Any) -> Any:
        return _required_text(value, "Company name is required")


class UpdateCompanyRequest(_RequestModel):
    """Company update request; only supplied fields change."""
    name: Optional[str] = None
    domain: Optional[str] = None
    industry: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_not_empty(cls, value: Any) -> Any:
        if value == "":
            raise PydanticCustomError(FIELD_ERROR_TYPE, "Company name cannot be empty")
        return value


class CreateDealRequest(_RequestModel):
    """Deal creation request."""
    dealname: str = Field("", validate_default=True)
    amount: Optional[str] = None
    dealstage: Optional[str] = None
    closedate: Optional[str] = None

    @field_validator("dealname", mode="before")
    @classmethod
    def _dealname_required(cls, value: Any) -> Any:
        return _required_text(value, "Deal name is required")


class UpdateDealRequest(_RequestModel):
    """Deal update request; only supplied fields change."""
    dealname: Optional[str] = None
    amount: Optional[str] = None
    dealstage: Optional[str] = None
    closedate: Optional[str] = None

    @field_validator("dealname", mode="before")
    @classmethod
    def _dealname_not_empty(cls, value: Any) -> Any:
        if value == "":
            raise PydanticCustomError(FIELD_ERROR_TYPE, "Deal name cannot be empty")
        return value


# =============================================================================
# Google Workspace Entities
# =============================================================================

class DocumentBody(_UpstreamModel):
    content: list[Any] = Field(default_factory=list)


class Document(_UpstreamModel):
    """Google Docs document."""
    document_id: str = Field(alias="documentId")
    title: str = ""
    revision_id: Optional[str] = Field(None, alias="revisionId")
    body: Optional[DocumentBody] = None


class SpreadsheetProperties(_UpstreamModel):
    title: str = ""
    locale: Optional[str] = None
    time_zone: Optional[str] = Field(None, alias="timeZone")


class Spreadsheet(_UpstreamModel):
    """Google Sheets spreadsheet."""
    spreadsheet_id: str = Field(alias="spreadsheetId")
    properties: SpreadsheetProperties = Field(default_factory=SpreadsheetProperties)
    sheets: list[Any] = Field(default_factory=list)
    spreadsheet_url: Optional[str] = Field(None, alias="spreadsheetUrl")


class SpreadsheetUpdate(_UpstreamModel):
    """Summary of a values update."""
    spreadsheet_id: str = Field(alias="spreadsheetId")
    updated_range: Optional[str] = Field(None, alias="updatedRange")
    updated_rows: Optional[int] = Field(None, alias="updatedRows")
    updated_columns: Optional[int] = Field(None, alias="updatedColumns")
    updated_cells: Optional[int] = Field(None, alias="updatedCells")


class DriveFile(_UpstreamModel):
    """Google Drive file metadata."""
    id: str
    name: str = ""
    mime_type: str = Field("", alias="mimeType")
    size: Optional[str] = None
    modified_time: Optional[str] = Field(None, alias="modifiedTime")
    web_view_link: Optional[str] = Field(None, alias="webViewLink")


class EventTime(_UpstreamModel):
    date_time: Optional[str] = Field(None, alias="dateTime")
    date: Optional[str] = None
    time_zone: Optional[str] = Field(None, alias="timeZone")


class CalendarEvent(_UpstreamModel):
    """Google Calendar event."""
    id: str
    summary: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    html_link: Optional[str] = Field(None, alias="htmlLink")
    start: EventTime = Field(default_factory=EventTime)
    end: EventTime = Field(default_factory=EventTime)


# =============================================================================
# HubSpot Entities
# =============================================================================

class ContactProperties(_UpstreamModel):
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None


class CompanyProperties(_UpstreamModel):
    name: Optional[str] = None
    domain: Optional[str] = None
    industry: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class DealProperties(_UpstreamModel):
    dealname: Optional[str] = None
    amount: Optional[str] = None
    dealstage: Optional[str] = None
    closedate: Optional[str] = None


class _CrmRecord(_UpstreamModel):
    id: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    archived: Optional[bool] = None


class Contact(_CrmRecord):
    """HubSpot contact."""
    properties: ContactProperties = Field(default_factory=ContactProperties)


class Company(_CrmRecord):
    """HubSpot company."""
    properties: CompanyProperties = Field(default_factory=CompanyProperties)


class Deal(_CrmRecord):
    """HubSpot deal."""
    properties: DealProperties = Field(default_factory=DealProperties)
