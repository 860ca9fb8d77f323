"""
Pydantic models for API boundaries and page snapshots.
Why: contract-first design; one shape for scans, lookups and notifications.
"""

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field


class FormInfo(BaseModel):
    id: str
    name: str = ""
    action: str = ""
    method: str = "get"


class FieldInfo(BaseModel):
    type: str
    name: str = ""
    id: str = ""
    placeholder: str = ""
    label: str = ""
    required: bool = False
    value: str = ""


class PageData(BaseModel):
    title: str = ""
    url: str = ""
    forms: List[FormInfo] = []
    fields: List[FieldInfo] = []


class FieldFilled(BaseModel):
    """Emitted once when the user edits a highlighted field."""

    type: Literal["FIELD_FILLED"] = "FIELD_FILLED"
    field_name: str
    field_value: str


class ScanRequest(BaseModel):
    html: str = Field(..., min_length=1, max_length=2_000_000)
    url: str = ""


class LocateRequest(BaseModel):
    html: str = Field(..., min_length=1, max_length=2_000_000)
    field_name: str = Field(..., min_length=1)


class LocateResponse(BaseModel):
    found: bool
    field: Optional[FieldInfo] = None


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    error: ErrorBody
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
