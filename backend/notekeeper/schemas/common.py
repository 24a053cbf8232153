"""
NoteKeeper Backend — Shared Schema Building Blocks
====================================================

What:  Constrained field types, the camelCase base model and the response
       envelope used by every endpoint.

Envelope format:
    Success: {"success": true, "data": ..., "count": 3}
    Failure: {"success": false, "error": "Label not found",
              "code": "not_found", "requestId": "a1b2c3d4"}
"""

from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

# 24 hex characters, the shape of every stored identifier
OBJECT_ID_PATTERN = r"^[0-9a-fA-F]{24}$"
HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"

ObjectId = Annotated[str, StringConstraints(pattern=OBJECT_ID_PATTERN, to_lower=True)]
HexColor = Annotated[str, StringConstraints(pattern=HEX_COLOR_PATTERN)]


class CamelModel(BaseModel):
    """Base for API models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


DataT = TypeVar("DataT")


class Envelope(CamelModel, Generic[DataT]):
    """Successful response wrapper."""

    success: bool = True
    data: DataT
    count: Optional[int] = Field(default=None, description="Number of items in data (lists only)")


class EmptyData(CamelModel):
    """Placeholder payload for deletions (`data: {}`)."""


class ModifiedCount(CamelModel):
    """Result of a bulk attach/detach."""

    modified_count: int = Field(description="Notes actually changed by the operation")


class ErrorResponse(CamelModel):
    """
    Standardized error response for all API errors.

    Fields:
        error: Human-readable description
        code: Machine-readable error kind (e.g. "not_found", "conflict")
        details: Optional extra context (e.g. which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """

    success: bool = False
    error: str
    code: str
    details: Optional[Any] = None
    request_id: Optional[str] = None


class HealthResponse(CamelModel):
    """Health check response showing service and database status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
