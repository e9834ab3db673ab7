"""Response envelope schemas.

Every response body has the same outer shape. Success:

    {"success": true, "data": ..., "timestamp": "...", "requestId": "req-..."}

Failure:

    {"success": false, "error": "Invalid token", "errorCode": "INVALID_TOKEN",
     "timestamp": "...", "requestId": "req-..."}

Failures may add ``details`` (field-level validation problems), ``errorId``
(unexpected server errors only) and ``debugInfo`` (development only).

These models document the envelope in the OpenAPI schema; the envelope
itself is assembled by ``src.api.utils.responses``.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from src.core.pagination import Page


class FieldErrorDetail(BaseModel):
    """One failed validation rule."""

    field: str = Field(..., description="Dotted path of the offending field")
    message: str = Field(..., description="What is wrong with the value")
    type: str = Field(..., description="Machine-readable rule identifier")


class SuccessEnvelope[T](BaseModel):
    """Envelope wrapping a successful result."""

    model_config = ConfigDict(populate_by_name=True)

    success: Literal[True] = True
    data: T
    timestamp: datetime
    request_id: str | None = Field(default=None, alias="requestId")


class ErrorEnvelope(BaseModel):
    """Envelope describing a failed request."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "success": False,
                    "error": "Validation failed",
                    "errorCode": "VALIDATION_ERROR",
                    "details": [
                        {
                            "field": "amount",
                            "message": "Value error, must be a decimal string",
                            "type": "value_error",
                        }
                    ],
                    "timestamp": "2026-01-14T12:00:00Z",
                    "requestId": "req-660e8400-e29b-41d4-a716-446655440000",
                },
                {
                    "success": False,
                    "error": "Internal server error",
                    "errorCode": "INTERNAL_ERROR",
                    "errorId": "err-0d6c7c1b-6f55-4d0c-9d5e-2d1f2b0b7b10",
                    "timestamp": "2026-01-14T12:00:03Z",
                    "requestId": "req-660e8400-e29b-41d4-a716-446655440002",
                },
            ]
        },
    )

    success: Literal[False] = False
    error: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., alias="errorCode")
    details: list[FieldErrorDetail] | None = None
    error_id: str | None = Field(default=None, alias="errorId")
    debug_info: dict[str, Any] | None = Field(default=None, alias="debugInfo")
    timestamp: datetime
    request_id: str | None = Field(default=None, alias="requestId")


class PageOut[T](BaseModel):
    """A page of results."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[T]
    page: int
    limit: int
    total: int
    total_pages: int = Field(..., serialization_alias="totalPages")


class MessageOut(BaseModel):
    """A bare confirmation message."""

    message: str


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorEnvelope, "description": "Validation failed"},
    401: {"model": ErrorEnvelope, "description": "Missing or invalid token"},
    404: {"model": ErrorEnvelope, "description": "Not found"},
    429: {"model": ErrorEnvelope, "description": "Too many requests"},
    500: {"model": ErrorEnvelope, "description": "Internal server error"},
}


def page_out[M: BaseModel](page: Page[Any], schema: type[M]) -> PageOut[M]:
    """Convert a repository page of ORM rows into its response model."""
    return PageOut[schema](  # type: ignore[valid-type]
        items=[schema.model_validate(item) for item in page.items],
        page=page.pagination.page,
        limit=page.pagination.limit,
        total=page.total,
        total_pages=page.total_pages,
    )
