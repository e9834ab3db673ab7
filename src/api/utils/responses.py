"""Envelope-producing JSON responses serialized with orjson.

``ORJSONResponse`` is the application's default response class. The
``success_response`` and ``error_response`` helpers build the two envelope
shapes; route handlers and exception handlers return their results
directly, so every body leaving the service has the same outer layout.
"""

from datetime import UTC, datetime
from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.background import BackgroundTask

from src.core.context import RequestContext


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson for JSON serialization.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson."""
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json", by_alias=True)
        return orjson.dumps(content)


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string with a ``Z`` suffix."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _dump(data: Any) -> Any:  # noqa: ANN401 - any JSON-serializable payload
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    return data


def success_response(
    data: Any,  # noqa: ANN401 - any JSON-serializable payload
    status_code: int = 200,
    background: BackgroundTask | None = None,
) -> ORJSONResponse:
    """Wrap ``data`` in a success envelope.

    Args:
        data: A pydantic model or JSON-compatible value.
        status_code: HTTP status of the response.
        background: Optional task run after the response is sent.

    Returns:
        ORJSONResponse: ``{"success": true, "data": ..., ...}``.
    """
    content: dict[str, Any] = {
        "success": True,
        "data": _dump(data),
        "timestamp": utc_timestamp(),
    }
    if request_id := RequestContext.get_request_id():
        content["requestId"] = request_id
    return ORJSONResponse(content=content, status_code=status_code, background=background)


def error_response(
    status_code: int,
    message: str,
    error_code: str,
    headers: dict[str, str] | None = None,
    request_id: str | None = None,
    **extra: Any,  # noqa: ANN401 - optional envelope members
) -> ORJSONResponse:
    """Build an error envelope.

    Args:
        status_code: HTTP status of the response.
        message: Client-safe message placed in ``error``.
        error_code: Machine-readable code placed in ``errorCode``.
        headers: Extra response headers.
        request_id: Request ID to echo; defaults to the one in context.
        **extra: Optional members such as ``details``, ``errorId`` or
            ``debugInfo``; ``None`` values are omitted.

    Returns:
        ORJSONResponse: ``{"success": false, "error": ..., ...}``.
    """
    content: dict[str, Any] = {
        "success": False,
        "error": message,
        "errorCode": error_code,
        "timestamp": utc_timestamp(),
    }
    content.update({key: value for key, value in extra.items() if value is not None})
    if request_id := request_id or RequestContext.get_request_id():
        content["requestId"] = request_id
    return ORJSONResponse(content=content, status_code=status_code, headers=headers)
