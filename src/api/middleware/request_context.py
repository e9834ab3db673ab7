"""Request context middleware for request and correlation IDs.

Key features:
- **Request ID**: taken from ``X-Request-ID`` when it looks sane, generated
  otherwise; echoed in the response header and in every envelope
- **Correlation ID propagation**: ``X-Correlation-ID`` is passed through or
  generated so calls can be followed across services
- **Loguru integration**: both IDs are bound to every log line of the request
"""

import re
from typing import Final

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.api.constants import CORRELATION_ID_HEADER, REQUEST_ID_HEADER
from src.core.context import (
    RequestContext,
    generate_correlation_id,
    generate_request_id,
)

INCOMING_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def _incoming_id(request: Request, header: str) -> str | None:
    value = request.headers.get(header)
    if value and INCOMING_ID_PATTERN.fullmatch(value):
        return value
    return None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to manage request context.

    This middleware:
    - Extracts or generates the request and correlation IDs
    - Stores them in contextvars and on ``request.state``
    - Binds them to Loguru for structured logging
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process the request with context management.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: Response with request and correlation ID headers.
        """
        request_id = _incoming_id(request, REQUEST_ID_HEADER) or generate_request_id()
        correlation_id = (
            _incoming_id(request, CORRELATION_ID_HEADER) or generate_correlation_id()
        )

        request.state.request_id = request_id
        RequestContext.set_request_id(request_id)
        RequestContext.set_correlation_id(correlation_id)

        try:
            with logger.contextualize(
                request_id=request_id, correlation_id=correlation_id
            ):
                response = await call_next(request)
        finally:
            RequestContext.clear()

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
