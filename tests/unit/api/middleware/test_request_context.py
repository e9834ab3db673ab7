"""Unit tests for RequestContextMiddleware."""

from collections.abc import Callable

import httpx
import pytest
from fastapi import FastAPI, Request

from src.api.constants import CORRELATION_ID_HEADER, REQUEST_ID_HEADER
from src.api.middleware.request_context import RequestContextMiddleware
from src.core.context import RequestContext

type ClientFactory = Callable[[FastAPI], httpx.AsyncClient]


def _app() -> FastAPI:
    app = FastAPI()

    @app.get("/echo")
    async def echo(request: Request) -> dict[str, str | None]:
        return {
            "context_request_id": RequestContext.get_request_id(),
            "state_request_id": request.state.request_id,
            "correlation_id": RequestContext.get_correlation_id(),
        }

    app.add_middleware(RequestContextMiddleware)
    return app


@pytest.mark.unit
class TestRequestContextMiddleware:
    """Test request and correlation ID handling."""

    async def test_generates_ids(self, client_for: ClientFactory) -> None:
        """Verify fresh IDs are generated, exposed to handlers and echoed."""
        async with client_for(_app()) as client:
            response = await client.get("/echo")

        body = response.json()
        request_id = response.headers[REQUEST_ID_HEADER]
        assert request_id.startswith("req-")
        assert body["context_request_id"] == request_id
        assert body["state_request_id"] == request_id
        assert body["correlation_id"] == response.headers[CORRELATION_ID_HEADER]

    async def test_propagates_incoming_ids(self, client_for: ClientFactory) -> None:
        """Verify well-formed incoming IDs are kept."""
        headers = {REQUEST_ID_HEADER: "req-upstream-1", CORRELATION_ID_HEADER: "trace.42"}

        async with client_for(_app()) as client:
            response = await client.get("/echo", headers=headers)

        assert response.headers[REQUEST_ID_HEADER] == "req-upstream-1"
        assert response.headers[CORRELATION_ID_HEADER] == "trace.42"

    @pytest.mark.parametrize("bad", ["has spaces", "x" * 129, "<script>"])
    async def test_rejects_malformed_incoming_ids(
        self, client_for: ClientFactory, bad: str
    ) -> None:
        """Verify unsafe incoming IDs are replaced."""
        async with client_for(_app()) as client:
            response = await client.get("/echo", headers={REQUEST_ID_HEADER: bad})

        assert response.headers[REQUEST_ID_HEADER] != bad
        assert response.headers[REQUEST_ID_HEADER].startswith("req-")

    async def test_unique_per_request(self, client_for: ClientFactory) -> None:
        """Verify each request gets its own ID."""
        async with client_for(_app()) as client:
            first = await client.get("/echo")
            second = await client.get("/echo")

        assert first.headers[REQUEST_ID_HEADER] != second.headers[REQUEST_ID_HEADER]

    async def test_context_cleared_after_request(self, client_for: ClientFactory) -> None:
        """Verify the IDs do not leak past the request."""
        async with client_for(_app()) as client:
            await client.get("/echo")

        assert RequestContext.get_request_id() is None
