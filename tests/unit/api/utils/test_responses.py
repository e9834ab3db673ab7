"""Unit tests for src/api/utils/responses.py module."""

from decimal import Decimal

import orjson
import pytest
from pydantic import BaseModel, Field

from src.api.utils.responses import (
    ORJSONResponse,
    error_response,
    success_response,
    utc_timestamp,
)
from src.core.context import RequestContext


class _Item(BaseModel):
    item_id: int = Field(..., serialization_alias="itemId")
    total: Decimal


def _body(response: ORJSONResponse) -> dict:
    return orjson.loads(response.body)


@pytest.mark.unit
class TestSuccessResponse:
    """Test the success envelope."""

    def test_shape(self) -> None:
        """Verify success, data and timestamp are present."""
        response = success_response({"message": "ok"})

        body = _body(response)
        assert response.status_code == 200
        assert body["success"] is True
        assert body["data"] == {"message": "ok"}
        assert body["timestamp"].endswith("Z")
        assert "requestId" not in body

    def test_request_id_from_context(self) -> None:
        """Verify the current request ID is echoed."""
        RequestContext.set_request_id("req-abc")

        assert _body(success_response(None))["requestId"] == "req-abc"

    def test_models_dumped_by_alias(self) -> None:
        """Verify pydantic models are serialized in JSON mode with aliases."""
        body = _body(success_response(_Item(item_id=3, total=Decimal("1.50")), 201))

        assert body["data"] == {"itemId": 3, "total": "1.50"}


@pytest.mark.unit
class TestErrorResponse:
    """Test the error envelope."""

    def test_shape(self) -> None:
        """Verify error, errorCode and optional members."""
        response = error_response(
            404, "Invoice not found", "NOT_FOUND", details=None, errorId=None
        )

        body = _body(response)
        assert response.status_code == 404
        assert body["success"] is False
        assert body["error"] == "Invoice not found"
        assert body["errorCode"] == "NOT_FOUND"
        assert "details" not in body
        assert "errorId" not in body

    def test_explicit_request_id_wins(self) -> None:
        """Verify an explicit request ID overrides the context."""
        RequestContext.set_request_id("req-context")

        body = _body(error_response(400, "bad", "VALIDATION_ERROR", request_id="req-x"))

        assert body["requestId"] == "req-x"

    def test_headers_passed(self) -> None:
        """Verify extra headers are set on the response."""
        response = error_response(401, "Missing token", "MISSING_TOKEN", headers={"X-A": "1"})

        assert response.headers["x-a"] == "1"


@pytest.mark.unit
def test_utc_timestamp_format() -> None:
    """Verify timestamps use the Z suffix."""
    value = utc_timestamp()

    assert value.endswith("Z")
    assert "+00:00" not in value
