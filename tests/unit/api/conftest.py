"""Conftest for API unit tests."""

from collections.abc import Callable

import httpx
import pytest
from fastapi import FastAPI


@pytest.fixture
def client_for() -> Callable[[FastAPI], httpx.AsyncClient]:
    """Build an in-process HTTP client for a small test application.

    Exceptions that escape the application are turned into 500 responses
    instead of being raised into the test.
    """

    def factory(app: FastAPI) -> httpx.AsyncClient:
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        return httpx.AsyncClient(transport=transport, base_url="http://testserver")

    return factory
