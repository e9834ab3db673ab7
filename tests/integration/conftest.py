"""Fixtures for integration tests.

Every test gets its own application and its own in-memory SQLite store
with the full schema. Requests go through the complete middleware stack
over an in-process ASGI transport.
"""

from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.core.config import Settings
from src.infrastructure.database.base import Base
from src.infrastructure.database.session import (
    create_database_engine,
    create_session_factory,
)
from tests.integration.helpers import (
    DEFAULT_PASSWORD,
    MakeResource,
    Register,
    RegisteredAccount,
    build_app,
)


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with all tables created."""
    engine = create_database_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test store."""
    return create_session_factory(db_engine)


@pytest.fixture
def app(
    app_settings: Settings, session_factory: async_sessionmaker[AsyncSession]
) -> FastAPI:
    """Application under test."""
    return build_app(app_settings, session_factory)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    """HTTP client for the application under test.

    Unhandled exceptions are rendered as 500 responses rather than raised.
    """
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as http_client:
        yield http_client


@pytest.fixture
def register(client: httpx.AsyncClient) -> Register:
    """Register accounts through the API.

    The session cookie set by registration is discarded so that requests
    only authenticate when a test passes ``headers`` explicitly.
    """
    counter = 0

    async def _register(
        email: str | None = None,
        name: str = "Ada Lovelace",
        password: str = DEFAULT_PASSWORD,
    ) -> RegisteredAccount:
        nonlocal counter
        counter += 1
        email = email or f"user{counter}@example.com"
        response = await client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        assert response.status_code == 201, response.text
        client.cookies.clear()
        data = response.json()["data"]
        return RegisteredAccount(
            id=data["user"]["id"], email=data["user"]["email"], token=data["token"]
        )

    return _register


@pytest.fixture
async def account(register: Register) -> RegisteredAccount:
    """One registered account."""
    return await register(email="ada@example.com")


@pytest.fixture
def make_profile(client: httpx.AsyncClient) -> MakeResource:
    """Create tax profiles through the API."""

    async def _make(
        owner: RegisteredAccount,
        name: str = "Main",
        tax_id_number: str = "ABC-12345",
        address: str = "1 Long Street, Springfield",
    ) -> dict[str, Any]:
        response = await client.post(
            "/api/taxProfiles",
            json={"name": name, "tax_id_number": tax_id_number, "address": address},
            headers=owner.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def make_invoice(client: httpx.AsyncClient) -> MakeResource:
    """Create invoices through the API."""

    async def _make(
        owner: RegisteredAccount,
        tax_profile_id: int,
        amount: str = "100.00",
        **extra: str,
    ) -> dict[str, Any]:
        response = await client.post(
            "/api/invoices",
            json={"taxProfileId": tax_profile_id, "amount": amount, **extra},
            headers=owner.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make
