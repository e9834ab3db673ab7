"""Shared fixtures for unit tests."""

import os
from collections.abc import Generator
from typing import Any

import pytest
from pytest_mock import MockerFixture, MockType
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import LogConfig, Settings
from src.core.error_context import _get_sensitive_fields
from src.core.security import PasswordHasher, TokenService


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch]:
    """Remove application environment variables for the duration of a test.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Yields:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    env_prefixes = [
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "OBSERVABILITY_CONFIG__",
        "DATABASE_CONFIG__",
        "AUTH_CONFIG__",
        "CORS_CONFIG__",
        "RATE_LIMIT_CONFIG__",
        "PORT",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield monkeypatch


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch, jwt_secret: str) -> Settings:
    """Provide a real Settings object built from test environment values.

    Returns:
        Settings: Settings with test defaults.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")
    monkeypatch.setenv("AUTH_CONFIG__JWT_SECRET", jwt_secret)

    return Settings()


@pytest.fixture
def mock_get_settings(mocker: MockerFixture) -> MockType:
    """Patch error_context's settings with custom sensitive field names.

    Args:
        mocker: Pytest mocker fixture.

    Returns:
        MockType: Mock get_settings function.
    """
    mock_settings = mocker.Mock(spec=Settings)
    mock_log_config = mocker.Mock(spec=LogConfig)
    mock_log_config.sensitive_fields = ["custom_secret", "tax_id"]
    mock_settings.log_config = mock_log_config

    mock_get_settings_fn = mocker.patch("src.core.error_context.get_settings")
    mock_get_settings_fn.return_value = mock_settings

    _get_sensitive_fields.cache_clear()

    return mock_get_settings_fn


@pytest.fixture
def mock_async_session(mocker: MockerFixture) -> MockType:
    """Provide an AsyncSession double with awaitable methods.

    Returns:
        MockType: Mock session; ``execute``, ``flush``, ``refresh`` and
            ``get`` are AsyncMocks, ``add`` and ``expire_all`` are plain.
    """
    session = mocker.Mock(spec=AsyncSession)
    session.execute = mocker.AsyncMock()
    session.flush = mocker.AsyncMock()
    session.refresh = mocker.AsyncMock()
    session.get = mocker.AsyncMock()
    session.commit = mocker.AsyncMock()
    session.rollback = mocker.AsyncMock()
    return session


@pytest.fixture
def query_result(mocker: MockerFixture) -> MockType:
    """Provide a mock ``Result`` returned by ``session.execute``."""
    result = mocker.Mock()
    result.scalar_one_or_none.return_value = None
    result.scalar.return_value = 0
    result.scalars.return_value.all.return_value = []
    result.rowcount = 1
    return result


@pytest.fixture(scope="session")
def fast_hasher() -> PasswordHasher:
    """bcrypt hasher at the minimum cost factor."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service(jwt_secret: str) -> TokenService:
    """Token service with a fixed test secret."""
    return TokenService(secret=jwt_secret, expire_seconds=3600)


@pytest.fixture
def sample_sensitive_data() -> dict[str, Any]:
    """Nested data with credentials at various depths."""
    return {
        "email": "ada@example.com",
        "password": "correct-horse-battery",
        "profile": {
            "name": "Ada",
            "session_token": "eyJhbGciOi...",
            "nested": {"client_secret": "shh", "theme": "dark"},
        },
        "items": [
            {"id": 1, "authorization": "Bearer abc"},
            {"id": 2, "amount": "10.00"},
        ],
        "tuple_data": ("public", {"cookie": "access_token=abc"}),
    }
