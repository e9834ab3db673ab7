"""Root conftest.py for the Ledgerly test suite.

This file contains project-wide fixtures and pytest configuration.
"""

import os
from collections.abc import Generator

import pytest

from src.core.config import (
    AuthConfig,
    DatabaseConfig,
    ObservabilityConfig,
    RateLimitConfig,
    Settings,
    get_settings,
)
from src.core.context import RequestContext
from src.core.error_context import _get_sensitive_fields

# Importing src.api.main builds the module-level app from the environment;
# keep it from installing a span exporter for the whole session.
os.environ.setdefault("OBSERVABILITY_CONFIG__ENABLE_TRACING", "false")

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


@pytest.fixture(scope="session")
def jwt_secret() -> str:
    """Signing secret shared by test settings and token services."""
    return TEST_JWT_SECRET


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture
def app_settings(jwt_secret: str) -> Settings:
    """Settings for an in-memory, fast-hashing, trace-free application."""
    return Settings(
        environment="development",
        debug=True,
        auth_config=AuthConfig(jwt_secret=jwt_secret, bcrypt_rounds=4),
        observability_config=ObservabilityConfig(enable_tracing=False),
        database_config=DatabaseConfig(database_url="sqlite+aiosqlite://"),
        rate_limit_config=RateLimitConfig(enabled=False),
    )


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Start and end every test with an empty request context."""
    RequestContext.clear()
    yield
    RequestContext.clear()
