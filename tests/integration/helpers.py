"""Shared helpers for integration tests."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.api.main import create_app
from src.core.config import Settings
from src.infrastructure.database.dependencies import get_db

DEFAULT_PASSWORD = "correct-horse-battery"


@dataclass(frozen=True)
class RegisteredAccount:
    """An account created through the API and its session token."""

    id: int
    email: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        """Authorization header carrying the session token."""
        return {"Authorization": f"Bearer {self.token}"}


type Register = Callable[..., Awaitable[RegisteredAccount]]
type MakeResource = Callable[..., Awaitable[dict[str, Any]]]


def build_app(
    settings: Settings, session_factory: async_sessionmaker[AsyncSession]
) -> FastAPI:
    """Create the application with its sessions drawn from the test store."""
    application = create_app(settings)

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    return application
