"""FastAPI dependency injection for database session management.

Each request gets its own session: committed when the handler returns,
rolled back when it raises. The DatabaseSession alias keeps route
signatures short.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.session import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Provide a request-scoped database session.

    Yields:
        AsyncGenerator[AsyncSession]: A session committed on success and
                                     rolled back on error.

    Example:
        @router.get("/accounts/{account_id}")
        async def get_account(account_id: int, db: DatabaseSession): ...
    """
    async with get_async_session() as session:
        yield session


# Type alias for cleaner dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
