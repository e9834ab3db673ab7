"""Database infrastructure with async PostgreSQL and the repository pattern.

Core components:
- **base**: Declarative base and common model fields
- **models**: Account, TaxProfile and Invoice tables
- **session**: Async engine and session management
- **repository**: Generic repository with CRUD, list and count operations
- **errors**: Translation of driver/ORM errors into application errors
- **dependencies**: FastAPI dependency injection helpers
"""

from src.infrastructure.database.base import Base, BaseModel
from src.infrastructure.database.dependencies import DatabaseSession, get_db
from src.infrastructure.database.repository import BaseRepository
from src.infrastructure.database.session import (
    close_database,
    create_database_engine,
    get_async_session,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "close_database",
    "create_database_engine",
    "get_async_session",
    "get_db",
    "get_engine",
    "get_session_factory",
]
