"""Alembic environment for the Ledgerly schema.

The database URL comes from the application settings
(``DATABASE_CONFIG__DATABASE_URL``), not from ``alembic.ini``. Importing
``src.infrastructure.database.models`` registers the accounts, tax profile
and invoice tables on ``Base.metadata`` for autogenerate.
"""

import asyncio
import logging
from typing import Any

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

import src.infrastructure.database.models  # noqa: F401
from src.core.config import get_settings
from src.infrastructure.database.base import Base

config = context.config

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def _database_url() -> str:
    # ``alembic -x url=...`` overrides the configured database
    return context.get_x_argument(as_dictionary=True).get(
        "url", get_settings().database_config.database_url
    )


def _configure_options(url: str) -> dict[str, Any]:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "compare_server_default": True,
        # SQLite cannot ALTER constraints in place
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting to a database."""
    url = _database_url()
    logger.info("Running migrations in offline mode")

    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection, url: str) -> None:
    """Run migrations on an open connection."""
    context.configure(connection=connection, **_configure_options(url))

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations in 'online' mode through an async engine."""
    url = _database_url()
    logger.info("Running migrations in online mode with async engine")

    connectable = async_engine_from_config(
        {
            "sqlalchemy.url": url,
            "sqlalchemy.echo": get_settings().database_config.echo,
        },
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations, url)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations against a live database."""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
