"""Translation of persistence failures into application errors.

Repositories never let a driver or ORM exception escape; every one of them
is passed through ``translate_store_error`` which maps it to the
application error the API layer knows how to render:

- unique constraint violation -> ConflictError (409)
- foreign key violation -> NotFoundError (404) for the referenced parent
- no matching row -> NotFoundError (404)
- anything else -> InternalError (500)
"""

from typing import Final

from loguru import logger
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError

from src.core.exceptions import (
    ConflictError,
    InternalError,
    LedgerlyError,
    NotFoundError,
)

# SQLSTATE codes from PostgreSQL; SQLite reports constraint names in text
UNIQUE_VIOLATION: Final[str] = "23505"
FOREIGN_KEY_VIOLATION: Final[str] = "23503"


def _sqlstate(error: IntegrityError) -> str | None:
    orig = error.orig
    for attribute in ("sqlstate", "pgcode"):
        if code := getattr(orig, attribute, None):
            return str(code)
    return None


def is_unique_violation(error: IntegrityError) -> bool:
    """Whether ``error`` was raised by a UNIQUE constraint."""
    if _sqlstate(error) == UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(error.orig)


def is_foreign_key_violation(error: IntegrityError) -> bool:
    """Whether ``error`` was raised by a FOREIGN KEY constraint."""
    if _sqlstate(error) == FOREIGN_KEY_VIOLATION:
        return True
    return "FOREIGN KEY constraint failed" in str(error.orig)


def translate_store_error(
    error: Exception,
    *,
    conflict_message: str = "Resource already exists",
    missing_message: str = "Resource not found",
) -> LedgerlyError:
    """Map a persistence exception to the application error to raise.

    Application errors pass through unchanged. The caller is expected to
    ``raise translate_store_error(e) from e``.

    Args:
        error: The exception raised by SQLAlchemy or the driver.
        conflict_message: Client message for uniqueness violations.
        missing_message: Client message for missing rows or parents.

    Returns:
        LedgerlyError: The error to raise in place of ``error``.
    """
    if isinstance(error, LedgerlyError):
        return error

    if isinstance(error, IntegrityError):
        if is_unique_violation(error):
            return ConflictError(conflict_message, cause=error)
        if is_foreign_key_violation(error):
            return NotFoundError(missing_message, cause=error)

    if isinstance(error, NoResultFound):
        return NotFoundError(missing_message, cause=error)

    if isinstance(error, SQLAlchemyError):
        logger.error(
            "Unexpected store error: {}: {}", type(error).__name__, error
        )
        return InternalError("Store operation failed", cause=error)

    logger.error("Unexpected non-store error in repository: {}", type(error).__name__)
    return InternalError("Store operation failed", cause=error)
