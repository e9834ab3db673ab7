"""Base repository pattern implementation for database operations.

This module provides a generic repository base class that implements the
CRUD, list and count operations shared by every entity. All failures of
the store are translated into application errors before they leave the
repository, and every lookup can be narrowed to the rows owned by one
account.
"""

from collections.abc import Mapping, Sequence
from typing import ClassVar

from loguru import logger
from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy import delete as sql_delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.core.pagination import Page, Pagination
from src.infrastructure.database.base import BaseModel
from src.infrastructure.database.errors import translate_store_error

type Condition = ColumnElement[bool]


class BaseRepository[T: BaseModel]:
    """Base repository class providing common CRUD operations.

    Subclasses name the entity (used in client-facing messages), the order
    in which lists are returned and, if the entity belongs to an account,
    how to restrict a query to one owner.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class AccountRepository(BaseRepository[Account]):
            entity_name = "Account"

            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Account)
    """

    entity_name: ClassVar[str] = "Resource"
    conflict_message: ClassVar[str] = "Resource already exists"

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    @property
    def not_found_message(self) -> str:
        """Client message used when a row is missing or out of scope."""
        return f"{self.entity_name} not found"

    def owner_conditions(self, owner_id: int) -> list[Condition]:
        """Conditions restricting rows to those owned by ``owner_id``.

        Entities without an owner return no conditions.
        """
        _ = owner_id
        return []

    def order_by(self) -> Sequence[ColumnElement[object]]:
        """Ordering for list results, newest first by default."""
        return (self.model_class.created_at.desc(), self.model_class.id.desc())

    def _translate(self, error: Exception) -> Exception:
        return translate_store_error(
            error,
            conflict_message=self.conflict_message,
            missing_message=self.not_found_message,
        )

    def _scoped(
        self, conditions: Sequence[Condition], owner_id: int | None
    ) -> list[Condition]:
        scoped = list(conditions)
        if owner_id is not None:
            scoped.extend(self.owner_conditions(owner_id))
        return scoped

    def _select(
        self, conditions: Sequence[Condition] = (), owner_id: int | None = None
    ) -> Select[tuple[T]]:
        return select(self.model_class).where(*self._scoped(conditions, owner_id))

    async def get_by_id(self, entity_id: int, owner_id: int | None = None) -> T | None:
        """Retrieve a model instance by its ID.

        Args:
            entity_id: The primary key ID of the model to retrieve.
            owner_id: When given, rows of other owners are treated as absent.

        Returns:
            T | None: The model instance if found, None otherwise.
        """
        logger.debug("Fetching {} by ID: {}", self.entity_name, entity_id)

        stmt = self._select([self.model_class.id == entity_id], owner_id)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._translate(e) from e
        return result.scalar_one_or_none()

    async def get(self, entity_id: int, owner_id: int | None = None) -> T:
        """Retrieve a model instance by its ID or raise NotFoundError."""
        instance = await self.get_by_id(entity_id, owner_id)
        if instance is None:
            logger.debug("{} not found with ID: {}", self.entity_name, entity_id)
            raise NotFoundError(
                self.not_found_message, context={"entity_id": entity_id}
            )
        return instance

    async def create(self, obj: T) -> T:
        """Insert a new model instance.

        Args:
            obj: The model instance to create.

        Returns:
            T: The created model instance with populated ID and timestamps.
        """
        logger.debug("Creating new {} instance", self.entity_name)

        self.session.add(obj)
        try:
            await self.session.flush()
            await self.session.refresh(obj)
        except SQLAlchemyError as e:
            raise self._translate(e) from e

        logger.info("Created {} instance with ID: {}", self.entity_name, obj.id)
        return obj

    async def update(
        self,
        entity_id: int,
        data: Mapping[str, object],
        owner_id: int | None = None,
    ) -> T:
        """Merge ``data`` into the row with ``entity_id``.

        Only keys present in ``data`` are written; every other column keeps
        its stored value.

        Raises:
            NotFoundError: No row with that ID is visible to ``owner_id``.
        """
        instance = await self.get(entity_id, owner_id)
        return await self.apply(instance, data)

    async def apply(self, instance: T, data: Mapping[str, object]) -> T:
        """Merge ``data`` into an already loaded ``instance`` and flush it."""
        for key, value in data.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
            else:
                logger.warning(
                    "Attempted to update non-existent field '{}' on {}",
                    key,
                    self.entity_name,
                )

        try:
            await self.session.flush()
            await self.session.refresh(instance)
        except SQLAlchemyError as e:
            raise self._translate(e) from e

        logger.info(
            "Updated {} instance ID {} - fields: {}",
            self.entity_name,
            instance.id,
            list(data.keys()),
        )
        return instance

    async def delete(self, entity_id: int, owner_id: int | None = None) -> None:
        """Delete the row with ``entity_id`` and, through the schema, its dependents.

        Raises:
            NotFoundError: No row with that ID is visible to ``owner_id``.
        """
        conditions = self._scoped([self.model_class.id == entity_id], owner_id)
        stmt = (
            sql_delete(self.model_class)
            .where(*conditions)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._translate(e) from e

        if result.rowcount == 0:
            raise NotFoundError(
                self.not_found_message, context={"entity_id": entity_id}
            )

        # Rows removed by ON DELETE CASCADE never pass through the identity map
        self.session.expire_all()
        logger.info("Deleted {} instance with ID: {}", self.entity_name, entity_id)

    async def count(
        self, conditions: Sequence[Condition] = (), owner_id: int | None = None
    ) -> int:
        """Count rows matching ``conditions`` without pagination."""
        stmt = (
            select(func.count())
            .select_from(self.model_class)
            .where(*self._scoped(conditions, owner_id))
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._translate(e) from e
        return result.scalar() or 0

    async def exists(self, entity_id: int, owner_id: int | None = None) -> bool:
        """Check if a row with ``entity_id`` is visible to ``owner_id``."""
        return await self.count([self.model_class.id == entity_id], owner_id) > 0

    async def paginate(
        self,
        pagination: Pagination,
        conditions: Sequence[Condition] = (),
        owner_id: int | None = None,
    ) -> Page[T]:
        """Return one page of rows matching ``conditions``.

        The total is computed with the same predicate as the page. The two
        reads are independent, so a concurrent write may make them disagree
        by the rows it touched.
        """
        logger.debug(
            "Listing {} - page: {}, limit: {}, filters: {}",
            self.entity_name,
            pagination.page,
            pagination.limit,
            len(conditions),
        )

        stmt = (
            self._select(conditions, owner_id)
            .order_by(*self.order_by())
            .offset(pagination.skip)
            .limit(pagination.limit)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._translate(e) from e
        items = list(result.scalars().all())
        total = await self.count(conditions, owner_id)

        return Page(items=items, pagination=pagination, total=total)
