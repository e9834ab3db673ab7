"""Account persistence."""

from dataclasses import dataclass
from typing import TypedDict

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.pagination import Page, Pagination
from src.infrastructure.database.models import Account
from src.infrastructure.database.repository import BaseRepository, Condition


class AccountChanges(TypedDict, total=False):
    """Fields of an account that a partial update may set."""

    name: str
    password_hash: str


@dataclass(frozen=True, slots=True)
class AccountFilter:
    """Case-insensitive substring filters over e-mail and name."""

    email: str | None = None
    name: str | None = None

    def conditions(self) -> list[Condition]:
        """Translate the set fields into SQL conditions."""
        conditions: list[Condition] = []
        if self.email:
            conditions.append(Account.email.icontains(self.email, autoescape=True))
        if self.name:
            conditions.append(Account.name.icontains(self.name, autoescape=True))
        return conditions


class AccountRepository(BaseRepository[Account]):
    """Repository for accounts. Accounts have no owner."""

    entity_name = "Account"
    conflict_message = "Email already used"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Account)

    async def get_by_email(self, email: str) -> Account | None:
        """Find the account registered under ``email`` (case-insensitive)."""
        stmt = select(Account).where(Account.email == email.lower())
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._translate(e) from e
        return result.scalar_one_or_none()

    async def create_account(self, email: str, password_hash: str, name: str) -> Account:
        """Insert a new account.

        Raises:
            ConflictError: The e-mail is already registered.
        """
        account = await self.create(
            Account(email=email.lower(), password_hash=password_hash, name=name)
        )
        logger.info("Registered account {}", account.id)
        return account

    async def update_account(self, account_id: int, changes: AccountChanges) -> Account:
        """Apply a partial update to an account."""
        return await self.update(account_id, changes)

    async def list_accounts(
        self, pagination: Pagination, filters: AccountFilter
    ) -> Page[Account]:
        """One page of accounts, newest first."""
        return await self.paginate(pagination, filters.conditions())
