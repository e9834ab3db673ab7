"""Tax profile persistence."""

from dataclasses import dataclass
from typing import TypedDict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.core.pagination import Page, Pagination
from src.infrastructure.database.models import Account, TaxProfile
from src.infrastructure.database.repository import BaseRepository, Condition


class TaxProfileChanges(TypedDict, total=False):
    """Fields of a tax profile that a partial update may set."""

    account_id: int
    name: str
    tax_id_number: str
    address: str


@dataclass(frozen=True, slots=True)
class TaxProfileFilter:
    """Filters for listing tax profiles.

    ``name`` and ``tax_id_number`` match case-insensitive substrings;
    ``account_id`` matches exactly.
    """

    name: str | None = None
    account_id: int | None = None
    tax_id_number: str | None = None

    def conditions(self) -> list[Condition]:
        """Translate the set fields into SQL conditions."""
        conditions: list[Condition] = []
        if self.name:
            conditions.append(TaxProfile.name.icontains(self.name, autoescape=True))
        if self.account_id is not None:
            conditions.append(TaxProfile.account_id == self.account_id)
        if self.tax_id_number:
            conditions.append(
                TaxProfile.tax_id_number.icontains(self.tax_id_number, autoescape=True)
            )
        return conditions


class TaxProfileRepository(BaseRepository[TaxProfile]):
    """Repository for tax profiles, optionally scoped to the owning account."""

    entity_name = "Tax profile"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, TaxProfile)

    def owner_conditions(self, owner_id: int) -> list[Condition]:
        return [TaxProfile.account_id == owner_id]

    async def _require_account(self, account_id: int) -> None:
        try:
            account = await self.session.get(Account, account_id)
        except SQLAlchemyError as e:
            raise self._translate(e) from e
        if account is None:
            raise NotFoundError("Account not found", context={"entity_id": account_id})

    async def create_profile(
        self, account_id: int, name: str, tax_id_number: str, address: str
    ) -> TaxProfile:
        """Insert a tax profile under ``account_id``.

        Raises:
            NotFoundError: The account does not exist.
        """
        await self._require_account(account_id)
        return await self.create(
            TaxProfile(
                account_id=account_id,
                name=name,
                tax_id_number=tax_id_number,
                address=address,
            )
        )

    async def update_profile(
        self,
        profile_id: int,
        changes: TaxProfileChanges,
        owner_id: int | None = None,
    ) -> TaxProfile:
        """Apply a partial update to a tax profile.

        Raises:
            NotFoundError: The profile, or a newly referenced account, does
                not exist.
        """
        if "account_id" in changes:
            await self._require_account(changes["account_id"])
        return await self.update(profile_id, changes, owner_id)

    async def list_profiles(
        self,
        pagination: Pagination,
        filters: TaxProfileFilter,
        owner_id: int | None = None,
    ) -> Page[TaxProfile]:
        """One page of tax profiles, newest first."""
        return await self.paginate(pagination, filters.conditions(), owner_id)
