"""Invoice persistence."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TypedDict

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.core.pagination import Page, Pagination
from src.infrastructure.database.models import Account, Invoice, TaxProfile
from src.infrastructure.database.repository import BaseRepository, Condition
from src.infrastructure.repositories.tax_profiles import TaxProfileRepository


class InvoiceChanges(TypedDict, total=False):
    """Fields of an invoice that a partial update may set."""

    tax_profile_id: int
    amount: Decimal
    status: str
    issued_at: datetime


def _profiles_of(account_id: int) -> Condition:
    return Invoice.tax_profile_id.in_(
        select(TaxProfile.id).where(TaxProfile.account_id == account_id)
    )


@dataclass(frozen=True, slots=True)
class InvoiceFilter:
    """Filters for listing invoices.

    ``email`` matches a case-insensitive substring of the owning account's
    e-mail, reached through the tax profile. The amount bounds are
    inclusive.
    """

    status: str | None = None
    email: str | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None

    def conditions(self) -> list[Condition]:
        """Translate the set fields into SQL conditions."""
        conditions: list[Condition] = []
        if self.status:
            conditions.append(Invoice.status == self.status)
        if self.email:
            conditions.append(
                Invoice.tax_profile_id.in_(
                    select(TaxProfile.id)
                    .join(Account, TaxProfile.account_id == Account.id)
                    .where(Account.email.icontains(self.email, autoescape=True))
                )
            )
        if self.min_amount is not None:
            conditions.append(Invoice.amount >= self.min_amount)
        if self.max_amount is not None:
            conditions.append(Invoice.amount <= self.max_amount)
        return conditions


class InvoiceRepository(BaseRepository[Invoice]):
    """Repository for invoices, optionally scoped to the owning account."""

    entity_name = "Invoice"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Invoice)

    def owner_conditions(self, owner_id: int) -> list[Condition]:
        return [_profiles_of(owner_id)]

    def order_by(self) -> Sequence[ColumnElement[object]]:
        return (Invoice.issued_at.desc(), Invoice.id.desc())

    async def _require_profile(self, profile_id: int, owner_id: int | None) -> None:
        if not await TaxProfileRepository(self.session).exists(profile_id, owner_id):
            raise NotFoundError(
                "Tax profile not found", context={"entity_id": profile_id}
            )

    async def create_invoice(
        self,
        tax_profile_id: int,
        amount: Decimal,
        status: str,
        issued_at: datetime | None = None,
        owner_id: int | None = None,
    ) -> Invoice:
        """Insert an invoice under ``tax_profile_id``.

        ``issued_at`` defaults to the insertion time.

        Raises:
            NotFoundError: The tax profile does not exist or is not visible
                to ``owner_id``.
        """
        await self._require_profile(tax_profile_id, owner_id)
        invoice = Invoice(tax_profile_id=tax_profile_id, amount=amount, status=status)
        if issued_at is not None:
            invoice.issued_at = issued_at
        return await self.create(invoice)

    async def update_invoice(
        self,
        invoice_id: int,
        changes: InvoiceChanges,
        owner_id: int | None = None,
    ) -> Invoice:
        """Apply a partial update to an invoice.

        Raises:
            NotFoundError: The invoice, or a newly referenced tax profile,
                does not exist or is not visible to ``owner_id``.
        """
        invoice = await self.get(invoice_id, owner_id)
        if "tax_profile_id" in changes:
            await self._require_profile(changes["tax_profile_id"], owner_id)
        return await self.apply(invoice, changes)

    async def list_invoices(
        self,
        pagination: Pagination,
        filters: InvoiceFilter,
        owner_id: int | None = None,
    ) -> Page[Invoice]:
        """One page of invoices, most recently issued first."""
        return await self.paginate(pagination, filters.conditions(), owner_id)
