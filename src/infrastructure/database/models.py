"""Account, tax profile and invoice tables.

Ownership runs Account -> TaxProfile -> Invoice. Both foreign keys are
``ON DELETE CASCADE`` so deleting an account removes its tax profiles and
their invoices in the same statement, enforced by the database.
"""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.constants import (
    ADDRESS_MAX_LENGTH,
    AMOUNT_PRECISION,
    AMOUNT_SCALE,
    EMAIL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    TAX_ID_MAX_LENGTH,
)
from src.infrastructure.database.base import BaseModel

ForeignIdType = BigInteger().with_variant(Integer(), "sqlite")


class InvoiceStatus(StrEnum):
    """Lifecycle state of an invoice."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"


class Account(BaseModel):
    """A registered user. Owns tax profiles."""

    __tablename__ = "accounts"

    email: Mapped[str] = mapped_column(
        String(EMAIL_MAX_LENGTH), unique=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)

    tax_profiles: Mapped[list["TaxProfile"]] = relationship(
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TaxProfile(BaseModel):
    """A billing identity belonging to one account. Owns invoices."""

    __tablename__ = "tax_profiles"

    account_id: Mapped[int] = mapped_column(
        ForeignIdType,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    tax_id_number: Mapped[str] = mapped_column(
        String(TAX_ID_MAX_LENGTH), nullable=False
    )
    address: Mapped[str] = mapped_column(String(ADDRESS_MAX_LENGTH), nullable=False)

    account: Mapped[Account] = relationship(back_populates="tax_profiles")
    invoices: Mapped[list["Invoice"]] = relationship(
        back_populates="tax_profile",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Invoice(BaseModel):
    """A monetary document issued under a tax profile."""

    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'sent', 'paid')",
            name="status_valid",
        ),
        CheckConstraint("amount >= 0", name="amount_non_negative"),
    )

    tax_profile_id: Mapped[int] = mapped_column(
        ForeignIdType,
        ForeignKey("tax_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(AMOUNT_PRECISION, AMOUNT_SCALE, asdecimal=True), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=InvoiceStatus.DRAFT.value
    )
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    tax_profile: Mapped[TaxProfile] = relationship(back_populates="invoices")
