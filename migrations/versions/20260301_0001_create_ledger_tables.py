"""Create accounts, tax_profiles and invoices

Revision ID: 0001
Revises:
Create Date: 2026-03-01
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ID = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamps() -> list[sa.Column[sa.DateTime]]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create the three tables with cascading foreign keys."""
    op.create_table(
        "accounts",
        sa.Column("id", ID, autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_accounts"),
        sa.UniqueConstraint("email", name="uq_accounts_email"),
    )

    op.create_table(
        "tax_profiles",
        sa.Column("id", ID, autoincrement=True, nullable=False),
        sa.Column("account_id", ID, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("tax_id_number", sa.String(length=30), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_tax_profiles"),
        sa.ForeignKeyConstraint(
            ["account_id"],
            ["accounts.id"],
            name="fk_tax_profiles_account_id_accounts",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_tax_profiles_account_id", "tax_profiles", ["account_id"]
    )

    op.create_table(
        "invoices",
        sa.Column("id", ID, autoincrement=True, nullable=False),
        sa.Column("tax_profile_id", ID, nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column(
            "issued_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_invoices"),
        sa.ForeignKeyConstraint(
            ["tax_profile_id"],
            ["tax_profiles.id"],
            name="fk_invoices_tax_profile_id_tax_profiles",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint(
            "status IN ('draft', 'sent', 'paid')", name="ck_invoices_status_valid"
        ),
        sa.CheckConstraint("amount >= 0", name="ck_invoices_amount_non_negative"),
    )
    op.create_index(
        "ix_invoices_tax_profile_id", "invoices", ["tax_profile_id"]
    )


def downgrade() -> None:
    """Drop the tables, children first."""
    op.drop_index("ix_invoices_tax_profile_id", table_name="invoices")
    op.drop_table("invoices")
    op.drop_index("ix_tax_profiles_account_id", table_name="tax_profiles")
    op.drop_table("tax_profiles")
    op.drop_table("accounts")
