"""Entity repositories and their list filters."""

from src.infrastructure.repositories.accounts import AccountFilter, AccountRepository
from src.infrastructure.repositories.invoices import InvoiceFilter, InvoiceRepository
from src.infrastructure.repositories.tax_profiles import (
    TaxProfileFilter,
    TaxProfileRepository,
)

__all__ = [
    "AccountFilter",
    "AccountRepository",
    "InvoiceFilter",
    "InvoiceRepository",
    "TaxProfileFilter",
    "TaxProfileRepository",
]
