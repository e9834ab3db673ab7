"""Page/limit normalization shared by every list endpoint."""

import math
from dataclasses import dataclass
from typing import Self

from src.core.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_DB_INTEGER,
    MAX_PAGE_SIZE,
)


def _parse_positive(raw: str | int | None) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, int):
        value = raw
    else:
        text = raw.strip()
        # isdigit() also accepts superscripts and other digits int() rejects
        if not (text.isascii() and text.isdecimal()):
            return None
        value = int(text)
    return value if value >= 1 else None


@dataclass(frozen=True, slots=True)
class Pagination:
    """A validated page request.

    Use ``from_query`` to build one from untrusted query parameters; it
    never fails. Garbage or non-positive values fall back to the defaults
    and ``limit`` is silently capped at ``MAX_PAGE_SIZE``. ``page`` is
    capped so that ``skip`` still fits a 64-bit database integer.
    """

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_query(cls, page: str | int | None, limit: str | int | None) -> Self:
        """Normalize raw ``page`` and ``limit`` query values."""
        parsed_limit = min(_parse_positive(limit) or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
        parsed_page = _parse_positive(page) or DEFAULT_PAGE
        return cls(
            page=min(parsed_page, cls.max_page(parsed_limit)), limit=parsed_limit
        )

    @staticmethod
    def max_page(limit: int) -> int:
        """Highest page whose offset the database can still represent."""
        return MAX_DB_INTEGER // limit + 1

    @property
    def skip(self) -> int:
        """Number of rows before the first row of this page."""
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        """Number of pages needed to show ``total`` rows."""
        return math.ceil(total / self.limit) if total else 0


@dataclass(frozen=True, slots=True)
class Page[T]:
    """One page of results plus the unpaginated total."""

    items: list[T]
    pagination: Pagination
    total: int

    @property
    def total_pages(self) -> int:
        """Number of pages for the current total."""
        return self.pagination.total_pages(self.total)
