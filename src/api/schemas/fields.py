"""Reusable annotated field types for request and response models."""

import re
from datetime import UTC, datetime
from decimal import Decimal
from typing import Annotated, Any, Final

from pydantic import AfterValidator, BeforeValidator, PlainSerializer, StringConstraints

from src.core.constants import BCRYPT_MAX_PASSWORD_BYTES, MIN_PASSWORD_LENGTH
from src.infrastructure.constants import AMOUNT_PRECISION, AMOUNT_SCALE

AMOUNT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\d+(\.\d{1,2})?$")
MAX_INTEGER_DIGITS: Final[int] = AMOUNT_PRECISION - AMOUNT_SCALE


def _parse_amount(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        value = str(value)
    if not isinstance(value, str):
        msg = "must be a decimal string such as '100.50'"
        raise ValueError(msg)  # noqa: TRY004 - pydantic expects ValueError
    if not AMOUNT_PATTERN.fullmatch(value):
        msg = "must be a non-negative decimal with at most 2 fractional digits"
        raise ValueError(msg)
    integer_part = value.split(".", 1)[0].lstrip("0")
    if len(integer_part) > MAX_INTEGER_DIGITS:
        msg = f"must have at most {MAX_INTEGER_DIGITS} integer digits"
        raise ValueError(msg)
    return Decimal(value)


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        msg = f"must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
        raise ValueError(msg)
    return value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# Exact decimal money. Accepted only as text so binary floats never enter.
type Amount = Annotated[Decimal, BeforeValidator(_parse_amount)]

# Money on the way out: always two fractional digits, always a string.
type AmountOut = Annotated[
    Decimal, PlainSerializer(lambda d: f"{d:.2f}", return_type=str)
]

type Password = Annotated[
    str,
    StringConstraints(min_length=MIN_PASSWORD_LENGTH),
    AfterValidator(_check_password_bytes),
]

type UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

type PersonName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)
]
