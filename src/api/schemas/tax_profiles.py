"""Tax profile request and response models."""

from typing import Annotated, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    StringConstraints,
    model_validator,
)

from src.api.schemas.accounts import reject_explicit_nulls
from src.api.schemas.fields import UtcDatetime

type ProfileName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)
]
type TaxIdNumber = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, min_length=5, max_length=30, pattern=r"^[A-Za-z0-9-]+$"
    ),
]
type Address = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=10, max_length=255)
]


class TaxProfileCreate(BaseModel):
    """Payload for creating a tax profile.

    ``userId`` defaults to the authenticated account.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: PositiveInt | None = Field(default=None, alias="userId")
    name: ProfileName
    tax_id_number: TaxIdNumber
    address: Address


class TaxProfileUpdate(BaseModel):
    """Partial update of a tax profile."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    user_id: PositiveInt | None = Field(default=None, alias="userId")
    name: ProfileName | None = None
    tax_id_number: TaxIdNumber | None = None
    address: Address | None = None

    @model_validator(mode="after")
    def _no_nulls(self) -> Self:
        return reject_explicit_nulls(self)


class TaxProfileOut(BaseModel):
    """Public view of a tax profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int = Field(
        ..., validation_alias="account_id", serialization_alias="userId"
    )
    name: str
    tax_id_number: str
    address: str
    created_at: UtcDatetime = Field(..., serialization_alias="createdAt")
    updated_at: UtcDatetime = Field(..., serialization_alias="updatedAt")
