"""Invoice request and response models."""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

from src.api.schemas.accounts import reject_explicit_nulls
from src.api.schemas.fields import Amount, AmountOut, UtcDatetime
from src.infrastructure.database.models import InvoiceStatus


class InvoiceCreate(BaseModel):
    """Payload for creating an invoice.

    ``amount`` must be sent as a string (``"100.50"``). ``issuedAt``
    defaults to the creation time.
    """

    model_config = ConfigDict(populate_by_name=True)

    tax_profile_id: PositiveInt = Field(..., alias="taxProfileId")
    amount: Amount
    status: InvoiceStatus = InvoiceStatus.DRAFT
    issued_at: UtcDatetime | None = Field(default=None, alias="issuedAt")


class InvoiceUpdate(BaseModel):
    """Partial update of an invoice."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    tax_profile_id: PositiveInt | None = Field(default=None, alias="taxProfileId")
    amount: Amount | None = None
    status: InvoiceStatus | None = None
    issued_at: UtcDatetime | None = Field(default=None, alias="issuedAt")

    @model_validator(mode="after")
    def _no_nulls(self) -> Self:
        return reject_explicit_nulls(self)


class InvoiceOut(BaseModel):
    """Public view of an invoice. ``amount`` is a two-decimal string."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tax_profile_id: int = Field(..., serialization_alias="taxProfileId")
    amount: AmountOut
    status: InvoiceStatus
    issued_at: UtcDatetime = Field(..., serialization_alias="issuedAt")
    created_at: UtcDatetime = Field(..., serialization_alias="createdAt")
    updated_at: UtcDatetime = Field(..., serialization_alias="updatedAt")
