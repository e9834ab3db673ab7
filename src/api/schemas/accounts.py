"""Account request and response models."""

from typing import Self

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from src.api.schemas.fields import Password, PersonName, UtcDatetime


def reject_explicit_nulls[M: BaseModel](model: M) -> M:
    """Fail validation when a partial update sets a field to null.

    Omitted fields mean "leave unchanged"; null never clears a value.
    """
    nulls = sorted(
        name for name in model.model_fields_set if getattr(model, name) is None
    )
    if nulls:
        msg = f"fields may be omitted but not null: {', '.join(nulls)}"
        raise ValueError(msg)
    return model


class AccountCreate(BaseModel):
    """Payload for creating an account (also used by registration)."""

    email: EmailStr
    password: Password
    name: PersonName


class AccountUpdate(BaseModel):
    """Partial update of an account. The e-mail cannot be changed."""

    model_config = ConfigDict(extra="forbid")

    name: PersonName | None = None
    password: Password | None = None

    @model_validator(mode="after")
    def _no_nulls(self) -> Self:
        return reject_explicit_nulls(self)


class AccountOut(BaseModel):
    """Public view of an account. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    created_at: UtcDatetime = Field(..., serialization_alias="createdAt")
    updated_at: UtcDatetime = Field(..., serialization_alias="updatedAt")


class AccountSummary(BaseModel):
    """The account fields returned alongside a session token."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
