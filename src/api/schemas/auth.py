"""Authentication request and response models."""

from pydantic import BaseModel, EmailStr, Field

from src.api.schemas.accounts import AccountCreate, AccountSummary


class RegisterRequest(AccountCreate):
    """Registration payload: e-mail, password (12+ characters) and name."""


class LoginRequest(BaseModel):
    """Login payload.

    The password length rule is not repeated here so that a short password
    fails like any other wrong password.
    """

    email: EmailStr
    password: str = Field(..., min_length=1)


class SessionOut(BaseModel):
    """A session token and the account it belongs to."""

    token: str
    user: AccountSummary
