"""Registration and login.

Both operations end with a freshly issued session token. Login failures
are deliberately uniform: an unknown e-mail and a wrong password produce
the same error after the same amount of bcrypt work.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import UnauthorizedError
from src.core.observability import trace_operation
from src.core.security import PasswordHasher, TokenService
from src.infrastructure.database.models import Account
from src.infrastructure.repositories.accounts import AccountRepository

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(frozen=True, slots=True)
class Session:
    """An authenticated account and the token proving it."""

    account: Account
    token: str


class AuthService:
    """Authentication use-cases over the account store."""

    def __init__(
        self, session: AsyncSession, hasher: PasswordHasher, tokens: TokenService
    ) -> None:
        self.accounts = AccountRepository(session)
        self.hasher = hasher
        self.tokens = tokens

    async def register(self, email: str, password: str, name: str) -> Session:
        """Create an account and sign it in.

        Raises:
            ConflictError: The e-mail is already registered.
        """
        with trace_operation("auth.register"):
            account = await self.accounts.create_account(
                email=email,
                password_hash=await self.hasher.hash_async(password),
                name=name,
            )
        return Session(account=account, token=self.tokens.issue(account.id))

    async def login(self, email: str, password: str) -> Session:
        """Check credentials and issue a session token.

        Raises:
            UnauthorizedError: The e-mail is unknown or the password is wrong.
        """
        with trace_operation("auth.login"):
            account = await self.accounts.get_by_email(email)
            if account is None:
                await self.hasher.burn_async(password)
                logger.warning("Login failed: unknown e-mail")
                raise UnauthorizedError(INVALID_CREDENTIALS)

            if not await self.hasher.verify_async(password, account.password_hash):
                logger.warning("Login failed: wrong password for account {}", account.id)
                raise UnauthorizedError(INVALID_CREDENTIALS)

        logger.info("Account {} logged in", account.id)
        return Session(account=account, token=self.tokens.issue(account.id))
