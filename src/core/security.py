"""Credential hashing and session token handling.

``PasswordHasher`` wraps bcrypt; ``TokenService`` issues and verifies the
HS256 session tokens handed out at login. Both are built once from
``Settings`` in ``create_app`` and shared through ``app.state``.
"""

from datetime import UTC, datetime, timedelta

import bcrypt
import jwt
from loguru import logger
from starlette.concurrency import run_in_threadpool

from src.core.exceptions import InvalidTokenError, TokenExpiredError


class PasswordHasher:
    """Salted, deliberately slow one-way password hashing.

    Args:
        rounds: bcrypt cost factor. Each increment doubles the hashing time.
    """

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds
        # Verified against when an e-mail is unknown, so a failed login costs
        # the same whether or not the account exists.
        self._dummy_hash = self.hash("timing-equalization-placeholder")

    def hash(self, password: str) -> str:
        """Return a bcrypt hash of ``password`` with a fresh random salt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check ``password`` against ``password_hash`` in constant time.

        Malformed hashes never raise; they simply do not match.
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False

    def burn(self, password: str) -> None:
        """Spend one verification worth of time without a real hash."""
        self.verify(password, self._dummy_hash)

    # Variants for async code: bcrypt blocks for the whole cost factor.

    async def hash_async(self, password: str) -> str:
        """Hash ``password`` in the worker thread pool."""
        return await run_in_threadpool(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        """Verify ``password`` in the worker thread pool."""
        return await run_in_threadpool(self.verify, password, password_hash)

    async def burn_async(self, password: str) -> None:
        """Burn one verification in the worker thread pool."""
        await run_in_threadpool(self.burn, password)


class TokenService:
    """Issue and verify signed, expiring session tokens.

    Tokens carry the account id as the ``sub`` claim together with ``iat``
    and ``exp``. There is no server-side revocation: a token stays valid
    until it expires, even after logout.

    Args:
        secret: HMAC signing secret.
        expire_seconds: Token lifetime.
        algorithm: JWS algorithm, one of the HMAC family.
    """

    def __init__(
        self, secret: str, expire_seconds: int = 3600, algorithm: str = "HS256"
    ) -> None:
        self._secret = secret
        self.expire_seconds = expire_seconds
        self.algorithm = algorithm

    def issue(self, account_id: int, now: datetime | None = None) -> str:
        """Sign a token for ``account_id`` valid for ``expire_seconds``."""
        issued_at = now or datetime.now(UTC)
        payload = {
            "sub": str(account_id),
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.expire_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        """Return the account id carried by ``token``.

        Raises:
            TokenExpiredError: The signature is valid but ``exp`` has passed.
            InvalidTokenError: Anything else is wrong with the token.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError(cause=e) from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(cause=e) from e

        subject = payload["sub"]
        if not isinstance(subject, str) or not subject.isdigit() or int(subject) < 1:
            raise InvalidTokenError
        return int(subject)
