"""Request dependencies: the authentication gate, ownership scope and path IDs.

The security primitives (token service, password hasher) and the settings
they were built from are created once in ``create_app`` and kept on
``app.state``; the dependencies below read them from there.
"""

import re
from collections.abc import Callable
from typing import Annotated, Final

from fastapi import Depends, Path, Request
from loguru import logger

from src.api.constants import AUTHORIZATION_HEADER, BEARER_PREFIX
from src.core.config import Settings
from src.core.constants import MAX_DB_INTEGER
from src.core.exceptions import MissingTokenError, UnauthorizedError, ValidationError
from src.core.security import PasswordHasher, TokenService
from src.infrastructure.database.dependencies import DatabaseSession
from src.services.auth import AuthService

MAX_ID: Final[int] = MAX_DB_INTEGER
ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[0-9]+$")


class AuthGate:
    """Decide whether a request carries a valid session.

    The token is read from ``Authorization: Bearer <token>`` first and from
    the session cookie second.

    Args:
        tokens: Service used to verify tokens.
        cookie_name: Name of the session cookie.
    """

    def __init__(self, tokens: TokenService, cookie_name: str) -> None:
        self.tokens = tokens
        self.cookie_name = cookie_name

    def extract_token(self, request: Request) -> str:
        """Return the raw token presented by ``request``.

        Raises:
            MissingTokenError: Neither the header nor the cookie holds a token.
        """
        header = request.headers.get(AUTHORIZATION_HEADER, "")
        if header.lower().startswith(BEARER_PREFIX):
            if token := header[len(BEARER_PREFIX) :].strip():
                return token

        if token := request.cookies.get(self.cookie_name):
            return token

        raise MissingTokenError

    def authenticate(self, request: Request) -> int:
        """Return the account id of the caller.

        Raises:
            MissingTokenError: No token was presented.
            InvalidTokenError: The token is malformed or forged.
            TokenExpiredError: The token has expired.
        """
        token = self.extract_token(request)
        try:
            return self.tokens.verify(token)
        except UnauthorizedError as e:
            logger.warning(
                "Rejected session token: {}", e.error_code, path=request.url.path
            )
            raise


def get_settings_from_app(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    """The application's token service."""
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    """The application's password hasher."""
    return request.app.state.password_hasher


def get_auth_gate(request: Request) -> AuthGate:
    """The application's authentication gate."""
    return request.app.state.auth_gate


AppSettings = Annotated[Settings, Depends(get_settings_from_app)]
Tokens = Annotated[TokenService, Depends(get_token_service)]
Hasher = Annotated[PasswordHasher, Depends(get_password_hasher)]


async def require_account(
    request: Request, gate: Annotated[AuthGate, Depends(get_auth_gate)]
) -> int:
    """Authenticate the request and record the caller on ``request.state``."""
    account_id = gate.authenticate(request)
    request.state.account_id = account_id
    return account_id


CurrentAccountId = Annotated[int, Depends(require_account)]


async def owner_scope(account_id: CurrentAccountId, settings: AppSettings) -> int | None:
    """Account id to scope owned resources to, or None when scoping is off."""
    return account_id if settings.auth_config.enforce_ownership else None


OwnerScope = Annotated[int | None, Depends(owner_scope)]


def get_auth_service(db: DatabaseSession, hasher: Hasher, tokens: Tokens) -> AuthService:
    """Authentication service bound to the request's session."""
    return AuthService(db, hasher, tokens)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def parse_id(raw: str, entity: str) -> int:
    """Parse a positive integer identifier.

    Raises:
        ValidationError: ``raw`` is not a positive integer in BIGINT range.
    """
    if ID_PATTERN.fullmatch(raw):
        value = int(raw)
        if 1 <= value <= MAX_ID:
            return value
    raise ValidationError(
        f"Invalid {entity} ID format. Must be a positive integer.",
        context={
            "details": [
                {
                    "field": "id",
                    "message": "must be a positive integer",
                    "type": "int_parsing",
                }
            ]
        },
    )


def path_id(entity: str) -> Callable[[str], int]:
    """Build a dependency reading the ``{entity_id}`` path segment.

    Malformed identifiers fail with 400, distinct from the 404 of a
    well-formed identifier that matches nothing.
    """

    def dependency(entity_id: Annotated[str, Path()]) -> int:
        return parse_id(entity_id, entity)

    return dependency
