"""Registration, login and logout."""

from fastapi import APIRouter, Response, status
from loguru import logger

from src.api.dependencies import AppSettings, AuthServiceDep, CurrentAccountId
from src.api.schemas.accounts import AccountSummary
from src.api.schemas.auth import LoginRequest, RegisterRequest, SessionOut
from src.api.schemas.envelope import ERROR_RESPONSES, MessageOut, SuccessEnvelope
from src.api.utils.responses import success_response
from src.core.config import Settings
from src.infrastructure.database.dependencies import DatabaseSession
from src.services.auth import Session

router = APIRouter(prefix="/auth", tags=["auth"], responses=ERROR_RESPONSES)


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the session token as an HTTP-only, same-site cookie."""
    auth = settings.auth_config
    response.set_cookie(
        key=auth.cookie_name,
        value=token,
        max_age=auth.token_expire_seconds,
        httponly=True,
        secure=bool(auth.secure_cookies),
        samesite="strict",
        path="/",
    )


def _session_response(session: Session, status_code: int, settings: Settings) -> Response:
    body = SessionOut(
        token=session.token, user=AccountSummary.model_validate(session.account)
    )
    response = success_response(body, status_code=status_code)
    set_session_cookie(response, session.token, settings)
    return response


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessEnvelope[SessionOut],
    responses={409: {"description": "Email already used"}},
)
async def register(
    payload: RegisterRequest,
    service: AuthServiceDep,
    db: DatabaseSession,
    settings: AppSettings,
) -> Response:
    """Create an account and start a session for it."""
    session = await service.register(payload.email, payload.password, payload.name)
    await db.commit()
    return _session_response(session, status.HTTP_201_CREATED, settings)


@router.post("/login", response_model=SuccessEnvelope[SessionOut])
async def login(
    payload: LoginRequest, service: AuthServiceDep, settings: AppSettings
) -> Response:
    """Exchange e-mail and password for a session token."""
    session = await service.login(payload.email, payload.password)
    return _session_response(session, status.HTTP_200_OK, settings)


@router.post("/logout", response_model=SuccessEnvelope[MessageOut])
async def logout(account_id: CurrentAccountId, settings: AppSettings) -> Response:
    """Clear the session cookie.

    The token itself stays valid until it expires.
    """
    response = success_response(MessageOut(message="Logged out"))
    auth = settings.auth_config
    response.delete_cookie(
        key=auth.cookie_name,
        path="/",
        httponly=True,
        secure=bool(auth.secure_cookies),
        samesite="strict",
    )
    logger.info("Account {} logged out", account_id)
    return response
