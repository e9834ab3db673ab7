"""Account directory: create, list, read, update and delete accounts.

Any authenticated caller may list, read and create accounts. With
ownership enforcement on, an account may only update or delete itself.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import (
    AppSettings,
    CurrentAccountId,
    Hasher,
    path_id,
    require_account,
)
from src.api.schemas.accounts import AccountCreate, AccountOut, AccountUpdate
from src.api.schemas.envelope import (
    ERROR_RESPONSES,
    PageOut,
    SuccessEnvelope,
    page_out,
)
from src.api.utils.responses import success_response
from src.core.exceptions import NotFoundError
from src.core.pagination import Pagination
from src.infrastructure.database.dependencies import DatabaseSession
from src.infrastructure.repositories.accounts import (
    AccountChanges,
    AccountFilter,
    AccountRepository,
)

router = APIRouter(
    prefix="/user",
    tags=["accounts"],
    dependencies=[Depends(require_account)],
    responses=ERROR_RESPONSES,
)

AccountId = Annotated[int, Depends(path_id("User"))]


def _require_self(account_id: int, caller_id: int, settings: AppSettings) -> None:
    if settings.auth_config.enforce_ownership and account_id != caller_id:
        raise NotFoundError("Account not found", context={"entity_id": account_id})


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessEnvelope[AccountOut],
    responses={409: {"description": "Email already used"}},
)
async def create_account(
    payload: AccountCreate, db: DatabaseSession, hasher: Hasher
) -> Response:
    """Create an account without signing in as it."""
    account = await AccountRepository(db).create_account(
        email=payload.email,
        password_hash=await hasher.hash_async(payload.password),
        name=payload.name,
    )
    await db.commit()
    return success_response(
        AccountOut.model_validate(account), status_code=status.HTTP_201_CREATED
    )


@router.get("", response_model=SuccessEnvelope[PageOut[AccountOut]])
async def list_accounts(
    db: DatabaseSession,
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    email: Annotated[str | None, Query(max_length=255)] = None,
    name: Annotated[str | None, Query(max_length=255)] = None,
) -> Response:
    """List accounts, newest first, filtered by e-mail or name substring."""
    result = await AccountRepository(db).list_accounts(
        Pagination.from_query(page, limit), AccountFilter(email=email, name=name)
    )
    return success_response(page_out(result, AccountOut))


@router.get("/{entity_id}", response_model=SuccessEnvelope[AccountOut])
async def get_account(account_id: AccountId, db: DatabaseSession) -> Response:
    """Fetch one account."""
    account = await AccountRepository(db).get(account_id)
    return success_response(AccountOut.model_validate(account))


@router.patch("/{entity_id}", response_model=SuccessEnvelope[AccountOut])
async def update_account(
    account_id: AccountId,
    payload: AccountUpdate,
    caller_id: CurrentAccountId,
    db: DatabaseSession,
    hasher: Hasher,
    settings: AppSettings,
) -> Response:
    """Change the name or password of an account."""
    _require_self(account_id, caller_id, settings)

    changes = AccountChanges()
    if payload.name is not None:
        changes["name"] = payload.name
    if payload.password is not None:
        changes["password_hash"] = await hasher.hash_async(payload.password)

    account = await AccountRepository(db).update_account(account_id, changes)
    await db.commit()
    return success_response(AccountOut.model_validate(account))


@router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    account_id: AccountId,
    caller_id: CurrentAccountId,
    db: DatabaseSession,
    settings: AppSettings,
) -> Response:
    """Delete an account together with its tax profiles and their invoices."""
    _require_self(account_id, caller_id, settings)
    await AccountRepository(db).delete(account_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
