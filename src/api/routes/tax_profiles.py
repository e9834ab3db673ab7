"""Tax profile routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import (
    AppSettings,
    CurrentAccountId,
    OwnerScope,
    path_id,
    require_account,
)
from src.api.schemas.envelope import (
    ERROR_RESPONSES,
    PageOut,
    SuccessEnvelope,
    page_out,
)
from src.api.schemas.tax_profiles import (
    TaxProfileCreate,
    TaxProfileOut,
    TaxProfileUpdate,
)
from src.api.utils.responses import success_response
from src.core.exceptions import NotFoundError
from src.core.pagination import Pagination
from src.infrastructure.database.dependencies import DatabaseSession
from src.infrastructure.repositories.tax_profiles import (
    TaxProfileChanges,
    TaxProfileFilter,
    TaxProfileRepository,
)

router = APIRouter(
    prefix="/taxProfiles",
    tags=["tax profiles"],
    dependencies=[Depends(require_account)],
    responses=ERROR_RESPONSES,
)

ProfileId = Annotated[int, Depends(path_id("Tax profile"))]


def _target_account(
    requested: int | None, caller_id: int, settings: AppSettings
) -> int:
    """Account a profile is attached to; others' accounts look missing."""
    if requested is None:
        return caller_id
    if settings.auth_config.enforce_ownership and requested != caller_id:
        raise NotFoundError("Account not found", context={"entity_id": requested})
    return requested


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessEnvelope[TaxProfileOut],
)
async def create_tax_profile(
    payload: TaxProfileCreate,
    caller_id: CurrentAccountId,
    db: DatabaseSession,
    settings: AppSettings,
) -> Response:
    """Create a tax profile, attached to the caller unless ``userId`` is given."""
    profile = await TaxProfileRepository(db).create_profile(
        account_id=_target_account(payload.user_id, caller_id, settings),
        name=payload.name,
        tax_id_number=payload.tax_id_number,
        address=payload.address,
    )
    await db.commit()
    return success_response(
        TaxProfileOut.model_validate(profile), status_code=status.HTTP_201_CREATED
    )


@router.get("", response_model=SuccessEnvelope[PageOut[TaxProfileOut]])
async def list_tax_profiles(
    db: DatabaseSession,
    owner_id: OwnerScope,
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    name: Annotated[str | None, Query(max_length=255)] = None,
    user_id: Annotated[int | None, Query(alias="userId", gt=0)] = None,
    tax_id_number: Annotated[str | None, Query(max_length=30)] = None,
) -> Response:
    """List tax profiles, newest first."""
    result = await TaxProfileRepository(db).list_profiles(
        Pagination.from_query(page, limit),
        TaxProfileFilter(name=name, account_id=user_id, tax_id_number=tax_id_number),
        owner_id,
    )
    return success_response(page_out(result, TaxProfileOut))


@router.get("/{entity_id}", response_model=SuccessEnvelope[TaxProfileOut])
async def get_tax_profile(
    profile_id: ProfileId, db: DatabaseSession, owner_id: OwnerScope
) -> Response:
    """Fetch one tax profile."""
    profile = await TaxProfileRepository(db).get(profile_id, owner_id)
    return success_response(TaxProfileOut.model_validate(profile))


@router.patch("/{entity_id}", response_model=SuccessEnvelope[TaxProfileOut])
async def update_tax_profile(
    profile_id: ProfileId,
    payload: TaxProfileUpdate,
    caller_id: CurrentAccountId,
    owner_id: OwnerScope,
    db: DatabaseSession,
    settings: AppSettings,
) -> Response:
    """Change any subset of a tax profile's fields."""
    fields = payload.model_dump(exclude_unset=True)
    changes = TaxProfileChanges()
    if "user_id" in fields:
        changes["account_id"] = _target_account(fields["user_id"], caller_id, settings)
    for key in ("name", "tax_id_number", "address"):
        if key in fields:
            changes[key] = fields[key]  # type: ignore[literal-required]

    profile = await TaxProfileRepository(db).update_profile(
        profile_id, changes, owner_id
    )
    await db.commit()
    return success_response(TaxProfileOut.model_validate(profile))


@router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tax_profile(
    profile_id: ProfileId, db: DatabaseSession, owner_id: OwnerScope
) -> Response:
    """Delete a tax profile together with its invoices."""
    await TaxProfileRepository(db).delete(profile_id, owner_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
