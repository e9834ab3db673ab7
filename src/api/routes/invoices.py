"""Invoice routes."""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import OwnerScope, path_id, require_account
from src.api.schemas.envelope import (
    ERROR_RESPONSES,
    PageOut,
    SuccessEnvelope,
    page_out,
)
from src.api.schemas.invoices import InvoiceCreate, InvoiceOut, InvoiceUpdate
from src.api.utils.responses import success_response
from src.core.pagination import Pagination
from src.infrastructure.database.dependencies import DatabaseSession
from src.infrastructure.database.models import InvoiceStatus
from src.infrastructure.repositories.invoices import (
    InvoiceChanges,
    InvoiceFilter,
    InvoiceRepository,
)

router = APIRouter(
    prefix="/invoices",
    tags=["invoices"],
    dependencies=[Depends(require_account)],
    responses=ERROR_RESPONSES,
)

InvoiceId = Annotated[int, Depends(path_id("Invoice"))]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessEnvelope[InvoiceOut],
)
async def create_invoice(
    payload: InvoiceCreate, db: DatabaseSession, owner_id: OwnerScope
) -> Response:
    """Create an invoice under an existing tax profile."""
    invoice = await InvoiceRepository(db).create_invoice(
        tax_profile_id=payload.tax_profile_id,
        amount=payload.amount,
        status=payload.status,
        issued_at=payload.issued_at,
        owner_id=owner_id,
    )
    await db.commit()
    return success_response(
        InvoiceOut.model_validate(invoice), status_code=status.HTTP_201_CREATED
    )


@router.get("", response_model=SuccessEnvelope[PageOut[InvoiceOut]])
async def list_invoices(
    db: DatabaseSession,
    owner_id: OwnerScope,
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    status_filter: Annotated[InvoiceStatus | None, Query(alias="status")] = None,
    email: Annotated[str | None, Query(max_length=255)] = None,
    min_amount: Annotated[Decimal | None, Query(alias="minAmount", ge=0)] = None,
    max_amount: Annotated[Decimal | None, Query(alias="maxAmount", ge=0)] = None,
) -> Response:
    """List invoices, most recently issued first.

    ``minAmount`` and ``maxAmount`` are inclusive bounds; ``email`` matches
    the owning account's address by substring.
    """
    result = await InvoiceRepository(db).list_invoices(
        Pagination.from_query(page, limit),
        InvoiceFilter(
            status=status_filter,
            email=email,
            min_amount=min_amount,
            max_amount=max_amount,
        ),
        owner_id,
    )
    return success_response(page_out(result, InvoiceOut))


@router.get("/{entity_id}", response_model=SuccessEnvelope[InvoiceOut])
async def get_invoice(
    invoice_id: InvoiceId, db: DatabaseSession, owner_id: OwnerScope
) -> Response:
    """Fetch one invoice."""
    invoice = await InvoiceRepository(db).get(invoice_id, owner_id)
    return success_response(InvoiceOut.model_validate(invoice))


@router.patch("/{entity_id}", response_model=SuccessEnvelope[InvoiceOut])
async def update_invoice(
    invoice_id: InvoiceId,
    payload: InvoiceUpdate,
    db: DatabaseSession,
    owner_id: OwnerScope,
) -> Response:
    """Change any subset of an invoice's fields."""
    changes = InvoiceChanges(**payload.model_dump(exclude_unset=True))  # type: ignore[typeddict-item]
    invoice = await InvoiceRepository(db).update_invoice(invoice_id, changes, owner_id)
    await db.commit()
    return success_response(InvoiceOut.model_validate(invoice))


@router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    invoice_id: InvoiceId, db: DatabaseSession, owner_id: OwnerScope
) -> Response:
    """Delete an invoice."""
    await InvoiceRepository(db).delete(invoice_id, owner_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
