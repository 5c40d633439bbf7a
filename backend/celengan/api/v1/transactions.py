"""Transaction API endpoints."""

import io
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from celengan.dependencies import get_current_user, get_db
from celengan.models.transaction import TransactionType
from celengan.models.user import User
from celengan.schemas.transaction import (
    TransactionCreate,
    TransactionListResponse,
    TransactionResponse,
    TransactionUpdate,
)
from celengan.services.allocation_service import allocation_service
from celengan.services.errors import NotFoundError, ValidationError
from celengan.services.transaction_service import transaction_service
from celengan.utils.datetime_utils import utc_now

router = APIRouter()


@router.get("/", response_model=TransactionListResponse)
async def list_transactions(
    type: Optional[TransactionType] = None,
    category_id: Optional[UUID] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=2100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List transactions, newest first, with optional type/category/month filters."""
    transactions = await transaction_service.get_transactions(
        db=db,
        user=current_user,
        type=type,
        category_id=category_id,
        month=month,
        year=year,
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        total=len(transactions),
    )


@router.post("/", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    transaction_data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a transaction.

    Income may pass ``target_id`` and ``allocation_percentage`` to route part
    of the amount to a savings target in the same database transaction.
    """
    try:
        transaction, _ = await allocation_service.create_transaction_with_allocation(
            db=db,
            user=current_user,
            **transaction_data.model_dump(),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return transaction


@router.get("/export")
async def export_transactions_csv(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=2100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Export transactions as CSV."""
    transactions = await transaction_service.get_transactions(
        db=db, user=current_user, month=month, year=year
    )
    content = transaction_service.to_csv(transactions)
    filename = f"transactions_{utc_now().strftime('%Y%m%d')}.csv"

    return StreamingResponse(
        io.StringIO(content),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a single transaction."""
    transaction = await transaction_service.get_transaction(db, transaction_id, current_user)

    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")

    return transaction


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: UUID,
    transaction_data: TransactionUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a transaction. Existing allocations are not recomputed."""
    try:
        transaction = await transaction_service.update_transaction(
            db=db,
            transaction_id=transaction_id,
            user=current_user,
            **transaction_data.model_dump(exclude_unset=True),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")

    return transaction


@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a transaction and its allocation record."""
    deleted = await transaction_service.delete_transaction(db, transaction_id, current_user)

    if not deleted:
        raise HTTPException(status_code=404, detail="Transaction not found")
