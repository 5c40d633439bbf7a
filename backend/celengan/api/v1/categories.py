"""Category API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from celengan.dependencies import get_current_user, get_db
from celengan.models.transaction import TransactionType
from celengan.models.user import User
from celengan.schemas.transaction import CategoryCreate, CategoryResponse, CategoryUpdate
from celengan.services.category_service import category_service
from celengan.services.errors import ValidationError

router = APIRouter()


@router.get("/", response_model=List[CategoryResponse])
async def list_categories(
    type: Optional[TransactionType] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the user's categories, optionally filtered by type."""
    return await category_service.get_categories(db=db, user=current_user, type=type)


@router.post("/", response_model=CategoryResponse, status_code=201)
async def create_category(
    category_data: CategoryCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a category. Color and icon fall back to defaults."""
    return await category_service.create_category(
        db=db,
        user=current_user,
        **category_data.model_dump(),
    )


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    category_data: CategoryUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a category's name, color or icon."""
    category = await category_service.update_category(
        db=db,
        category_id=category_id,
        user=current_user,
        **category_data.model_dump(exclude_unset=True),
    )

    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    return category


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a category that no transaction uses."""
    try:
        deleted = await category_service.delete_category(db, category_id, current_user)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Category not found")
