"""Client navigation endpoints."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from celengan.dependencies import get_current_user
from celengan.models.user import User
from celengan.schemas.navigation import PageResponse
from celengan.services.navigation_service import list_pages, resolve_page

router = APIRouter()


@router.get("/", response_model=List[PageResponse])
async def get_pages(current_user: User = Depends(get_current_user)):
    """Pages available in the dashboard menu."""
    return list_pages()


@router.get("/{page}", response_model=PageResponse)
async def get_page(page: str, current_user: User = Depends(get_current_user)):
    """Resolve a page id to the resource that backs it."""
    try:
        return resolve_page(page)
    except ValueError:
        raise HTTPException(status_code=404, detail="Page not found")
