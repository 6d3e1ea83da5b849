"""
Public catalog routes and book creation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from bookcourier.api.dependencies import get_app_settings, get_catalog
from bookcourier.auth import AuthContext, Capability, require_auth
from bookcourier.config import Settings
from bookcourier.core.models import BookCreate
from bookcourier.services import BookCatalog

router = APIRouter(prefix="/books", tags=["books"])


@router.post("")
async def create_book(
    data: BookCreate,
    ctx: AuthContext = Depends(require_auth()),
    settings: Settings = Depends(get_app_settings),
    catalog: BookCatalog = Depends(get_catalog),
):
    """Add a book owned by the caller."""
    if settings.restrict_book_creation:
        ctx.require(Capability.BOOK_CREATE)

    book = await catalog.publish_candidate(ctx.principal, data)
    return {"success": True, "insertedId": book.id, "book": book.to_public()}


@router.get("")
async def list_books(catalog: BookCatalog = Depends(get_catalog)):
    """All published books."""
    books = await catalog.list_published()
    return {"success": True, "books": [b.to_public() for b in books]}


@router.get("/latest")
async def latest_books(catalog: BookCatalog = Depends(get_catalog)):
    """The six most recently added published books."""
    books = await catalog.list_latest_published()
    return {"success": True, "books": [b.to_public() for b in books]}


@router.get("/{book_id}")
async def get_book(book_id: str, catalog: BookCatalog = Depends(get_catalog)):
    book = await catalog.get_by_id(book_id)
    return {"success": True, "book": book.to_public()}
