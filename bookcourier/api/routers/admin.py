"""
Admin routes: user roles and catalog moderation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bookcourier.api.dependencies import get_catalog, get_user_service
from bookcourier.api.responses import outcome_response
from bookcourier.auth import AuthContext, Capability, require
from bookcourier.core.models import BookStatus, Role
from bookcourier.services import BookCatalog, UserService

router = APIRouter(prefix="/admin", tags=["admin"])


class RoleUpdateRequest(BaseModel):
    role: Role


class BookStatusRequest(BaseModel):
    status: BookStatus


@router.get("/users")
async def list_users(
    ctx: AuthContext = Depends(require(Capability.ADMIN_USERS)),
    users: UserService = Depends(get_user_service),
):
    accounts = await users.list_users()
    return {"success": True, "users": [u.to_public() for u in accounts]}


@router.patch("/users/{user_id}/role")
async def update_user_role(
    user_id: str,
    data: RoleUpdateRequest,
    ctx: AuthContext = Depends(require(Capability.ADMIN_USERS)),
    users: UserService = Depends(get_user_service),
):
    return outcome_response(await users.update_role(user_id, data.role))


@router.get("/books")
async def list_all_books(
    ctx: AuthContext = Depends(require(Capability.BOOK_MODERATE)),
    catalog: BookCatalog = Depends(get_catalog),
):
    """Every book regardless of status."""
    books = await catalog.list_all()
    return {"success": True, "books": [b.to_public() for b in books]}


@router.patch("/books/{book_id}/status")
async def update_book_status(
    book_id: str,
    data: BookStatusRequest,
    ctx: AuthContext = Depends(require(Capability.BOOK_MODERATE)),
    catalog: BookCatalog = Depends(get_catalog),
):
    """Publish or unpublish a book."""
    return outcome_response(await catalog.set_status(book_id, data.status))


@router.delete("/books/{book_id}")
async def delete_book(
    book_id: str,
    ctx: AuthContext = Depends(require(Capability.BOOK_DELETE)),
    catalog: BookCatalog = Depends(get_catalog),
):
    """Delete a book together with all of its orders."""
    return {"success": await catalog.delete_cascade(book_id)}
