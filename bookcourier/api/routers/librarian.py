"""
Librarian routes: own books and the orders placed for them.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bookcourier.api.dependencies import get_catalog, get_order_service
from bookcourier.api.responses import outcome_response
from bookcourier.auth import AuthContext, Capability, require, require_role
from bookcourier.core.models import BookUpdate, Role
from bookcourier.services import BookCatalog, OrderService

router = APIRouter(prefix="/librarian", tags=["librarian"])


class OrderStatusRequest(BaseModel):
    # Validated by the service so an unknown value is a 400, not a 422
    status: str


@router.get("/my-books")
async def my_books(
    ctx: AuthContext = Depends(require_role(Role.LIBRARIAN)),
    catalog: BookCatalog = Depends(get_catalog),
):
    books = await catalog.list_owned_by(ctx.email)
    return {"success": True, "books": [b.to_public() for b in books]}


@router.patch("/books/{book_id}")
async def edit_book(
    book_id: str,
    data: BookUpdate,
    ctx: AuthContext = Depends(require(Capability.BOOK_EDIT_OWN)),
    catalog: BookCatalog = Depends(get_catalog),
):
    """Edit one of the caller's books."""
    return outcome_response(await catalog.update_owned(ctx.email, book_id, data))


@router.get("/orders")
async def orders_for_my_books(
    ctx: AuthContext = Depends(require(Capability.ORDER_FULFIL)),
    orders: OrderService = Depends(get_order_service),
):
    return {"success": True, "orders": await orders.list_for_librarian(ctx.email)}


@router.patch("/orders/{order_id}/status")
async def update_order_status(
    order_id: str,
    data: OrderStatusRequest,
    ctx: AuthContext = Depends(require(Capability.ORDER_FULFIL)),
    orders: OrderService = Depends(get_order_service),
):
    """Move an order along pending -> shipped -> delivered."""
    return outcome_response(await orders.update_status(ctx.email, order_id, data.status))


@router.patch("/orders/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    ctx: AuthContext = Depends(require(Capability.ORDER_FULFIL)),
    orders: OrderService = Depends(get_order_service),
):
    return outcome_response(await orders.cancel_as_librarian(ctx.email, order_id))
