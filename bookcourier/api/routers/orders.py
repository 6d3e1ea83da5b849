"""
Customer-side order routes: placing, listing, cancelling, paying, invoices.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from bookcourier.api.dependencies import get_order_service
from bookcourier.api.responses import outcome_response
from bookcourier.auth import AuthContext, require_auth
from bookcourier.core.models import OrderCreate
from bookcourier.services import OrderService

router = APIRouter(tags=["orders"])


@router.post("/orders")
async def place_order(
    data: OrderCreate,
    ctx: AuthContext = Depends(require_auth()),
    orders: OrderService = Depends(get_order_service),
):
    """Place an order; it always starts pending and unpaid."""
    order = await orders.place(ctx.principal, data)
    return {"success": True, "insertedId": order.id, "order": order.to_public()}


@router.get("/users/my-orders")
async def my_orders(
    ctx: AuthContext = Depends(require_auth()),
    orders: OrderService = Depends(get_order_service),
):
    mine = await orders.list_mine(ctx.email)
    return {"success": True, "orders": [o.to_public() for o in mine]}


@router.put("/users/cancel/{order_id}")
async def cancel_order(
    order_id: str,
    ctx: AuthContext = Depends(require_auth()),
    orders: OrderService = Depends(get_order_service),
):
    return outcome_response(await orders.cancel(ctx.email, order_id))


@router.put("/users/pay/{order_id}")
async def pay_order(
    order_id: str,
    ctx: AuthContext = Depends(require_auth()),
    orders: OrderService = Depends(get_order_service),
):
    return outcome_response(await orders.pay(ctx.email, order_id))


@router.get("/users/invoices")
async def my_invoices(
    ctx: AuthContext = Depends(require_auth()),
    orders: OrderService = Depends(get_order_service),
):
    """Paid orders, presented as invoices."""
    invoices = await orders.invoices_for(ctx.email)
    return {"success": True, "invoices": [i.to_public() for i in invoices]}
