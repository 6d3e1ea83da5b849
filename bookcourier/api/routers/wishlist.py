"""
Wishlist routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import Field

from bookcourier.api.dependencies import get_wishlist_service
from bookcourier.api.responses import outcome_response
from bookcourier.auth import AuthContext, require_auth
from bookcourier.core.models import WireModel
from bookcourier.services import WishlistService

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


class WishlistAddRequest(WireModel):
    book_id: str = Field(min_length=1)


@router.post("")
async def add_to_wishlist(
    data: WishlistAddRequest,
    ctx: AuthContext = Depends(require_auth()),
    wishlist: WishlistService = Depends(get_wishlist_service),
):
    item = await wishlist.add(ctx.email, data.book_id)
    return {"success": True, "insertedId": item.id, "item": item.to_public()}


@router.get("")
async def list_wishlist(
    ctx: AuthContext = Depends(require_auth()),
    wishlist: WishlistService = Depends(get_wishlist_service),
):
    return {"success": True, "wishlist": await wishlist.list(ctx.email)}


@router.delete("/{item_id}")
async def remove_from_wishlist(
    item_id: str,
    ctx: AuthContext = Depends(require_auth()),
    wishlist: WishlistService = Depends(get_wishlist_service),
):
    return outcome_response(await wishlist.remove(ctx.email, item_id))
