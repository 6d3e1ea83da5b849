"""
Wishlist: books a user wants to remember, one entry per (user, book).
"""

from __future__ import annotations

from typing import Any

from bookcourier.auth.ownership import Relation, is_related
from bookcourier.core.errors import Conflict, NotFound, UpdateOutcome
from bookcourier.core.models import Book, WishlistItem
from bookcourier.storage import DESCENDING, Collections, DocumentStore


class WishlistService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def add(self, email: str, book_id: str) -> WishlistItem:
        if await self.store.get(Collections.BOOKS, book_id) is None:
            raise NotFound("Book not found")

        existing = await self.store.find_one(Collections.WISHLIST, {"email": email, "book_id": book_id})
        if existing:
            raise Conflict("Book already in wishlist")

        item = WishlistItem(email=email, book_id=book_id)
        await self.store.insert(Collections.WISHLIST, item.to_document())
        return item

    async def list(self, email: str) -> list[dict[str, Any]]:
        """Entries with the referenced book, or ``None`` if it was deleted."""
        docs = await self.store.query(
            Collections.WISHLIST,
            {"email": email},
            sort=[("created_at", DESCENDING)],
        )
        entries = []
        for doc in docs:
            item = WishlistItem.model_validate(doc)
            book_doc = await self.store.get(Collections.BOOKS, item.book_id)
            entry = item.to_public()
            entry["book"] = Book.model_validate(book_doc).to_public() if book_doc else None
            entries.append(entry)
        return entries

    async def remove(self, email: str, item_id: str) -> UpdateOutcome:
        doc = await self.store.get(Collections.WISHLIST, item_id)
        if doc is None:
            return UpdateOutcome.NOT_FOUND
        if not is_related(email, WishlistItem.model_validate(doc), Relation.OWNER):
            return UpdateOutcome.FORBIDDEN

        deleted = await self.store.delete(Collections.WISHLIST, item_id)
        return UpdateOutcome.UPDATED if deleted else UpdateOutcome.NOT_FOUND
