"""
Book catalog.

Books are created by any verified identity (or librarians/admins only when
``restrict_book_creation`` is set), edited by the librarian who owns them,
and moderated or removed by admins.
"""

from __future__ import annotations

import logging

from bookcourier.auth.identity import Principal
from bookcourier.auth.ownership import Relation, is_related
from bookcourier.core.errors import NotFound, UpdateOutcome
from bookcourier.core.models import Book, BookCreate, BookStatus, BookUpdate
from bookcourier.storage import DESCENDING, Collections, DocumentStore

logger = logging.getLogger(__name__)

LATEST_LIMIT = 6


class BookCatalog:
    """Owns the books collection (and the orders cascade on delete)."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_published(self) -> list[Book]:
        docs = await self.store.query(Collections.BOOKS, {"status": BookStatus.PUBLISHED.value})
        return [Book.model_validate(d) for d in docs]

    async def list_latest_published(self, n: int = LATEST_LIMIT) -> list[Book]:
        """Newest published books first, at most ``n``."""
        if n <= 0:
            return []
        docs = await self.store.query(
            Collections.BOOKS,
            {"status": BookStatus.PUBLISHED.value},
            sort=[("created_at", DESCENDING)],
            limit=n,
        )
        return [Book.model_validate(d) for d in docs]

    async def get_by_id(self, book_id: str) -> Book:
        doc = await self.store.get(Collections.BOOKS, book_id)
        if not doc:
            raise NotFound("Book not found")
        return Book.model_validate(doc)

    async def find(self, book_id: str) -> Book | None:
        doc = await self.store.get(Collections.BOOKS, book_id)
        return Book.model_validate(doc) if doc else None

    async def list_owned_by(self, librarian_email: str) -> list[Book]:
        docs = await self.store.query(Collections.BOOKS, {"librarian_email": librarian_email})
        return [Book.model_validate(d) for d in docs]

    async def list_all(self) -> list[Book]:
        docs = await self.store.query(Collections.BOOKS)
        return [Book.model_validate(d) for d in docs]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def publish_candidate(self, principal: Principal, fields: BookCreate) -> Book:
        """Add a book owned by the caller."""
        book = Book(**fields.model_dump(), librarian_email=principal.email)
        await self.store.insert(Collections.BOOKS, book.to_document())
        logger.info("Book %s added by %s", book.id, principal.email)
        return book

    async def update_owned(self, librarian_email: str, book_id: str, fields: BookUpdate) -> UpdateOutcome:
        """Edit a book; only its owning librarian may do so."""
        book = await self.find(book_id)
        if book is None:
            return UpdateOutcome.NOT_FOUND
        if not is_related(librarian_email, book, Relation.OWNER):
            return UpdateOutcome.FORBIDDEN

        changes = fields.changes()
        if not changes:
            return UpdateOutcome.NOOP

        result = await self.store.update(
            Collections.BOOKS,
            book_id,
            changes,
            filters={"librarian_email": librarian_email},
        )
        return UpdateOutcome.UPDATED if result.modified else UpdateOutcome.NOOP

    async def set_status(self, book_id: str, status: BookStatus) -> UpdateOutcome:
        result = await self.store.update(Collections.BOOKS, book_id, {"status": BookStatus(status).value})
        if not result.matched:
            return UpdateOutcome.NOT_FOUND
        return UpdateOutcome.UPDATED if result.modified else UpdateOutcome.NOOP

    async def delete_cascade(self, book_id: str) -> bool:
        """
        Delete a book and every order that references it.

        Orders go first. If removing the book then fails, the removed
        orders are put back and the error propagates.
        """
        orphaned = await self.store.query(Collections.ORDERS, {"book_id": book_id})
        removed = await self.store.delete_many(Collections.ORDERS, {"book_id": book_id})

        try:
            deleted = await self.store.delete(Collections.BOOKS, book_id)
        except Exception:
            logger.exception("Deleting book %s failed; restoring %d order(s)", book_id, len(orphaned))
            if orphaned:
                await self.store.insert_many(Collections.ORDERS, orphaned)
            raise

        logger.info("Book %s deleted (found=%s) with %d order(s)", book_id, deleted, removed)
        return deleted
