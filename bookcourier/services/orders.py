"""
Order lifecycle.

    pending ──► shipped ──► delivered          (owning librarian)
       │           │
       └───────────┴──► cancelled              (order's user or owning librarian)

    unpaid ──► paid                            (order's user, independent axis)

Delivered and cancelled are terminal.
"""

from __future__ import annotations

import logging

from bookcourier.auth.identity import Principal
from bookcourier.auth.ownership import Relation, ensure_related, is_related
from bookcourier.core.errors import InvalidInput, InvalidTransition, NotFound, UpdateOutcome
from bookcourier.core.models import (
    FULFILMENT_STATUSES,
    Book,
    Invoice,
    Order,
    OrderCreate,
    OrderStatus,
    PaymentStatus,
    User,
)
from bookcourier.storage import DESCENDING, Collections, DocumentStore

logger = logging.getLogger(__name__)


# Fulfilment only moves forward
_FULFILMENT_RANK = {
    OrderStatus.PENDING: 0,
    OrderStatus.SHIPPED: 1,
    OrderStatus.DELIVERED: 2,
}


def _check_transition(current: OrderStatus | str, target: OrderStatus) -> None:
    current = OrderStatus(current)
    if current == target:
        return
    if current.is_terminal:
        raise InvalidTransition(f"Order is {current.value} and cannot become {target.value}")
    if target in _FULFILMENT_RANK and _FULFILMENT_RANK[target] < _FULFILMENT_RANK[current]:
        raise InvalidTransition(f"Order is {current.value} and cannot go back to {target.value}")


class OrderService:
    """Owns the orders collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def _find_order(self, order_id: str) -> Order | None:
        doc = await self.store.get(Collections.ORDERS, order_id)
        return Order.model_validate(doc) if doc else None

    async def _find_book(self, book_id: str) -> Book | None:
        doc = await self.store.get(Collections.BOOKS, book_id)
        return Book.model_validate(doc) if doc else None

    async def _set(self, order: Order, updates: dict) -> UpdateOutcome:
        result = await self.store.update(Collections.ORDERS, order.id, updates)
        if not result.matched:
            return UpdateOutcome.NOT_FOUND
        return UpdateOutcome.UPDATED if result.modified else UpdateOutcome.NOOP

    # -------------------------------------------------------------------------
    # Customer side
    # -------------------------------------------------------------------------

    async def place(self, principal: Principal, request: OrderCreate) -> Order:
        """
        Place an order for an existing book.

        Status and payment are always pending/unpaid; title and price are
        copied from the book.
        """
        book = await self._find_book(request.book_id)
        if book is None:
            raise NotFound("Book not found")

        order = Order(
            book_id=book.id,
            email=principal.email,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.UNPAID,
            book_title=book.title,
            price=book.price,
            name=request.name,
            phone=request.phone,
            address=request.address,
        )
        await self.store.insert(Collections.ORDERS, order.to_document())
        logger.info("Order %s placed by %s for book %s", order.id, order.email, order.book_id)
        return order

    async def list_mine(self, email: str) -> list[Order]:
        docs = await self.store.query(
            Collections.ORDERS,
            {"email": email},
            sort=[("created_at", DESCENDING)],
        )
        return [Order.model_validate(d) for d in docs]

    async def cancel(self, email: str, order_id: str) -> UpdateOutcome:
        """Cancel one of the caller's own orders."""
        order = await self._find_order(order_id)
        if order is None:
            return UpdateOutcome.NOT_FOUND
        if not is_related(email, order, Relation.OWNER):
            return UpdateOutcome.FORBIDDEN

        _check_transition(order.status, OrderStatus.CANCELLED)
        return await self._set(order, {"status": OrderStatus.CANCELLED.value})

    async def pay(self, email: str, order_id: str) -> UpdateOutcome:
        """Mark one of the caller's own orders as paid."""
        order = await self._find_order(order_id)
        if order is None:
            return UpdateOutcome.NOT_FOUND
        if not is_related(email, order, Relation.OWNER):
            return UpdateOutcome.FORBIDDEN

        return await self._set(order, {"payment_status": PaymentStatus.PAID.value})

    async def invoices_for(self, email: str) -> list[Invoice]:
        docs = await self.store.query(
            Collections.ORDERS,
            {"email": email, "payment_status": PaymentStatus.PAID.value},
            sort=[("created_at", DESCENDING)],
        )
        return [Invoice.from_order(Order.model_validate(d)) for d in docs]

    # -------------------------------------------------------------------------
    # Librarian side
    # -------------------------------------------------------------------------

    async def list_for_librarian(self, librarian_email: str) -> list[dict]:
        """
        Orders for the librarian's books, each enriched with the current
        book title and the purchaser's display name.
        """
        books = await self.store.query(Collections.BOOKS, {"librarian_email": librarian_email})
        if not books:
            return []
        titles = {b["id"]: b.get("title", "") for b in books}

        docs = await self.store.query(
            Collections.ORDERS,
            {"book_id": {"$in": list(titles)}},
            sort=[("created_at", DESCENDING)],
        )
        orders = [Order.model_validate(d) for d in docs]

        names: dict[str, str] = {}
        for email in {o.email for o in orders}:
            doc = await self.store.find_one(Collections.USERS, {"email": email})
            names[email] = User.model_validate(doc).name if doc else ""

        enriched = []
        for order in orders:
            entry = order.to_public()
            entry["bookTitle"] = titles.get(order.book_id) or order.book_title
            entry["customerName"] = names.get(order.email, "")
            enriched.append(entry)
        return enriched

    async def _fulfilment_target(self, librarian_email: str, order_id: str) -> Order:
        order = await self._find_order(order_id)
        if order is None:
            raise NotFound("Order not found")
        book = await self._find_book(order.book_id)
        if book is None:
            raise NotFound("Book not found")
        ensure_related(librarian_email, order, Relation.FULFILLER, book=book)
        return order

    async def update_status(
        self,
        librarian_email: str,
        order_id: str,
        status: OrderStatus | str,
    ) -> UpdateOutcome:
        """Move an order along pending -> shipped -> delivered."""
        try:
            target = OrderStatus(status)
        except ValueError:
            raise InvalidInput("Invalid status")
        if target not in FULFILMENT_STATUSES:
            raise InvalidInput("Invalid status")

        order = await self._fulfilment_target(librarian_email, order_id)
        _check_transition(order.status, target)
        return await self._set(order, {"status": target.value})

    async def cancel_as_librarian(self, librarian_email: str, order_id: str) -> UpdateOutcome:
        order = await self._fulfilment_target(librarian_email, order_id)
        _check_transition(order.status, OrderStatus.CANCELLED)
        return await self._set(order, {"status": OrderStatus.CANCELLED.value})
