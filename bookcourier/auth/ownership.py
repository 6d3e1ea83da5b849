"""
Ownership relations between a principal and a resource.

One predicate for every resource kind, so route handlers and services
never compare owner fields by hand:

    is_related(ctx.email, book, Relation.OWNER)
    ensure_related(ctx.email, order, Relation.OWNER)

An order's ``FULFILLER`` is the librarian who owns the ordered book; that
relation is checked against the book itself.
"""

from __future__ import annotations

from enum import Enum
from functools import singledispatch

from bookcourier.core.errors import Forbidden
from bookcourier.core.models import Book, Order, WishlistItem


class Relation(str, Enum):
    OWNER = "owner"
    FULFILLER = "fulfiller"


def _same(a: str | None, b: str | None) -> bool:
    return bool(a) and a == b


@singledispatch
def owner_email(resource) -> str | None:
    """Email of the account that owns the resource."""
    raise TypeError(f"No ownership rule for {type(resource).__name__}")


@owner_email.register
def _(resource: Book) -> str | None:
    return resource.librarian_email


@owner_email.register
def _(resource: Order) -> str | None:
    return resource.email


@owner_email.register
def _(resource: WishlistItem) -> str | None:
    return resource.email


def is_related(
    email: str,
    resource: Book | Order | WishlistItem,
    relation: Relation = Relation.OWNER,
    book: Book | None = None,
) -> bool:
    """
    Check a relation between an email and a resource.

    ``FULFILLER`` applies to orders only and needs the ordered ``book``.
    """
    if relation == Relation.OWNER:
        return _same(email, owner_email(resource))

    if relation == Relation.FULFILLER:
        if not isinstance(resource, Order):
            raise TypeError("FULFILLER applies to orders only")
        if book is None or book.id != resource.book_id:
            return False
        return _same(email, owner_email(book))

    raise ValueError(f"Unknown relation: {relation}")


def ensure_related(
    email: str,
    resource: Book | Order | WishlistItem,
    relation: Relation = Relation.OWNER,
    book: Book | None = None,
) -> None:
    """Raise Forbidden unless the relation holds."""
    if not is_related(email, resource, relation, book=book):
        raise Forbidden()
