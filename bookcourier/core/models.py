"""
Core data models for BookCourier.

These models represent the stored entities: Users, Books, Orders and
Wishlist items. Attributes are snake_case in Python and in storage;
the JSON wire format is camelCase with the id exposed as ``_id``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bookcourier.core.utils import generate_id, utc_now


# =============================================================================
# Enums
# =============================================================================


class Role(str, Enum):
    """Platform-wide role of a user."""

    USER = "user"
    LIBRARIAN = "librarian"
    ADMIN = "admin"


class BookStatus(str, Enum):
    """Visibility of a book in the public catalog."""

    DRAFT = "draft"
    UNPUBLISHED = "unpublished"
    PUBLISHED = "published"


class OrderStatus(str, Enum):
    """Fulfilment status of an order."""

    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


# Statuses a librarian may set through the status endpoint.
# Cancellation has its own operation.
FULFILMENT_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
})


# =============================================================================
# Base
# =============================================================================


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )


class Document(WireModel):
    """A stored entity with an id and a creation timestamp."""

    id: str = Field(default_factory=generate_id, alias="_id")
    created_at: datetime = Field(default_factory=utc_now)

    def to_document(self) -> dict[str, Any]:
        """Storage representation."""
        return self.model_dump()

    def to_public(self) -> dict[str, Any]:
        """JSON-ready wire representation."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Entities
# =============================================================================


class User(Document):
    """
    A platform account.

    Created on first login; the role is assigned once at creation and
    afterwards only changed by an admin.
    """

    uid: str = ""
    email: str
    name: str = "Anonymous"
    profile_image: str = ""
    role: Role = Role.USER


class Book(Document):
    """A catalog entry owned by the librarian who created it."""

    title: str = Field(validation_alias=AliasChoices("title", "name"))
    author: str = ""
    price: float = Field(0.0, ge=0)
    description: str = ""
    image: str = ""
    status: BookStatus = BookStatus.DRAFT
    librarian_email: str = ""

    @property
    def is_published(self) -> bool:
        return self.status == BookStatus.PUBLISHED


class Order(Document):
    """
    A purchase of one book by one user.

    ``book_title`` and ``price`` are snapshots taken when the order is placed.
    """

    book_id: str
    email: str
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    book_title: str = ""
    price: float = 0.0
    name: str | None = None
    phone: str | None = None
    address: str | None = None


class WishlistItem(Document):
    email: str
    book_id: str


class Invoice(WireModel):
    """Read-only view of a paid order."""

    payment_id: str
    order_id: str
    book_id: str
    book_title: str
    amount: float
    email: str
    created_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> Invoice:
        return cls(
            payment_id=order.id[-8:].upper(),
            order_id=order.id,
            book_id=order.book_id,
            book_title=order.book_title,
            amount=order.price,
            email=order.email,
            created_at=order.created_at,
        )

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Inputs
# =============================================================================


class BookCreate(WireModel):
    """Fields a caller supplies when adding a book."""

    title: str = Field(min_length=1, validation_alias=AliasChoices("title", "name"))
    author: str = ""
    price: float = Field(0.0, ge=0)
    description: str = ""
    image: str = ""
    status: BookStatus = BookStatus.DRAFT


class BookUpdate(WireModel):
    """Editable book fields; omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, validation_alias=AliasChoices("title", "name"))
    author: str | None = None
    price: float | None = Field(None, ge=0)
    description: str | None = None
    image: str | None = None
    status: BookStatus | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class OrderCreate(WireModel):
    """
    Order placement input.

    There are no status or payment fields: a new order is
    always pending and unpaid.
    """

    book_id: str = Field(min_length=1)
    name: str | None = None
    phone: str | None = None
    address: str | None = None
