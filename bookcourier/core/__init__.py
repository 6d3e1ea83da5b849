"""
Core module - data models, errors and shared utilities.
"""

from bookcourier.core.errors import (
    BookCourierError,
    Conflict,
    Forbidden,
    InvalidInput,
    InvalidTransition,
    NotFound,
    Unauthorized,
    UpdateOutcome,
)
from bookcourier.core.models import (
    Book,
    BookCreate,
    BookStatus,
    BookUpdate,
    Invoice,
    Order,
    OrderCreate,
    OrderStatus,
    PaymentStatus,
    Role,
    User,
    WishlistItem,
)
from bookcourier.core.utils import generate_id, utc_now

__all__ = [
    # Errors
    "BookCourierError",
    "Conflict",
    "Forbidden",
    "InvalidInput",
    "InvalidTransition",
    "NotFound",
    "Unauthorized",
    "UpdateOutcome",
    # Models
    "Book",
    "BookCreate",
    "BookStatus",
    "BookUpdate",
    "Invoice",
    "Order",
    "OrderCreate",
    "OrderStatus",
    "PaymentStatus",
    "Role",
    "User",
    "WishlistItem",
    # Utils
    "generate_id",
    "utc_now",
]
