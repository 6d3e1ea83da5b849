"""
Services - the business rules behind each route group.

Every service receives its DocumentStore through the constructor.
"""

from bookcourier.services.catalog import BookCatalog
from bookcourier.services.orders import OrderService
from bookcourier.services.users import UserService
from bookcourier.services.wishlist import WishlistService

__all__ = [
    "BookCatalog",
    "OrderService",
    "UserService",
    "WishlistService",
]
