"""
Route groups, one module per audience.
"""

from bookcourier.api.routers import admin, books, librarian, orders, payments, wishlist

__all__ = ["admin", "books", "librarian", "orders", "payments", "wishlist"]
