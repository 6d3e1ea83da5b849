"""
Request-scoped accessors for the resources created in the app lifespan.
"""

from __future__ import annotations

from fastapi import Request

from bookcourier.config import Settings
from bookcourier.integrations.payments import PaymentGateway
from bookcourier.services import BookCatalog, OrderService, UserService, WishlistService
from bookcourier.storage import DocumentStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_user_service(request: Request) -> UserService:
    return request.app.state.users


def get_catalog(request: Request) -> BookCatalog:
    return request.app.state.catalog


def get_order_service(request: Request) -> OrderService:
    return request.app.state.orders


def get_wishlist_service(request: Request) -> WishlistService:
    return request.app.state.wishlist


def get_payment_gateway(request: Request) -> PaymentGateway | None:
    return request.app.state.payments
