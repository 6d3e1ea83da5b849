"""
FastAPI application for BookCourier.

This is the HTTP API the web client talks to.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from bookcourier import __version__
from bookcourier.api.dependencies import get_store
from bookcourier.api.routers import admin, books, librarian, orders, payments, wishlist
from bookcourier.auth import IdentityVerifier, create_verifier
from bookcourier.auth.routes import router as auth_router
from bookcourier.config import Settings, get_settings
from bookcourier.config_loader import RoleDirectory
from bookcourier.core.errors import BookCourierError
from bookcourier.integrations.payments import PaymentGateway, create_payment_gateway
from bookcourier.integrations.sentry import capture_exception, init_sentry
from bookcourier.services import BookCatalog, OrderService, UserService, WishlistService
from bookcourier.storage import DocumentStore, create_storage

logger = logging.getLogger(__name__)


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    settings: Settings | None = None,
    store: DocumentStore | None = None,
    verifier: IdentityVerifier | None = None,
    roles: RoleDirectory | None = None,
    payment_gateway: PaymentGateway | None = None,
) -> FastAPI:
    """
    Build the application.

    Anything not passed in is created from the settings at startup and
    closed again at shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize and cleanup app resources."""
        init_sentry(settings)

        owned = []
        state = app.state
        state.settings = settings

        state.store = store
        if state.store is None:
            state.store = create_storage(settings)
            owned.append(state.store)

        state.verifier = verifier
        if state.verifier is None:
            state.verifier = create_verifier(settings)
            owned.append(state.verifier)

        state.payments = payment_gateway
        if state.payments is None:
            state.payments = create_payment_gateway(settings)
            if state.payments is not None:
                owned.append(state.payments)

        state.roles = roles or RoleDirectory.from_settings(settings)

        # Services share the one store handle
        state.users = UserService(state.store, state.roles)
        state.catalog = BookCatalog(state.store)
        state.orders = OrderService(state.store)
        state.wishlist = WishlistService(state.store)

        logger.info(
            "BookCourier API starting in %s mode (%s storage)",
            settings.environment,
            type(state.store).__name__,
        )

        yield

        for resource in owned:
            await resource.close()
        logger.info("BookCourier API shut down")

    app = FastAPI(
        title="BookCourier API",
        description="Bookstore/library backend for users, librarians and admins",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(books.router)
    app.include_router(orders.router)
    app.include_router(wishlist.router)
    app.include_router(payments.router)
    app.include_router(admin.router)
    app.include_router(librarian.router)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "BookCourier server is running"

    @app.get("/health")
    async def health_check(store: DocumentStore = Depends(get_store)):
        """Health check endpoint; 503 when the document store is unreachable."""
        try:
            await store.ping()
        except Exception as e:
            logger.warning("Health check failed: %s", e)
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "service": "bookcourier-api"},
            )
        return {"status": "healthy", "service": "bookcourier-api"}

    return app


# =============================================================================
# Error Handling
# =============================================================================


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookCourierError)
    async def domain_error(request: Request, exc: BookCourierError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        capture_exception(exc, path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error"},
        )


app = create_app()
