"""
Shared fixtures.

The API runs against the in-memory store and the ``dev:<email>`` token
verifier, so no Firebase project or database is needed.
"""

import pytest
from fastapi.testclient import TestClient

from bookcourier.api.app import create_app
from bookcourier.auth import DevTokenVerifier, Principal
from bookcourier.config import Settings
from bookcourier.config_loader import RoleDirectory
from bookcourier.storage import InMemoryDocumentStore

ADMIN = "admin@example.com"
LIBRARIAN = "librarian@example.com"
OTHER_LIBRARIAN = "other.librarian@example.com"
READER = "reader@example.com"


def auth_headers(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer dev:{email}"}


def principal(email: str) -> Principal:
    return Principal(email=email, subject_id=f"uid-{email}")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings():
    return Settings(_env_file=None, environment="test", sentry_dsn="", stripe_secret="")


@pytest.fixture
def store():
    """Fresh in-memory store."""
    return InMemoryDocumentStore()


@pytest.fixture
def roles():
    return RoleDirectory(admins=[ADMIN], librarians=[LIBRARIAN, OTHER_LIBRARIAN])


@pytest.fixture
def app(settings, store, roles):
    return create_app(settings=settings, store=store, verifier=DevTokenVerifier(), roles=roles)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login(client):
    """Log an email in through the API and return the stored account."""

    def _login(email: str, **profile) -> dict:
        body = {"user": profile} if profile else None
        response = client.post("/auth/firebase-login", json=body, headers=auth_headers(email))
        assert response.status_code == 200
        return response.json()["user"]

    return _login


@pytest.fixture
def add_book(client, login):
    """Create a book through the API, published unless told otherwise."""

    def _add(owner: str = LIBRARIAN, status: str = "published", **fields) -> dict:
        login(owner)
        body = {"title": "Dune", "author": "Frank Herbert", "price": 20, "status": status}
        body.update(fields)
        response = client.post("/books", json=body, headers=auth_headers(owner))
        assert response.status_code == 200
        return response.json()["book"]

    return _add
