"""
Tests for login provisioning and route authorization.
"""

import pytest

from bookcourier.auth import (
    AuthContext,
    Capability,
    DevTokenVerifier,
    Policy,
    get_auth_context,
    has_capability,
    resolve_role,
)
from bookcourier.core.errors import Unauthorized
from bookcourier.core.models import Role, User
from bookcourier.storage import Collections, InMemoryDocumentStore
from conftest import ADMIN, LIBRARIAN, READER, auth_headers, principal


# =============================================================================
# First Login
# =============================================================================


class TestFirebaseLogin:
    def test_first_login_creates_account(self, client, store):
        response = client.post(
            "/auth/firebase-login",
            json={"user": {"name": "Ada", "picture": "https://img/ada.png"}},
            headers=auth_headers(READER),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        user = body["user"]
        assert user["email"] == READER
        assert user["name"] == "Ada"
        assert user["profileImage"] == "https://img/ada.png"
        assert user["role"] == "user"
        assert user["uid"] == f"dev-{READER}"
        assert "_id" in user

    def test_login_is_idempotent(self, client, login):
        first = login(READER, name="Ada")
        second = login(READER, name="Someone Else")

        assert second["_id"] == first["_id"]
        assert second["name"] == "Ada"

        login(ADMIN)
        users = client.get("/admin/users", headers=auth_headers(ADMIN)).json()["users"]
        assert [u["email"] for u in users].count(READER) == 1

    def test_admin_must_log_in_before_using_admin_routes(self, client):
        response = client.get("/admin/users", headers=auth_headers(ADMIN))
        assert response.status_code == 403

    def test_default_name_is_anonymous(self, login):
        user = login(READER)
        assert user["name"] == "Anonymous"
        assert user["profileImage"] == ""

    def test_roles_from_allow_lists(self, login):
        assert login(ADMIN)["role"] == "admin"
        assert login(LIBRARIAN)["role"] == "librarian"
        assert login(READER)["role"] == "user"

    def test_missing_token_is_401(self, client):
        response = client.post("/auth/firebase-login")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_rejected_token_is_401(self, client):
        response = client.post("/auth/firebase-login", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401


# =============================================================================
# Route Policies
# =============================================================================


class TestRoutePolicies:
    def test_admin_route_requires_admin_role(self, client, login):
        login(READER)
        login(LIBRARIAN)

        assert client.get("/admin/users", headers=auth_headers(READER)).status_code == 403
        assert client.get("/admin/users", headers=auth_headers(LIBRARIAN)).status_code == 403

    def test_admin_route_allows_admin(self, client, login):
        login(ADMIN)
        login(READER)

        response = client.get("/admin/users", headers=auth_headers(ADMIN))

        assert response.status_code == 200
        emails = {u["email"] for u in response.json()["users"]}
        assert emails == {ADMIN, READER}

    def test_librarian_route_requires_librarian_role(self, client, login):
        login(ADMIN)
        response = client.get("/librarian/my-books", headers=auth_headers(ADMIN))
        assert response.status_code == 403

    def test_librarian_cannot_moderate_or_delete_books(self, client, add_book):
        book = add_book()

        moderate = client.patch(
            f"/admin/books/{book['_id']}/status",
            json={"status": "unpublished"},
            headers=auth_headers(LIBRARIAN),
        )
        delete = client.delete(f"/admin/books/{book['_id']}", headers=auth_headers(LIBRARIAN))

        assert moderate.status_code == 403
        assert delete.status_code == 403
        assert client.get(f"/books/{book['_id']}").status_code == 200

    def test_admin_cannot_fulfil_orders(self, client, login):
        login(ADMIN)
        for path in ("/librarian/orders", "/librarian/my-books"):
            assert client.get(path, headers=auth_headers(ADMIN)).status_code == 403

        response = client.patch(
            "/librarian/orders/any-order/status",
            json={"status": "shipped"},
            headers=auth_headers(ADMIN),
        )
        assert response.status_code == 403

    def test_role_change_takes_effect_immediately(self, client, login):
        login(ADMIN)
        reader = login(READER)
        assert client.get("/librarian/my-books", headers=auth_headers(READER)).status_code == 403

        response = client.patch(
            f"/admin/users/{reader['_id']}/role",
            json={"role": "librarian"},
            headers=auth_headers(ADMIN),
        )
        assert response.json() == {"success": True, "outcome": "updated"}

        assert client.get("/librarian/my-books", headers=auth_headers(READER)).status_code == 200

    def test_unknown_role_is_rejected(self, client, login):
        login(ADMIN)
        reader = login(READER)

        response = client.patch(
            f"/admin/users/{reader['_id']}/role",
            json={"role": "superuser"},
            headers=auth_headers(ADMIN),
        )
        assert response.status_code == 422

    def test_role_change_for_missing_user(self, client, login):
        login(ADMIN)
        response = client.patch(
            "/admin/users/does-not-exist/role",
            json={"role": "admin"},
            headers=auth_headers(ADMIN),
        )
        assert response.json() == {"success": False, "outcome": "not_found"}


# =============================================================================
# Context and Capabilities
# =============================================================================


class TestAuthContext:
    def test_capabilities_follow_role(self):
        ctx = AuthContext(principal=principal(LIBRARIAN), role=Role.LIBRARIAN)
        assert ctx.can(Capability.BOOK_CREATE)
        assert ctx.can("order.fulfil")
        assert not ctx.can(Capability.BOOK_DELETE)
        assert not ctx.can("no.such.capability")

    def test_unprovisioned_identity_has_no_capabilities(self):
        ctx = AuthContext(principal=principal(READER))
        assert ctx.role is None
        assert ctx.capabilities == set()

    def test_role_policy(self):
        admin = AuthContext(principal=principal(ADMIN), role=Role.ADMIN)
        reader = AuthContext(principal=principal(READER), role=Role.USER)
        stranger = AuthContext(principal=principal("stranger@example.com"))

        policy = Policy(role=Role.ADMIN)
        assert policy.check(admin) == (True, None)
        allowed, error = policy.check(reader)
        assert not allowed
        assert "admin" in error
        assert policy.check(stranger) == (False, "Forbidden: account not found")

    def test_capability_policy(self):
        policy = Policy(capabilities=[Capability.BOOK_DELETE])
        admin = AuthContext(principal=principal(ADMIN), role="admin")
        librarian = AuthContext(principal=principal(LIBRARIAN), role=Role.LIBRARIAN)

        assert policy.check(admin) == (True, None)
        allowed, error = policy.check(librarian)
        assert not allowed
        assert "book.delete" in error

    def test_admin_does_not_fulfil_orders(self):
        assert has_capability(Capability.ORDER_FULFIL, Role.LIBRARIAN)
        assert not has_capability(Capability.ORDER_FULFIL, Role.ADMIN)

    def test_plain_users_hold_no_capabilities(self):
        assert not any(has_capability(c, Role.USER) for c in Capability)


class TestResolveRole:
    @pytest.mark.asyncio
    async def test_stored_role(self):
        store = InMemoryDocumentStore()
        await store.insert(Collections.USERS, User(email=LIBRARIAN, role=Role.LIBRARIAN).to_document())

        assert await resolve_role(store, LIBRARIAN) == Role.LIBRARIAN
        assert await resolve_role(store, READER) is None

    @pytest.mark.asyncio
    async def test_context_carries_stored_role(self):
        store = InMemoryDocumentStore()
        await store.insert(Collections.USERS, User(email=ADMIN, role=Role.ADMIN).to_document())

        ctx = await get_auth_context(principal(ADMIN), store)

        assert ctx.role == Role.ADMIN
        assert ctx.can(Capability.ADMIN_USERS)


class TestDevTokenVerifier:
    @pytest.mark.asyncio
    async def test_accepts_dev_token(self):
        p = await DevTokenVerifier().verify(f"dev:{READER}")
        assert p.email == READER

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "dev:", "dev:not-an-email", "eyJhbGciOi"])
    async def test_rejects_other_tokens(self, token):
        with pytest.raises(Unauthorized):
            await DevTokenVerifier().verify(token)
