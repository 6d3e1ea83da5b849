"""
Tests for application wiring: liveness, error mapping, CORS.
"""

from fastapi.testclient import TestClient

from bookcourier.api.app import create_app
from bookcourier.auth import DevTokenVerifier
from bookcourier.storage import InMemoryDocumentStore


class BrokenStore(InMemoryDocumentStore):
    async def query(self, collection, filters=None, sort=None, limit=None):
        raise RuntimeError("database exploded")


class UnreachableStore(InMemoryDocumentStore):
    async def ping(self):
        raise ConnectionError("no route to host")


class TestApp:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.text == "BookCourier server is running"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_health_reports_unreachable_store(self, settings):
        app = create_app(settings=settings, store=UnreachableStore(), verifier=DevTokenVerifier())

        with TestClient(app) as client:
            response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    def test_builds_everything_from_settings(self, settings):
        app = create_app(settings=settings)

        with TestClient(app) as client:
            assert client.get("/health").json()["status"] == "healthy"
            assert client.get("/books").status_code == 200

            assert isinstance(app.state.store, InMemoryDocumentStore)
            assert isinstance(app.state.verifier, DevTokenVerifier)
            assert app.state.payments is None

    def test_module_level_app(self):
        from bookcourier.api.app import app

        assert app.title == "BookCourier API"

    def test_unexpected_error_is_generic_500(self, settings):
        app = create_app(settings=settings, store=BrokenStore(), verifier=DevTokenVerifier())

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/books")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}
        assert "exploded" not in response.text

    def test_cors_preflight(self, client):
        response = client.options(
            "/books",
            headers={
                "Origin": "https://bookcourier.example.com",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers

    def test_services_share_injected_store(self, app, client, store):
        assert app.state.store is store
        assert app.state.catalog.store is store
        assert app.state.orders.store is store
