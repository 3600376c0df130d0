"""Application-level behaviour shared by every service."""

import pytest
from fastapi.testclient import TestClient

from commerce.domain.service.credentials import TokenClaims
from commerce.infrastructure.api.app import SERVICES, create_app
from tests.fakes import fake_container


def _auth(container) -> dict[str, str]:
    token = container.tokens.issue(TokenClaims("alice", "alice@example.com", "user"))
    return {"Authorization": f"Bearer {token}"}


def _explode(*args, **kwargs):
    raise RuntimeError("database on fire")


class TestCreateApp:

    @pytest.mark.parametrize("service", sorted(SERVICES))
    def test_every_service_reports_health(self, service):
        client = TestClient(create_app(service, fake_container()))

        body = client.get("/health").json()

        assert body["service"] == service
        assert body["message"] == f"{service.capitalize()} service is healthy"

    def test_unknown_service_is_rejected(self):
        with pytest.raises(ValueError, match="Unknown service"):
            create_app("inventory", fake_container())

    def test_routes_of_other_services_are_not_mounted(self):
        client = TestClient(create_app("orders", fake_container()))

        response = client.post("/api/users/login", json={})

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Route POST /api/users/login not found"


class TestUnexpectedErrors:

    def test_internal_error_is_masked_outside_development(self):
        container = fake_container()
        container.orders.stats = _explode
        client = TestClient(create_app("orders", container), raise_server_exceptions=False)

        response = client.get("/api/orders/stats", headers=_auth(container))

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["message"] == "Something went wrong"
        assert error["statusCode"] == 500
        assert "stack" not in error

    def test_internal_error_is_shown_in_development(self):
        container = fake_container(APP_ENV="development")
        container.orders.stats = _explode
        client = TestClient(create_app("orders", container), raise_server_exceptions=False)

        response = client.get("/api/orders/stats", headers=_auth(container))

        error = response.json()["error"]
        assert error["message"] == "database on fire"
        assert "RuntimeError" in error["stack"]


class TestCors:

    def test_configured_origin_is_allowed(self):
        container = fake_container(CORS_ORIGIN="https://shop.example.com")
        client = TestClient(create_app("orders", container))

        response = client.options(
            "/api/orders",
            headers={
                "Origin": "https://shop.example.com",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://shop.example.com"
