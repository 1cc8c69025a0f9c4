"""
Tests for the application shell: health probes, middleware, error
rendering, rate limiting and the debug endpoint.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from tripdesk.database import create_tables
from tripdesk.main import create_app
from tripdesk.utils.rate_limiter import limiter


class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    @pytest.mark.parametrize("path", ["/health", "/health/"])
    def test_simple(self, client, path):
        assert client.get(path).json() == {"status": "healthy"}

    def test_live(self, client):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_ready(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["database"]["status"] == "up"
        assert body["database"]["type"] == "sqlite"

    def test_not_ready_when_database_down(self, client):
        with patch(
            "tripdesk.routers.health.get_db_health",
            return_value={"status": "down", "error": "connection refused"},
        ):
            response = client.get("/health/ready")
        assert response.status_code == 503
        assert response.json()["error"] == "database_unavailable"


class TestMiddleware:

    def test_request_id_generated(self, client):
        response = client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "trace-abc"})
        assert response.headers["X-Request-ID"] == "trace-abc"

    def test_security_headers(self, client):
        response = client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Strict-Transport-Security" not in response.headers

    def test_cors_preflight(self, client):
        response = client.options(
            "/api/admin/list-transactions",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "authorization",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


class TestProductionHeaders:

    @pytest.fixture
    def settings_overrides(self):
        return {"environment": "production", "enable_debug_endpoints": True}

    def test_hsts(self, client):
        response = client.get("/health")
        assert response.headers["Strict-Transport-Security"].startswith("max-age=")

    def test_debug_endpoint_never_mounted(self, client, admin_headers):
        assert client.get("/api/admin/debug-token", headers=admin_headers).status_code == 404


class TestErrorRendering:

    def test_store_failure_message_passed_through(self, client, admin_headers):
        with patch(
            "tripdesk.services.transaction_service.TransactionService.list_all",
            side_effect=OperationalError("SELECT", {}, Exception("relation does not exist")),
        ):
            response = client.get("/api/admin/list-transactions", headers=admin_headers)
        assert response.status_code == 500
        assert "relation does not exist" in response.json()["error"]

    def test_unexpected_failure(self, client, admin_headers):
        with patch(
            "tripdesk.services.transaction_service.TransactionService.set_status",
            side_effect=RuntimeError("boom"),
        ):
            response = client.post(
                "/api/admin/update-transaction",
                json={"transaction_id": "tx-1", "action": "approve"},
                headers=admin_headers,
            )
        assert response.status_code == 500
        assert response.json() == {"error": "boom"}

    def test_unknown_route_is_not_an_api_error(self, client):
        assert client.get("/api/admin/nothing-here").status_code == 404


class TestRateLimiting:

    @pytest.fixture
    def settings_overrides(self):
        return {"rate_limit_enabled": True, "trust_proxy_headers": True}

    @pytest.fixture(autouse=True)
    def fresh_limits(self):
        limiter.reset()
        yield
        limiter.reset()

    def test_admin_writes_limited(self, client, admin_headers):
        headers = {**admin_headers, "X-Forwarded-For": "203.0.113.7"}
        for _ in range(30):
            response = client.post("/api/admin/update-transaction", headers=headers)
            assert response.status_code == 400

        response = client.post("/api/admin/update-transaction", headers=headers)
        assert response.status_code == 429
        assert "error" in response.json()

    def test_limits_are_per_client(self, client, admin_headers):
        for _ in range(30):
            client.post("/api/admin/update-transaction",
                        headers={**admin_headers, "X-Forwarded-For": "203.0.113.8"})

        response = client.post("/api/admin/update-transaction",
                               headers={**admin_headers, "X-Forwarded-For": "198.51.100.1"})
        assert response.status_code == 400

    def test_disabled_app_does_not_switch_off_enabled_app(self, client, settings, headers_for):
        """Building a second app with limits off leaves this one limited"""
        other_settings = settings.model_copy(update={"rate_limit_enabled": False})
        other_app = create_app(other_settings)
        create_tables(other_app.state.engine)
        other_client = TestClient(other_app)
        headers = {**headers_for("platform-owner", is_super_admin=True), "X-Forwarded-For": "203.0.113.9"}

        try:
            for _ in range(30):
                client.post("/api/admin/update-transaction", headers=headers)
            assert client.post("/api/admin/update-transaction", headers=headers).status_code == 429
            assert other_client.post("/api/admin/update-transaction", headers=headers).status_code == 400
        finally:
            other_app.state.engine.dispose()


class TestRateLimitingWithoutTrustedProxy:

    @pytest.fixture
    def settings_overrides(self):
        return {"rate_limit_enabled": True}

    @pytest.fixture(autouse=True)
    def fresh_limits(self):
        limiter.reset()
        yield
        limiter.reset()

    def test_rotating_forwarded_for_does_not_reset_limit(self, client, admin_headers):
        for i in range(30):
            response = client.post("/api/admin/update-transaction",
                                   headers={**admin_headers, "X-Forwarded-For": f"203.0.113.{i}"})
            assert response.status_code == 400

        response = client.post("/api/admin/update-transaction",
                               headers={**admin_headers, "X-Forwarded-For": "198.51.100.77"})
        assert response.status_code == 429


class TestDebugToken:

    @pytest.fixture
    def settings_overrides(self):
        return {"enable_debug_endpoints": True}

    def test_reports_admin(self, client, admin_headers):
        response = client.get("/api/admin/debug-token", headers=admin_headers)
        assert response.status_code == 200
        debug = response.json()["debug"]
        assert debug["ok"] is True
        assert debug["user"]["id"] == "admin-1"

    def test_reports_denial_without_raising(self, client, user_headers):
        response = client.get("/api/admin/debug-token", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["debug"] == {"ok": False, "status": 403, "error": "Forbidden"}

    def test_reports_missing_token(self, client):
        debug = client.get("/api/admin/debug-token").json()["debug"]
        assert debug["status"] == 401


class TestDebugTokenDisabled:

    def test_not_mounted_by_default(self, client, admin_headers):
        assert client.get("/api/admin/debug-token", headers=admin_headers).status_code == 404
