"""
Contract tests for health, readiness, metrics and API housekeeping routes.

Tests cover:
- /health and /ready (with MongoDB up and down)
- /api status, /api/debug and the unknown-endpoint fallback
- /metrics exposition
- Correlation ID and security headers
"""

from plannora import main as main_module


class TestHealth:
    """Test /health and /ready"""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "test"
        assert "version" in body

    def test_ready_when_database_answers(self, client, monkeypatch):
        monkeypatch.setattr(main_module, "ping", lambda db: True)

        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"
        assert response.json()["checks"] == {"database": "healthy"}

    def test_not_ready_when_database_is_down(self, client, monkeypatch):
        monkeypatch.setattr(main_module, "ping", lambda db: False)

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"
        assert response.json()["checks"] == {"database": "unhealthy"}


class TestApiHousekeeping:
    """Test /api, /api/debug and unknown endpoints"""

    def test_api_status(self, client):
        response = client.get("/api")

        assert response.status_code == 200
        assert response.json() == {"message": "API is running"}

    def test_debug_has_no_secrets(self, client):
        response = client.get("/api/debug")

        assert response.status_code == 200
        body = response.json()
        assert body["environment"] == "test"
        assert body["fallbackAdminEnabled"] is True
        assert body["rateLimitEnabled"] is False
        assert "fallback-secret" not in response.text
        assert "jwt" not in {key.lower() for key in body}

    def test_unknown_endpoint(self, client):
        for method in ("get", "post", "delete"):
            response = getattr(client, method)("/api/does/not/exist")

            assert response.status_code == 404
            assert response.json() == {"detail": "API endpoint not found"}


class TestMetricsEndpoint:
    """Test /metrics"""

    def test_exposes_prometheus_metrics(self, client):
        client.get("/api")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "http_requests_total" in response.text
        assert "plannora_auth_attempts_total" in response.text

    def test_counts_logins(self, client, client_account):
        client.post(
            "/api/auth/login", json={"email": "client@example.com", "password": "wrong-password"}
        )

        response = client.get("/metrics")

        assert 'plannora_auth_attempts_total{operation="login",outcome="failure"}' in response.text


class TestResponseHeaders:
    """Test headers added by middleware"""

    def test_correlation_id_is_echoed(self, client):
        response = client.get("/api", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"

    def test_correlation_id_is_generated(self, client):
        response = client.get("/api")
        assert len(response.headers["X-Correlation-ID"]) == 36

    def test_security_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
