import pytest
from fastapi.testclient import TestClient

from core.settings import settings
from main import app


@pytest.mark.integration
class TestAppEndpoints:

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "pagecraft-api"}

    def test_request_id_is_generated(self, client: TestClient):
        response = client.get("/api/v1/block-types/")

        assert response.headers["X-Request-ID"]

    def test_request_id_is_propagated(self, client: TestClient):
        response = client.get("/api/v1/block-types/", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_debug_follows_settings(self):
        assert app.debug is settings.DEBUG
