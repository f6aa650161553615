"""
Unit tests for the health router.
"""

import pytest
from fastapi.testclient import TestClient

from api.deps import get_settings
from backend.main import create_app
from backend.settings import Settings


def _client(settings: Settings) -> TestClient:
    app = create_app(settings=settings)
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


@pytest.mark.unit
class TestHealth:
    def test_liveness(self):
        client = _client(Settings(environment="test", _env_file=None))

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_ready_with_destination(self):
        client = _client(Settings(environment="test", planmypeak_api_token="t", _env_file=None))

        data = client.get("/health/ready").json()

        assert data["status"] == "ok"
        assert data["destination_configured"] is True
        assert data["environment"] == "test"

    def test_degraded_without_destination(self):
        client = _client(Settings(environment="test", planmypeak_api_token=None, _env_file=None))

        data = client.get("/health/ready").json()

        assert data["status"] == "degraded"
        assert data["destination_configured"] is False

    def test_ready_reports_intervals_destination(self):
        client = _client(Settings(environment="test", intervals_api_key="k", _env_file=None))

        data = client.get("/health/ready").json()

        assert data["intervals_configured"] is True
