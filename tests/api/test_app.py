"""
Test suite for the assembled application.

Runs create_app() through its lifespan with a temporary SQLite database
and no provider endpoint: health checks, degraded-mode chat and the
materials admin API end to end.

System role: Verification of application wiring
"""

import pytest
from fastapi.testclient import TestClient

from onboarding_buddy.configs.database import DatabaseSettings
from onboarding_buddy.configs.provider import ProviderSettings
from onboarding_buddy.configs.sessions import SessionSettings
from onboarding_buddy.configs.settings import Settings
from onboarding_buddy.core.degraded_responses import DEGRADED_MODE_REPLY
from onboarding_buddy.main import create_app


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Provide settings with a temp database and no provider endpoint."""
    return Settings(
        provider=ProviderSettings(api_url=""),
        sessions=SessionSettings(),
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'onboarding.db'}"),
    )


@pytest.fixture
def client(settings: Settings):
    """Provide a TestClient with the lifespan running."""
    with TestClient(create_app(settings)) as client:
        yield client


class TestHealth:
    """Test suite for health endpoints."""

    def test_health_should_report_healthy(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Correlation-ID" in response.headers

    def test_correlation_id_should_be_echoed(self, client: TestClient) -> None:
        response = client.get("/api/v1/health", headers={"X-Correlation-ID": "req-42"})
        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_db_health_should_report_ok(self, client: TestClient) -> None:
        assert client.get("/api/v1/health/db").json()["status"] == "healthy"

    def test_provider_health_should_report_degraded(self, client: TestClient) -> None:
        body = client.get("/api/v1/health/provider").json()
        assert body["status"] == "degraded"
        assert body["configured"] is False


class TestDegradedChat:
    """Test suite for chat without a provider endpoint."""

    def test_chat_should_return_degraded_notice(self, client: TestClient) -> None:
        response = client.post("/api/v1/sessions/abc/chat", json={"message": "hello"})
        assert response.status_code == 200
        assert response.json()["reply"] == DEGRADED_MODE_REPLY

    def test_history_should_stay_empty(self, client: TestClient) -> None:
        client.post("/api/v1/sessions/abc/chat", json={"message": "hello"})
        assert client.get("/api/v1/sessions/abc/history").json()["total"] == 0


class TestMaterialsApi:
    """Test suite for the materials admin endpoints."""

    def test_material_lifecycle(self, client: TestClient) -> None:
        store = client.app.state.session_store
        store.mark_training_context_loaded("abc", "old context")

        created = client.post(
            "/api/v1/materials",
            json={"title": "Parking", "category": "Facilities", "content": "Level 2."},
        )
        assert created.status_code == 201
        material_id = created.json()["id"]
        assert store.has_training_context("abc") is False

        listed = client.get("/api/v1/materials").json()
        assert [m["title"] for m in listed] == ["Parking"]

        updated = client.put(
            f"/api/v1/materials/{material_id}",
            json={"title": "Parking", "category": "Facilities", "content": "Level 3."},
        )
        assert updated.json()["content"] == "Level 3."

        attached = client.post(
            f"/api/v1/materials/{material_id}/attachments",
            files={"file": ("map.txt", b"Gate B", "text/plain")},
            data={"description": "Site map"},
        )
        assert attached.status_code == 201
        attachment_id = attached.json()["attachments"][0]["id"]

        removed = client.delete(f"/api/v1/materials/{material_id}/attachments/{attachment_id}")
        assert removed.status_code == 204

        deleted = client.delete(f"/api/v1/materials/{material_id}")
        assert deleted.status_code == 204
        assert client.get("/api/v1/materials").json() == []
        assert client.get(f"/api/v1/materials/{material_id}").json()["is_active"] is False

    def test_unknown_material_should_404(self, client: TestClient) -> None:
        response = client.put(
            "/api/v1/materials/00000000-0000-0000-0000-000000000000",
            json={"title": "X", "category": "Y"},
        )
        assert response.status_code == 404

    def test_malformed_id_should_400(self, client: TestClient) -> None:
        assert client.get("/api/v1/materials/not-a-uuid").status_code == 400

    def test_invalid_material_should_422(self, client: TestClient) -> None:
        assert client.post("/api/v1/materials", json={"title": "", "category": "Y"}).status_code == 422
