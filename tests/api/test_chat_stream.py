"""
Test suite for the WebSocket chat endpoint.

Drives /ws/chat with TestClient.websocket_connect against a real session
store and orchestrator whose provider client is mocked.

System role: Verification of the push transport
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from onboarding_buddy.api.routers.chat_stream import ConnectionRegistry, router
from onboarding_buddy.application.services.orchestrator import ConversationOrchestrator
from onboarding_buddy.core.material_store import InMemoryMaterialStore
from onboarding_buddy.core.provider.payload_builder import ProviderPayloadBuilder
from onboarding_buddy.core.session_store import SessionStore


def chat_body(text: str) -> str:
    return json.dumps({"choices": [{"message": {"content": text}}]})


@pytest.fixture
def mock_provider_client() -> MagicMock:
    client = MagicMock()
    client.is_configured = True
    client.send = AsyncMock(return_value=chat_body("<p>Welcome aboard!</p>"))
    return client


@pytest.fixture
def app(store: SessionStore, sample_materials, provider_settings, mock_provider_client) -> FastAPI:
    """Create FastAPI test application with the WebSocket router and shared state."""
    app = FastAPI()
    app.include_router(router)
    app.state.session_store = store
    app.state.connection_registry = ConnectionRegistry()
    app.state.orchestrator = ConversationOrchestrator(
        store=store,
        material_store=InMemoryMaterialStore(sample_materials),
        payload_builder=ProviderPayloadBuilder(provider_settings),
        provider_client=mock_provider_client,
    )
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def register(websocket, session_id: str = "abc") -> dict:
    websocket.send_json({"event": "register", "data": {"session_id": session_id}})
    return websocket.receive_json()


class TestWebSocketChat:
    """Test suite for /ws/chat events."""

    def test_connect_should_send_connection_id(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/chat") as websocket:
            event = websocket.receive_json()
        assert event["event"] == "connected"
        assert event["data"]["connection_id"]

    def test_register_should_map_session_and_send_welcome(
        self, client: TestClient, store: SessionStore
    ) -> None:
        with client.websocket_connect("/ws/chat") as websocket:
            connection_id = websocket.receive_json()["data"]["connection_id"]

            registered = register(websocket)
            welcome = websocket.receive_json()

            assert registered == {"event": "registered", "data": {"session_id": "abc", "has_history": False}}
            assert welcome["event"] == "welcome"
            assert welcome["data"]["message"] == "<p>Welcome aboard!</p>"
            assert store.resolve_connection(connection_id) == "abc"

    def test_chat_should_reply_with_message_event(
        self, client: TestClient, mock_provider_client: MagicMock, store: SessionStore
    ) -> None:
        with client.websocket_connect("/ws/chat") as websocket:
            websocket.receive_json()
            register(websocket)
            websocket.receive_json()

            mock_provider_client.send.return_value = chat_body("<p>Second floor.</p>")
            websocket.send_json({"event": "chat", "data": {"message": "Where is HR?"}})
            reply = websocket.receive_json()

        assert reply == {"event": "message", "data": {"session_id": "abc", "message": "<p>Second floor.</p>"}}
        assert store.get_history("abc")[-2:] == ["Human: Where is HR?", "Assistant: <p>Second floor.</p>"]

    def test_chat_before_register_should_error(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/chat") as websocket:
            websocket.receive_json()
            websocket.send_json({"event": "chat", "data": {"message": "hi"}})
            event = websocket.receive_json()
        assert event["event"] == "error"
        assert event["data"]["code"] == "NOT_REGISTERED"

    def test_invalid_events_should_error_but_keep_connection(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/chat") as websocket:
            websocket.receive_json()

            websocket.send_text("not json")
            assert websocket.receive_json()["data"]["code"] == "INVALID_JSON"

            websocket.send_json({"event": "dance"})
            assert websocket.receive_json()["data"]["code"] == "UNKNOWN_EVENT"

            websocket.send_json({"event": "register", "data": {}})
            assert websocket.receive_json()["data"]["code"] == "MISSING_SESSION_ID"

            websocket.send_json({"event": "ping"})
            assert websocket.receive_json()["event"] == "pong"

    def test_history_should_return_rendered_turns(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/chat") as websocket:
            websocket.receive_json()
            register(websocket)
            websocket.receive_json()

            websocket.send_json({"event": "history"})
            event = websocket.receive_json()

        assert event["event"] == "history"
        assert [m["turn_type"] for m in event["data"]["messages"]] == ["welcome"]

    def test_reconnect_should_keep_session_and_skip_welcome(
        self, client: TestClient, store: SessionStore, app: FastAPI
    ) -> None:
        with client.websocket_connect("/ws/chat") as websocket:
            websocket.receive_json()
            register(websocket)
            websocket.receive_json()

        assert "abc" in store
        assert len(app.state.connection_registry) == 0

        with client.websocket_connect("/ws/chat") as websocket:
            websocket.receive_json()
            registered = register(websocket)
            websocket.send_json({"event": "ping"})
            next_event = websocket.receive_json()

        assert registered["data"]["has_history"] is True
        assert next_event["event"] == "pong"
