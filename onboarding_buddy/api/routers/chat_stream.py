"""
WebSocket chat endpoint.

Push transport for the onboarding chat. Each socket gets a fresh
connection id; the client binds it to its own stable session id with a
``register`` event. Disconnecting only drops the connection mapping, never
the session.

Routes: WS /ws/chat

Dependencies: onboarding_buddy.application.services.orchestrator, onboarding_buddy.core.session_store
System role: WebSocket chat HTTP API
"""

import json
import logging
import uuid
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from onboarding_buddy.application.services.orchestrator import ConversationOrchestrator
from onboarding_buddy.core.session_store import SessionStore
from onboarding_buddy.models.streaming import (
    ClientChatEvent,
    ClientEventType,
    ClientRegisterEvent,
    ServerEvent,
    ServerEventType,
)
from onboarding_buddy.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)
router = APIRouter(tags=["streaming"])


class ConnectionRegistry:
    """Open WebSocket connections keyed by connection id."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}

    def add(self, connection_id: str, websocket: WebSocket) -> None:
        self._connections[connection_id] = websocket

    def remove(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    async def send_to_connection(self, connection_id: str, event: ServerEvent) -> bool:
        """
        Push an event to one connection.

        Returns:
            bool: False if the connection is no longer open
        """
        websocket = self._connections.get(connection_id)
        if websocket is None:
            return False
        await websocket.send_json(event.to_dict())
        return True


def _error(code: str, message: str) -> ServerEvent:
    return ServerEvent(event=ServerEventType.ERROR, data={"code": code, "message": message})


@router.websocket("/ws/chat")
async def websocket_chat(websocket: WebSocket) -> None:
    """
    WebSocket endpoint for onboarding chat.

    Client sends:
        {"event": "register", "data": {"session_id": "..."}}
        {"event": "chat", "data": {"message": "...", "attachments": [...]}}
        {"event": "history"}
        {"event": "ping"}

    Server sends:
        {"event": "connected", "data": {"connection_id": "..."}}
        {"event": "registered", "data": {"session_id": "...", "has_history": false}}
        {"event": "welcome", "data": {"session_id": "...", "message": "..."}}
        {"event": "message", "data": {"session_id": "...", "message": "..."}}
        {"event": "history", "data": {"session_id": "...", "messages": [...]}}
        {"event": "error", "data": {"code": "...", "message": "..."}}
        {"event": "pong"}

    Args:
        websocket: WebSocket connection
    """
    store: SessionStore = websocket.app.state.session_store
    orchestrator: ConversationOrchestrator = websocket.app.state.orchestrator
    registry: ConnectionRegistry = websocket.app.state.connection_registry

    await websocket.accept()
    connection_id = uuid.uuid4().hex
    registry.add(connection_id, websocket)
    logger.info(
        "WebSocket connection established",
        extra={"connection_id": connection_id, "client_host": websocket.client},
    )

    await registry.send_to_connection(
        connection_id,
        ServerEvent(event=ServerEventType.CONNECTED, data={"connection_id": connection_id}),
    )

    try:
        while True:
            raw_data = await websocket.receive_text()
            try:
                data = json.loads(raw_data)
            except json.JSONDecodeError as e:
                logger.warning(
                    "Failed to parse JSON",
                    extra={"connection_id": connection_id, "error_msg": str(e)},
                )
                await registry.send_to_connection(connection_id, _error("INVALID_JSON", "Invalid JSON format"))
                continue

            if not isinstance(data, dict):
                await registry.send_to_connection(connection_id, _error("INVALID_EVENT", "Event must be an object"))
                continue

            event = await _dispatch(connection_id, data, store, orchestrator)
            await registry.send_to_connection(connection_id, event)

            if event.event is ServerEventType.REGISTERED:
                welcome = await _welcome(connection_id, event.data["session_id"], orchestrator)
                if welcome is not None:
                    await registry.send_to_connection(connection_id, welcome)

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected", extra={"connection_id": connection_id})
    finally:
        store.unmap_connection(connection_id)
        registry.remove(connection_id)


async def _dispatch(
    connection_id: str,
    data: dict[str, Any],
    store: SessionStore,
    orchestrator: ConversationOrchestrator,
) -> ServerEvent:
    """Handle one client event and return the event to send back."""
    event_type = data.get("event")
    payload = data.get("data") or {}

    if event_type == ClientEventType.PING.value:
        return ServerEvent(event=ServerEventType.PONG)

    if event_type == ClientEventType.REGISTER.value:
        try:
            register = ClientRegisterEvent.model_validate(payload)
        except ValidationError:
            return _error("MISSING_SESSION_ID", "session_id is required")
        session = store.get_or_create(register.session_id)
        store.map_connection(connection_id, register.session_id)
        return ServerEvent(
            event=ServerEventType.REGISTERED,
            data={"session_id": register.session_id, "has_history": session.has_history},
        )

    if event_type == ClientEventType.CHAT.value:
        session_id = store.resolve_connection(connection_id)
        if session_id is None:
            return _error("NOT_REGISTERED", "Register a session before chatting")
        try:
            chat = ClientChatEvent.model_validate(payload)
        except ValidationError:
            logger.warning("Invalid chat payload", extra={"connection_id": connection_id})
            return _error("MISSING_MESSAGE", "Message is required")

        try:
            reply = await orchestrator.handle_message(
                session_id,
                chat.message,
                [a.to_attachment() for a in chat.attachments],
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                "Chat handling failed",
                e,
                connection_id=connection_id,
                session_id=session_id,
            )
            return _error("CHAT_ERROR", "Something went wrong while answering. Please try again.")
        return ServerEvent(
            event=ServerEventType.MESSAGE,
            data={"session_id": session_id, "message": reply},
        )

    if event_type == ClientEventType.HISTORY.value:
        session_id = store.resolve_connection(connection_id)
        if session_id is None:
            return _error("NOT_REGISTERED", "Register a session before requesting history")
        messages = orchestrator.conversation_history(session_id)
        return ServerEvent(
            event=ServerEventType.HISTORY,
            data={
                "session_id": session_id,
                "messages": [m.model_dump(mode="json") for m in messages],
            },
        )

    logger.warning("Unknown event type", extra={"connection_id": connection_id, "event_type": str(event_type)})
    return _error("UNKNOWN_EVENT", f"Unknown event type: {event_type}")


async def _welcome(
    connection_id: str,
    session_id: str,
    orchestrator: ConversationOrchestrator,
) -> ServerEvent | None:
    try:
        reply = await orchestrator.handle_session_registered(session_id)
    except Exception as e:
        log_exception_with_context(
            logger,
            "Welcome message failed",
            e,
            connection_id=connection_id,
            session_id=session_id,
        )
        return None
    if reply is None:
        return None
    return ServerEvent(
        event=ServerEventType.WELCOME,
        data={"session_id": session_id, "message": reply},
    )
