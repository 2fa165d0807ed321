"""
Event schemas for the WebSocket chat transport.

Dependencies: pydantic
System role: Push-transport protocol schemas
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from onboarding_buddy.models.chat import AttachmentPayload


class ServerEventType(str, Enum):
    """Server-to-client event types."""

    CONNECTED = "connected"
    REGISTERED = "registered"
    WELCOME = "welcome"
    MESSAGE = "message"
    HISTORY = "history"
    ERROR = "error"
    PONG = "pong"


class ClientEventType(str, Enum):
    """Client-to-server event types."""

    REGISTER = "register"
    CHAT = "chat"
    HISTORY = "history"
    PING = "ping"


class ServerEvent(BaseModel):
    """
    Event pushed to a connection.

    Attributes:
        event: Event type identifier
        data: Event-specific payload
    """

    event: ServerEventType
    data: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {"event": self.event.value, "data": self.data}


class ClientRegisterEvent(BaseModel):
    """Payload of a ``register`` event."""

    session_id: str = Field(min_length=1)


class ClientChatEvent(BaseModel):
    """Payload of a ``chat`` event."""

    message: str = Field(min_length=1)
    attachments: list[AttachmentPayload] = Field(default_factory=list)
