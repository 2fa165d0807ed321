"""
Chat domain models and schemas.

Request/response schemas for chat operations.

Dependencies: pydantic
System role: Chat API contracts
"""

import base64
import binascii
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from onboarding_buddy.models.attachment import FileAttachment


class AttachmentPayload(BaseModel):
    """File sent alongside a chat message (already extracted upstream)."""

    original_file_name: str = Field(description="File name as uploaded")
    content_type: str = Field(default="application/octet-stream", description="MIME type")
    processed_content: str | None = Field(default=None, description="Extracted plain text")
    description: str | None = Field(default=None, description="Optional description")
    data: str | None = Field(default=None, description="Base64-encoded raw bytes")

    @field_validator("data")
    @classmethod
    def _validate_base64(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("data must be valid base64") from e
        return value

    def to_attachment(self) -> FileAttachment:
        """Convert to the domain attachment consumed by the orchestrator."""
        return FileAttachment(
            original_file_name=self.original_file_name,
            content_type=self.content_type,
            processed_content=self.processed_content,
            is_processed=self.processed_content is not None,
            description=self.description,
            raw_bytes=base64.b64decode(self.data) if self.data else None,
        )


class ChatRequest(BaseModel):
    """Request schema for chat messages."""

    message: str = Field(min_length=1, description="User question or message")
    attachments: list[AttachmentPayload] = Field(
        default_factory=list,
        description="Files attached to this message",
    )


class ChatResponse(BaseModel):
    """Response schema for chat messages."""

    session_id: str
    reply: str


class WelcomeResponse(BaseModel):
    """Response schema for session registration."""

    session_id: str
    reply: str | None = Field(
        default=None,
        description="Welcome message, only for sessions without history",
    )


class ChatMessageResponse(BaseModel):
    """Single chat message in history."""

    text: str
    is_user: bool
    turn_type: str
    timestamp: datetime


class ConversationHistoryResponse(BaseModel):
    """Response schema for chat history."""

    session_id: str
    messages: list[ChatMessageResponse]
    total: int = Field(description="Total number of messages")
