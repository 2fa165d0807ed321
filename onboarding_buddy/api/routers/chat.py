"""Chat API endpoints.

Routes:
- POST /sessions/{session_id}/chat - Send a chat message
- POST /sessions/{session_id}/welcome - Register a session and get its welcome message
- GET /sessions/{session_id}/history - Conversation history for display

Replies are always plain text: provider failures arrive as canned messages
with a 200 status, never as HTTP errors.

Dependencies: onboarding_buddy.application.services.orchestrator
System role: Chat messaging HTTP API
"""

import logging

from fastapi import APIRouter, Depends

from onboarding_buddy.api.deps import get_orchestrator
from onboarding_buddy.application.services.orchestrator import ConversationOrchestrator
from onboarding_buddy.models.chat import (
    ChatRequest,
    ChatResponse,
    ConversationHistoryResponse,
    WelcomeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["chat"])


@router.post("/{session_id}/chat", response_model=ChatResponse)
async def chat(
    session_id: str,
    request: ChatRequest,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> ChatResponse:
    """Send a chat message to a session.

    Flow:
    1. Convert attachment payloads to domain attachments
    2. Run the exchange through the orchestrator
    3. Return the reply text

    Args:
        request: ChatRequest with message and optional attachments
        session_id: Client-supplied session id
        orchestrator: Injected ConversationOrchestrator

    Returns:
        ChatResponse: Session id and reply text
    """
    attachments = [a.to_attachment() for a in request.attachments]
    reply = await orchestrator.handle_message(session_id, request.message, attachments)
    return ChatResponse(session_id=session_id, reply=reply)


@router.post("/{session_id}/welcome", response_model=WelcomeResponse)
async def welcome(
    session_id: str,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> WelcomeResponse:
    """Register a session; returns a welcome reply only if it has no history yet."""
    reply = await orchestrator.handle_session_registered(session_id)
    return WelcomeResponse(session_id=session_id, reply=reply)


@router.get("/{session_id}/history", response_model=ConversationHistoryResponse)
async def history(
    session_id: str,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> ConversationHistoryResponse:
    """Conversation history, oldest first. Unknown sessions return an empty list."""
    messages = orchestrator.conversation_history(session_id)
    return ConversationHistoryResponse(
        session_id=session_id,
        messages=messages,
        total=len(messages),
    )
