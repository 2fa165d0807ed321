"""
Conversation orchestrator for onboarding chat.

Per-message entry point shared by the REST and WebSocket transports.
Decides whether training context must be (re)selected, snapshots the
session, builds the system prompt and provider request, sends it, and
records the finished turn. Every failure is mapped to a canned reply so
the transport always receives plain text.

Dependencies: onboarding_buddy.core, onboarding_buddy.boundary.llm
System role: Chat orchestration layer
"""

import logging
from collections.abc import Sequence

from onboarding_buddy.boundary.llm.provider_client import ProviderClient
from onboarding_buddy.configs.sessions import SessionSettings
from onboarding_buddy.core.degraded_responses import (
    CONTENT_TOO_LARGE_REPLY,
    DEFAULT_WELCOME_REPLY,
    DEGRADED_MODE_REPLY,
    RATE_LIMIT_REPLY,
)
from onboarding_buddy.core.exceptions import (
    ContentTooLargeError,
    ProviderError,
    RateLimitedError,
)
from onboarding_buddy.core.material_store import MaterialStore
from onboarding_buddy.core.prompt_builder import PromptBuilder
from onboarding_buddy.core.provider.payload_builder import ProviderPayloadBuilder
from onboarding_buddy.core.relevance import MaterialRelevanceSelector
from onboarding_buddy.core.session_store import SessionStore
from onboarding_buddy.models.attachment import FileAttachment
from onboarding_buddy.models.chat import ChatMessageResponse
from onboarding_buddy.models.conversation import TurnType
from onboarding_buddy.observability.log_utils import log_exception_with_context, preview

logger = logging.getLogger(__name__)

WELCOME_DIRECTIVE = (
    "A new employee has just opened the onboarding chat. Speak directly as their onboarding "
    "assistant, not as a template: welcome them to the team, introduce yourself, ask about "
    "their role or department, and present the first concrete onboarding task from the "
    "training materials."
)


class ConversationOrchestrator:
    """
    Runs one chat exchange end to end.

    The store, material store and provider client are constructed once at
    startup and passed in; the orchestrator holds no session state itself.
    """

    def __init__(
        self,
        store: SessionStore,
        material_store: MaterialStore,
        payload_builder: ProviderPayloadBuilder,
        provider_client: ProviderClient,
        selector: MaterialRelevanceSelector | None = None,
        prompt_builder: PromptBuilder | None = None,
        session_settings: SessionSettings | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            store: Process-wide session store
            material_store: Source of active training materials
            payload_builder: Request builder for the configured provider family
            provider_client: Transport to the upstream provider
            selector: Training material selector
            prompt_builder: System prompt builder
            session_settings: History window size
        """
        self.store = store
        self.material_store = material_store
        self.payload_builder = payload_builder
        self.provider_client = provider_client
        self.selector = selector or MaterialRelevanceSelector()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.max_history_turns = (session_settings or store.settings).max_history_turns

    async def handle_message(
        self,
        session_id: str,
        text: str,
        attachments: Sequence[FileAttachment] | None = None,
    ) -> str:
        """
        Answer a user message.

        Flow:
        1. Short-circuit with the degraded notice when no provider is configured
        2. Select training context on the session's first message (or after invalidation)
        3. Snapshot recent history and continuation tokens
        4. Build system prompt and provider request
        5. Send, extract and record the turn on success

        Args:
            session_id: Client-supplied session id
            text: User message
            attachments: Files sent with this message

        Returns:
            str: Reply text, or a canned message when anything failed
        """
        logger.info(
            "Handling chat message",
            extra={"session_id": session_id, "message_preview": preview(text, 80)},
        )
        reply, _ = await self._exchange(session_id, text, attachments, TurnType.CONVERSATION)
        return reply

    async def handle_session_registered(self, session_id: str) -> str | None:
        """
        Generate the welcome message for a newly registered session.

        Args:
            session_id: Client-supplied session id

        Returns:
            str | None: Welcome reply (a static welcome when generation fails),
                or None when the session already has history
        """
        session = self.store.get_or_create(session_id)
        if session.has_history:
            logger.info("Session has history, skipping welcome", extra={"session_id": session_id})
            return None
        reply, ok = await self._exchange(session_id, WELCOME_DIRECTIVE, None, TurnType.WELCOME)
        return reply if ok else DEFAULT_WELCOME_REPLY

    def conversation_history(self, session_id: str) -> list[ChatMessageResponse]:
        """
        Render a session's turns for display, oldest first.

        Welcome turns contribute only the assistant message.
        """
        messages: list[ChatMessageResponse] = []
        for turn in self.store.get_turns(session_id):
            if turn.user_query:
                messages.append(
                    ChatMessageResponse(
                        text=turn.user_query,
                        is_user=True,
                        turn_type=turn.turn_type.value,
                        timestamp=turn.timestamp,
                    )
                )
            messages.append(
                ChatMessageResponse(
                    text=turn.assistant_reply,
                    is_user=False,
                    turn_type=turn.turn_type.value,
                    timestamp=turn.timestamp,
                )
            )
        return messages

    async def _exchange(
        self,
        session_id: str,
        text: str,
        attachments: Sequence[FileAttachment] | None,
        turn_type: TurnType,
    ) -> tuple[str, bool]:
        """Run one exchange; returns the reply text and whether the turn was recorded."""
        if not self.provider_client.is_configured:
            logger.warning("No provider configured, returning degraded reply", extra={"session_id": session_id})
            return DEGRADED_MODE_REPLY, False

        self.store.get_or_create(session_id)
        if not self.store.has_training_context(session_id):
            query = "" if turn_type is TurnType.WELCOME else text
            await self._load_training_context(session_id, query)

        snapshot = self.store.snapshot(session_id, self.max_history_turns)
        system_prompt = self.prompt_builder.build(snapshot.training_context)
        request = self.payload_builder.build_request(
            text,
            system_prompt,
            snapshot.history,
            attachments=attachments,
            session_state=snapshot,
        )

        try:
            body = await self.provider_client.send(request)
        except RateLimitedError as e:
            logger.warning("Provider rate limited", extra={"session_id": session_id, "error_msg": e.message})
            return RATE_LIMIT_REPLY, False
        except ContentTooLargeError as e:
            logger.warning("Provider rejected content size", extra={"session_id": session_id, "error_msg": e.message})
            return CONTENT_TOO_LARGE_REPLY, False
        except ProviderError as e:
            log_exception_with_context(logger, "Provider request failed", e, session_id=session_id)
            return DEGRADED_MODE_REPLY, False
        except Exception as e:
            log_exception_with_context(logger, "Unexpected error calling provider", e, session_id=session_id)
            return DEGRADED_MODE_REPLY, False

        reply = self.payload_builder.extract_reply(body)
        if not reply.ok:
            return reply.text, False

        if turn_type is TurnType.WELCOME:
            self.store.append_welcome(session_id, reply.text)
        else:
            self.store.append_turn(
                session_id,
                text,
                reply.text,
                materials_used=list(snapshot.loaded_material_ids),
            )
        self.store.update_provider_state(session_id, reply.response_id, reply.conversation_id)

        logger.info(
            "Chat exchange complete",
            extra={"session_id": session_id, "turn_type": turn_type.value, "reply_length": len(reply.text)},
        )
        return reply.text, True

    async def _load_training_context(self, session_id: str, query: str) -> None:
        """
        Select and render training materials for the session.

        A failing material store leaves the session unmarked so the next
        message retries; this message proceeds with the default persona.
        """
        try:
            materials = await self.material_store.list_active()
        except Exception as e:
            log_exception_with_context(logger, "Failed to load training materials", e, session_id=session_id)
            return

        selected = self.selector.select(materials, query)
        context = self.selector.render(selected)
        self.store.mark_training_context_loaded(
            session_id,
            context,
            material_ids=[m.id for m in selected],
        )
