"""
Conversation session state.

In-memory records held by the session store. These are plain mutable
dataclasses rather than pydantic models: they are never serialized as a
whole and are mutated under the store's lock on every turn.

Dependencies: dataclasses (stdlib)
System role: Conversation state records
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

HUMAN_PREFIX = "Human: "
ASSISTANT_PREFIX = "Assistant: "


class TurnType(str, Enum):
    """Kind of exchange stored in a session's history."""

    WELCOME = "welcome"
    CONVERSATION = "conversation"


@dataclass
class ConversationTurn:
    """One exchange unit: a conversation turn or an assistant-only welcome."""

    turn_type: TurnType
    user_query: str
    assistant_reply: str
    timestamp: datetime
    metadata: dict[str, str] = field(default_factory=dict)
    materials_used: list[str] = field(default_factory=list)


@dataclass
class ConversationSession:
    """
    Per-session conversation state.

    Attributes:
        session_id: Client-supplied identity, stable across reconnects
        created_at: First reference time
        last_activity: Refreshed on every store access
        conversation_history: Structured turns, append-only except on clear
        conversation_messages: Flattened "Human: ..."/"Assistant: ..." log
        has_initial_training_context: Training context selected for this session
        training_context_loaded_at: When the context was selected
        training_context: Rendered material context reused between messages
        loaded_material_ids: Materials behind ``training_context``
        provider_conversation_id: Server-side conversation token
        last_provider_response_id: Server-side continuation token
    """

    session_id: str
    created_at: datetime
    last_activity: datetime
    conversation_history: list[ConversationTurn] = field(default_factory=list)
    conversation_messages: list[str] = field(default_factory=list)
    has_initial_training_context: bool = False
    training_context_loaded_at: datetime | None = None
    training_context: str = ""
    loaded_material_ids: list[str] = field(default_factory=list)
    provider_conversation_id: str | None = None
    last_provider_response_id: str | None = None

    @property
    def has_history(self) -> bool:
        return bool(self.conversation_history)

    def should_refresh_context(
        self,
        now: datetime,
        max_turns: int = 20,
        stale_after: timedelta = timedelta(hours=1),
    ) -> bool:
        """
        Whether provider-side context has gone stale.

        Stale means the conversation grew past ``max_turns`` turns or the
        last turn is older than ``stale_after``.
        """
        if len(self.conversation_history) > max_turns:
            return True
        if self.conversation_history:
            return now - self.conversation_history[-1].timestamp > stale_after
        return False


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable copy of the state an in-flight request needs."""

    session_id: str
    training_context: str
    history: list[str]
    turn_count: int
    provider_conversation_id: str | None
    last_provider_response_id: str | None
    context_is_stale: bool
    loaded_material_ids: tuple[str, ...] = ()
