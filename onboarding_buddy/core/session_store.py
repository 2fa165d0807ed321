"""
In-memory conversation session store.

Process-wide store of conversation sessions keyed by client-supplied
session id, plus a separate connection-id to session-id map for the push
transport. Constructed once at startup and passed explicitly to the
orchestrator and the transport; a cancellable background task evicts
sessions idle past the timeout.

All mutation happens under one re-entrant lock inside synchronous methods,
so the lock is never held across an await.

Dependencies: asyncio, threading (stdlib), onboarding_buddy.models
System role: Conversation state lifecycle
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from onboarding_buddy.configs.sessions import SessionSettings
from onboarding_buddy.models.conversation import (
    ASSISTANT_PREFIX,
    HUMAN_PREFIX,
    ConversationSession,
    ConversationTurn,
    SessionSnapshot,
    TurnType,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    Concurrent map of session id to ConversationSession.

    Sessions are created on first reference (get-or-create), mutated by
    every turn and evicted after ``timeout_minutes`` of inactivity.
    Eviction is pure removal.
    """

    def __init__(
        self,
        settings: SessionSettings | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """
        Initialize an empty store.

        Args:
            settings: Session lifetimes and size limits
            clock: Time source, injectable for tests
        """
        self.settings = settings or SessionSettings()
        self._clock = clock
        self._lock = threading.RLock()
        self._sessions: dict[str, ConversationSession] = {}
        self._connections: dict[str, str] = {}
        self._sweep_task: asyncio.Task | None = None

    @property
    def timeout(self) -> timedelta:
        return timedelta(minutes=self.settings.timeout_minutes)

    # Sessions

    def get_or_create(self, session_id: str) -> ConversationSession:
        """Return the session for ``session_id``, creating it if needed, and touch it."""
        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = ConversationSession(
                    session_id=session_id,
                    created_at=now,
                    last_activity=now,
                )
                self._sessions[session_id] = session
                logger.info("Created conversation session", extra={"session_id": session_id})
            session.last_activity = now
            return session

    def get(self, session_id: str) -> ConversationSession | None:
        """Return the session without creating or touching it."""
        with self._lock:
            return self._sessions.get(session_id)

    def clear(self, session_id: str) -> bool:
        """Remove a session explicitly. Returns True if it existed."""
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("Cleared session", extra={"session_id": session_id})
        return removed

    def active_session_ids(self) -> list[str]:
        """Ids of sessions active within the timeout window."""
        cutoff = self._clock() - self.timeout
        with self._lock:
            return [sid for sid, s in self._sessions.items() if s.last_activity > cutoff]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    # Training context

    def has_training_context(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.get(session_id)
            return bool(session and session.has_initial_training_context)

    def mark_training_context_loaded(
        self,
        session_id: str,
        training_context: str = "",
        material_ids: list[str] | None = None,
    ) -> None:
        """Store the rendered context for the session and flag it as loaded."""
        now = self._clock()
        with self._lock:
            session = self.get_or_create(session_id)
            session.training_context = training_context
            session.loaded_material_ids = list(material_ids or [])
            session.training_context_loaded_at = now
            session.has_initial_training_context = True
        logger.info(
            "Training context loaded",
            extra={"session_id": session_id, "material_count": len(material_ids or [])},
        )

    def invalidate_all_training_contexts(self) -> int:
        """
        Force every live session to re-select training context on its next message.

        Conversation history is left untouched. Provider continuation
        tokens are dropped so the next request re-sends the full
        instructions built from the current material set.

        Returns:
            int: Number of sessions invalidated
        """
        with self._lock:
            for session in self._sessions.values():
                session.has_initial_training_context = False
                session.training_context_loaded_at = None
                session.training_context = ""
                session.loaded_material_ids = []
                session.last_provider_response_id = None
                session.provider_conversation_id = None
            count = len(self._sessions)
        logger.info("Invalidated training context", extra={"session_count": count})
        return count

    # History

    def get_history(self, session_id: str, max_turns: int | None = None) -> list[str]:
        """Last ``2 * max_turns`` entries of the flattened log, oldest first."""
        max_turns = self.settings.max_history_turns if max_turns is None else max_turns
        if max_turns <= 0:
            return []
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return []
            return list(session.conversation_messages[-2 * max_turns:])

    def get_turns(self, session_id: str) -> list[ConversationTurn]:
        with self._lock:
            session = self._sessions.get(session_id)
            return list(session.conversation_history) if session else []

    def append_turn(
        self,
        session_id: str,
        user_message: str,
        assistant_reply: str,
        materials_used: list[str] | None = None,
    ) -> None:
        """Record a completed user/assistant exchange."""
        now = self._clock()
        with self._lock:
            session = self.get_or_create(session_id)
            session.conversation_messages.append(f"{HUMAN_PREFIX}{user_message}")
            session.conversation_messages.append(f"{ASSISTANT_PREFIX}{assistant_reply}")
            overflow = len(session.conversation_messages) - self.settings.max_log_entries
            if overflow > 0:
                del session.conversation_messages[:overflow]
            session.conversation_history.append(
                ConversationTurn(
                    turn_type=TurnType.CONVERSATION,
                    user_query=user_message,
                    assistant_reply=assistant_reply,
                    timestamp=now,
                    materials_used=list(materials_used or []),
                )
            )

    def append_welcome(self, session_id: str, assistant_reply: str) -> None:
        """Record an assistant-only welcome turn."""
        now = self._clock()
        with self._lock:
            session = self.get_or_create(session_id)
            session.conversation_messages.append(f"{ASSISTANT_PREFIX}{assistant_reply}")
            overflow = len(session.conversation_messages) - self.settings.max_log_entries
            if overflow > 0:
                del session.conversation_messages[:overflow]
            session.conversation_history.append(
                ConversationTurn(
                    turn_type=TurnType.WELCOME,
                    user_query="",
                    assistant_reply=assistant_reply,
                    timestamp=now,
                    metadata={"welcome": "true"},
                )
            )

    def get_welcome_message(self, session_id: str) -> str | None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            for turn in session.conversation_history:
                if turn.turn_type is TurnType.WELCOME:
                    return turn.assistant_reply
            return None

    def update_provider_state(
        self,
        session_id: str,
        response_id: str | None,
        conversation_id: str | None = None,
    ) -> None:
        """Remember provider continuation tokens returned with the last reply."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return
            if response_id:
                session.last_provider_response_id = response_id
            if conversation_id:
                session.provider_conversation_id = conversation_id

    def snapshot(self, session_id: str, max_turns: int | None = None) -> SessionSnapshot:
        """
        Copy what an in-flight request needs, then release the lock.

        The orchestrator calls the provider with this snapshot and re-enters
        the store only to append the finished turn.
        """
        now = self._clock()
        with self._lock:
            session = self.get_or_create(session_id)
            return SessionSnapshot(
                session_id=session_id,
                training_context=session.training_context,
                history=self.get_history(session_id, max_turns),
                turn_count=len(session.conversation_history),
                provider_conversation_id=session.provider_conversation_id,
                last_provider_response_id=session.last_provider_response_id,
                context_is_stale=session.should_refresh_context(
                    now,
                    max_turns=self.settings.stale_turn_count,
                    stale_after=timedelta(minutes=self.settings.stale_after_minutes),
                ),
                loaded_material_ids=tuple(session.loaded_material_ids),
            )

    # Connections

    def map_connection(self, connection_id: str, session_id: str) -> None:
        with self._lock:
            self._connections[connection_id] = session_id
        logger.info(
            "Mapped connection to session",
            extra={"connection_id": connection_id, "session_id": session_id},
        )

    def unmap_connection(self, connection_id: str) -> str | None:
        """Drop a connection mapping. The session itself is kept."""
        with self._lock:
            session_id = self._connections.pop(connection_id, None)
        if session_id is not None:
            logger.info(
                "Removed connection mapping",
                extra={"connection_id": connection_id, "session_id": session_id},
            )
        return session_id

    def resolve_connection(self, connection_id: str) -> str | None:
        with self._lock:
            return self._connections.get(connection_id)

    # Expiry

    def sweep_expired(self, now: datetime | None = None) -> list[str]:
        """
        Remove sessions idle longer than the timeout.

        Args:
            now: Reference time (defaults to the store clock)

        Returns:
            list[str]: Ids of removed sessions
        """
        cutoff = (now or self._clock()) - self.timeout
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if s.last_activity < cutoff]
            for sid in expired:
                del self._sessions[sid]
        for sid in expired:
            logger.info("Removed expired session", extra={"session_id": sid})
        return expired

    async def _sweep_loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                self.sweep_expired()
            except Exception:
                logger.exception("Error during session cleanup")

    def start(self) -> None:
        """Start the background expiry sweep on the running event loop."""
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        interval = self.settings.sweep_interval_minutes * 60
        self._sweep_task = asyncio.get_running_loop().create_task(
            self._sweep_loop(interval),
            name="session-expiry-sweep",
        )
        logger.info("Session expiry sweep started", extra={"interval_seconds": interval})

    async def stop(self) -> None:
        """Cancel the background sweep and wait for it to finish."""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Session expiry sweep stopped")
