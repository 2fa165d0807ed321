"""
Test suite for ConversationOrchestrator.

Tests the per-message state machine with an in-memory material store, a
real session store and payload builder, and a mocked provider client.

System role: Verification of chat orchestration
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from onboarding_buddy.application.services.orchestrator import (
    WELCOME_DIRECTIVE,
    ConversationOrchestrator,
)
from onboarding_buddy.configs.provider import ProviderSettings
from onboarding_buddy.core.degraded_responses import (
    CONTENT_TOO_LARGE_REPLY,
    DEFAULT_WELCOME_REPLY,
    DEGRADED_MODE_REPLY,
    EMPTY_REPLY_PLACEHOLDER,
    RATE_LIMIT_REPLY,
)
from onboarding_buddy.core.exceptions import (
    ContentTooLargeError,
    RateLimitedError,
    UpstreamFailureError,
)
from onboarding_buddy.core.material_store import InMemoryMaterialStore
from onboarding_buddy.core.provider.payload_builder import ProviderPayloadBuilder
from onboarding_buddy.core.relevance import MaterialRelevanceSelector
from onboarding_buddy.core.session_store import SessionStore
from onboarding_buddy.models.attachment import FileAttachment
from onboarding_buddy.models.conversation import TurnType
from onboarding_buddy.models.provider import ProviderFamily


def chat_body(text: str, response_id: str = "chatcmpl-1") -> str:
    return json.dumps({"id": response_id, "choices": [{"message": {"role": "assistant", "content": text}}]})


@pytest.fixture
def mock_provider_client() -> MagicMock:
    """Provide a configured provider client returning a fixed reply."""
    client = MagicMock()
    client.is_configured = True
    client.send = AsyncMock(return_value=chat_body("<p>Hello!</p>"))
    return client


@pytest.fixture
def selector() -> MagicMock:
    """Provide a spy around the real selector."""
    return MagicMock(wraps=MaterialRelevanceSelector())


@pytest.fixture
def material_store(sample_materials) -> InMemoryMaterialStore:
    return InMemoryMaterialStore(sample_materials)


@pytest.fixture
def orchestrator(
    store: SessionStore,
    material_store: InMemoryMaterialStore,
    provider_settings: ProviderSettings,
    mock_provider_client: MagicMock,
    selector: MagicMock,
) -> ConversationOrchestrator:
    return ConversationOrchestrator(
        store=store,
        material_store=material_store,
        payload_builder=ProviderPayloadBuilder(provider_settings),
        provider_client=mock_provider_client,
        selector=selector,
    )


def sent_messages(client: MagicMock, call: int = -1) -> list[dict]:
    request = client.send.await_args_list[call].args[0]
    return request.body["messages"]


class TestHandleMessage:
    """Test suite for handle_message()."""

    @pytest.mark.asyncio
    async def test_success_should_return_reply_and_record_turn(
        self, orchestrator: ConversationOrchestrator, store: SessionStore
    ) -> None:
        reply = await orchestrator.handle_message("abc", "Where do I find the onboarding checklist?")

        assert reply == "<p>Hello!</p>"
        assert store.get_history("abc") == [
            "Human: Where do I find the onboarding checklist?",
            "Assistant: <p>Hello!</p>",
        ]
        turn = store.get_turns("abc")[0]
        assert turn.turn_type is TurnType.CONVERSATION
        assert turn.materials_used[0] == "checklist"

    @pytest.mark.asyncio
    async def test_first_message_should_load_context_once(
        self,
        orchestrator: ConversationOrchestrator,
        store: SessionStore,
        selector: MagicMock,
    ) -> None:
        await orchestrator.handle_message("abc", "expense receipts")
        assert selector.select.call_count == 1
        assert store.has_training_context("abc") is True

        await orchestrator.handle_message("abc", "benefits")
        assert selector.select.call_count == 1

    @pytest.mark.asyncio
    async def test_system_prompt_should_carry_selected_context(
        self, orchestrator: ConversationOrchestrator, mock_provider_client: MagicMock
    ) -> None:
        await orchestrator.handle_message("abc", "expense receipts")

        system = sent_messages(mock_provider_client)[0]
        assert system["role"] == "system"
        assert system["content"].startswith("**Expense Policy** (Category: Finance)")

    @pytest.mark.asyncio
    async def test_second_message_should_replay_history(
        self, orchestrator: ConversationOrchestrator, mock_provider_client: MagicMock
    ) -> None:
        await orchestrator.handle_message("abc", "first question")
        await orchestrator.handle_message("abc", "second question")

        messages = sent_messages(mock_provider_client)
        assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
        assert messages[1]["content"] == "first question"
        assert messages[-1]["content"] == "second question"

    @pytest.mark.asyncio
    async def test_invalidation_should_trigger_reselection(
        self,
        orchestrator: ConversationOrchestrator,
        store: SessionStore,
        selector: MagicMock,
    ) -> None:
        await orchestrator.handle_message("abc", "benefits")
        store.invalidate_all_training_contexts()
        await orchestrator.handle_message("abc", "benefits again")

        assert selector.select.call_count == 2
        assert len(store.get_turns("abc")) == 2

    @pytest.mark.asyncio
    async def test_attachments_should_reach_the_request(
        self, orchestrator: ConversationOrchestrator, mock_provider_client: MagicMock
    ) -> None:
        doc = FileAttachment(
            original_file_name="notes.txt",
            content_type="text/plain",
            processed_content="Desk 4B",
            is_processed=True,
        )
        await orchestrator.handle_message("abc", "Where do I sit?", [doc])

        assert sent_messages(mock_provider_client)[-1]["content"].endswith("File: notes.txt\nDesk 4B")

    @pytest.mark.asyncio
    async def test_unconfigured_provider_should_return_degraded_reply(
        self, orchestrator: ConversationOrchestrator, mock_provider_client: MagicMock, store: SessionStore
    ) -> None:
        mock_provider_client.is_configured = False

        reply = await orchestrator.handle_message("abc", "hello")

        assert reply == DEGRADED_MODE_REPLY
        mock_provider_client.send.assert_not_awaited()
        assert store.get_turns("abc") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (RateLimitedError("429", status_code=429), RATE_LIMIT_REPLY),
            (ContentTooLargeError("413", status_code=413), CONTENT_TOO_LARGE_REPLY),
            (UpstreamFailureError("boom", status_code=500), DEGRADED_MODE_REPLY),
        ],
    )
    async def test_provider_errors_should_map_to_canned_replies(
        self,
        orchestrator: ConversationOrchestrator,
        mock_provider_client: MagicMock,
        store: SessionStore,
        error: Exception,
        expected: str,
    ) -> None:
        mock_provider_client.send.side_effect = error

        reply = await orchestrator.handle_message("abc", "hello")

        assert reply == expected
        assert store.get_turns("abc") == []
        assert store.get_history("abc") == []

    @pytest.mark.asyncio
    async def test_unexpected_send_error_should_return_degraded_reply(
        self, orchestrator: ConversationOrchestrator, mock_provider_client: MagicMock, store: SessionStore
    ) -> None:
        mock_provider_client.send.side_effect = RuntimeError(
            "Cannot send a request, as the client has been closed."
        )

        reply = await orchestrator.handle_message("abc", "hello")

        assert reply == DEGRADED_MODE_REPLY
        assert store.get_turns("abc") == []

    @pytest.mark.asyncio
    async def test_malformed_reply_should_not_be_recorded(
        self, orchestrator: ConversationOrchestrator, mock_provider_client: MagicMock, store: SessionStore
    ) -> None:
        mock_provider_client.send.return_value = json.dumps({"unexpected": True})

        reply = await orchestrator.handle_message("abc", "hello")

        assert reply == EMPTY_REPLY_PLACEHOLDER
        assert store.get_turns("abc") == []

    @pytest.mark.asyncio
    async def test_material_store_failure_should_fall_back_to_persona(
        self, orchestrator: ConversationOrchestrator, store: SessionStore
    ) -> None:
        orchestrator.material_store = MagicMock()
        orchestrator.material_store.list_active = AsyncMock(side_effect=RuntimeError("db down"))

        reply = await orchestrator.handle_message("abc", "hello")

        assert reply == "<p>Hello!</p>"
        assert store.has_training_context("abc") is False

    @pytest.mark.asyncio
    async def test_continuation_tokens_should_be_stored(
        self,
        store: SessionStore,
        material_store: InMemoryMaterialStore,
        mock_provider_client: MagicMock,
    ) -> None:
        settings = ProviderSettings(
            api_url="https://llm.example.test/v1/responses",
            provider_family=ProviderFamily.FLATTENED_INSTRUCTIONS,
            stateful_mode=True,
        )
        orchestrator = ConversationOrchestrator(
            store=store,
            material_store=material_store,
            payload_builder=ProviderPayloadBuilder(settings),
            provider_client=mock_provider_client,
        )
        mock_provider_client.send.return_value = json.dumps({"id": "resp_1", "output_text": "<p>One</p>"})

        await orchestrator.handle_message("abc", "first")
        await orchestrator.handle_message("abc", "second")

        second_body = mock_provider_client.send.await_args_list[1].args[0].body
        assert second_body["previous_response_id"] == "resp_1"
        assert second_body["input"] == "second"

    @pytest.mark.asyncio
    async def test_invalidation_should_resend_instructions_for_continuation(
        self,
        store: SessionStore,
        material_store: InMemoryMaterialStore,
        mock_provider_client: MagicMock,
    ) -> None:
        settings = ProviderSettings(
            api_url="https://llm.example.test/v1/responses",
            provider_family=ProviderFamily.FLATTENED_INSTRUCTIONS,
            stateful_mode=True,
        )
        orchestrator = ConversationOrchestrator(
            store=store,
            material_store=material_store,
            payload_builder=ProviderPayloadBuilder(settings),
            provider_client=mock_provider_client,
        )
        mock_provider_client.send.return_value = json.dumps({"id": "resp_1", "output_text": "<p>One</p>"})

        await orchestrator.handle_message("abc", "first")
        store.invalidate_all_training_contexts()
        await orchestrator.handle_message("abc", "benefits enrollment")

        second_body = mock_provider_client.send.await_args_list[1].args[0].body
        assert "previous_response_id" not in second_body
        assert "Benefits Overview" in second_body["instructions"]
        assert store.get("abc").last_provider_response_id == "resp_1"


class TestHandleSessionRegistered:
    """Test suite for the welcome sub-flow."""

    @pytest.mark.asyncio
    async def test_new_session_should_get_welcome_turn(
        self,
        orchestrator: ConversationOrchestrator,
        store: SessionStore,
        selector: MagicMock,
        mock_provider_client: MagicMock,
    ) -> None:
        reply = await orchestrator.handle_session_registered("abc")

        assert reply == "<p>Hello!</p>"
        assert store.get_history("abc") == ["Assistant: <p>Hello!</p>"]
        assert store.get_turns("abc")[0].turn_type is TurnType.WELCOME
        assert selector.select.call_args.args[1] == ""
        assert sent_messages(mock_provider_client)[-1]["content"] == WELCOME_DIRECTIVE

    @pytest.mark.asyncio
    async def test_session_with_history_should_get_no_welcome(
        self,
        orchestrator: ConversationOrchestrator,
        store: SessionStore,
        mock_provider_client: MagicMock,
    ) -> None:
        store.append_turn("abc", "q", "a")

        assert await orchestrator.handle_session_registered("abc") is None
        mock_provider_client.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_welcome_should_not_be_replayed_as_a_pair(
        self, orchestrator: ConversationOrchestrator, mock_provider_client: MagicMock
    ) -> None:
        await orchestrator.handle_session_registered("abc")
        await orchestrator.handle_message("abc", "What first?")

        messages = sent_messages(mock_provider_client)
        assert [m["role"] for m in messages] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_failed_welcome_should_not_be_recorded(
        self, orchestrator: ConversationOrchestrator, mock_provider_client: MagicMock, store: SessionStore
    ) -> None:
        mock_provider_client.send.side_effect = RateLimitedError("429", status_code=429)

        assert await orchestrator.handle_session_registered("abc") == DEFAULT_WELCOME_REPLY
        assert store.get_turns("abc") == []

    @pytest.mark.asyncio
    async def test_unconfigured_provider_should_return_static_welcome(
        self, orchestrator: ConversationOrchestrator, mock_provider_client: MagicMock, store: SessionStore
    ) -> None:
        mock_provider_client.is_configured = False

        assert await orchestrator.handle_session_registered("abc") == DEFAULT_WELCOME_REPLY
        assert store.get_history("abc") == []


class TestConversationHistory:
    """Test suite for history rendering."""

    @pytest.mark.asyncio
    async def test_history_should_skip_user_side_of_welcome(
        self, orchestrator: ConversationOrchestrator
    ) -> None:
        await orchestrator.handle_session_registered("abc")
        await orchestrator.handle_message("abc", "Hi")

        messages = orchestrator.conversation_history("abc")

        assert [(m.is_user, m.turn_type) for m in messages] == [
            (False, "welcome"),
            (True, "conversation"),
            (False, "conversation"),
        ]
        assert messages[1].text == "Hi"

    def test_unknown_session_should_have_empty_history(self, orchestrator: ConversationOrchestrator) -> None:
        assert orchestrator.conversation_history("nobody") == []
