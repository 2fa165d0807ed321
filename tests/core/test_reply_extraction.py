"""
Test suite for reply extraction and sanitation.

System role: Verification of provider response parsing
"""

import json

import pytest

from onboarding_buddy.core.degraded_responses import (
    EMPTY_REPLY_PLACEHOLDER,
    EXTRACTION_FAILURE_REPLY,
)
from onboarding_buddy.core.provider.reply_extraction import (
    extract_reply,
    extract_reply_text,
    sanitize_reply,
)
from onboarding_buddy.models.provider import ProviderFamily


class TestSanitizeReply:
    """Test suite for sanitize_reply()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("```html\n<p>Hi</p>\n```", "<p>Hi</p>"),
            ("```\n<p>Hi</p>```", "<p>Hi</p>"),
            ("  <p>Hi</p>  \n", "<p>Hi</p>"),
            ("<p>a</p>```json\n{}\n```<p>b</p>", "<p>a</p>{}\n<p>b</p>"),
            ("</p>```Thanks", "</p>Thanks"),
            ("Use ```npm install``` first", "Use npm install first"),
        ],
    )
    def test_fences_should_be_stripped(self, raw: str, expected: str) -> None:
        assert sanitize_reply(raw) == expected


class TestExtractReply:
    """Test suite for extract_reply() across families."""

    def test_chat_body_should_yield_message_content(self) -> None:
        body = {"id": "chatcmpl-1", "choices": [{"message": {"role": "assistant", "content": "<p>Hi</p>"}}]}
        reply = extract_reply(ProviderFamily.CHAT, json.dumps(body))
        assert reply.ok is True
        assert reply.text == "<p>Hi</p>"

    def test_system_field_body_should_join_text_blocks(self) -> None:
        body = {
            "id": "msg_1",
            "content": [
                {"type": "text", "text": "<p>One</p>"},
                {"type": "tool_use", "name": "x"},
                {"type": "text", "text": "<p>Two</p>"},
            ],
        }
        reply = extract_reply(ProviderFamily.SYSTEM_FIELD, body)
        assert reply.text == "<p>One</p><p>Two</p>"

    def test_flattened_body_should_prefer_output_text(self) -> None:
        body = {"id": "resp_1", "output_text": "```html\n<p>Hi</p>\n```"}
        reply = extract_reply(ProviderFamily.FLATTENED_INSTRUCTIONS, body)
        assert reply.text == "<p>Hi</p>"
        assert reply.response_id == "resp_1"

    def test_flattened_body_should_read_output_blocks_and_conversation(self) -> None:
        body = {
            "id": "resp_2",
            "conversation": {"id": "conv_9"},
            "output": [
                {"type": "reasoning", "summary": []},
                {"type": "message", "content": [{"type": "output_text", "text": "<p>Done</p>"}]},
            ],
        }
        reply = extract_reply(ProviderFamily.FLATTENED_INSTRUCTIONS, body)
        assert reply.text == "<p>Done</p>"
        assert reply.conversation_id == "conv_9"

    @pytest.mark.parametrize("family", list(ProviderFamily))
    def test_missing_fields_should_return_placeholder(self, family: ProviderFamily) -> None:
        reply = extract_reply(family, "{}")
        assert reply.ok is False
        assert reply.text == EMPTY_REPLY_PLACEHOLDER

    @pytest.mark.parametrize("family", list(ProviderFamily))
    def test_unparsable_body_should_return_failure_text(self, family: ProviderFamily) -> None:
        reply = extract_reply(family, "<html>Bad Gateway</html>")
        assert reply.ok is False
        assert reply.text == EXTRACTION_FAILURE_REPLY

    def test_empty_body_string_should_not_raise(self) -> None:
        assert extract_reply_text(ProviderFamily.CHAT, "") == EXTRACTION_FAILURE_REPLY

    def test_blank_reply_should_return_placeholder(self) -> None:
        body = {"choices": [{"message": {"content": "```\n```"}}]}
        reply = extract_reply(ProviderFamily.CHAT, body)
        assert reply.ok is False
        assert reply.text == EMPTY_REPLY_PLACEHOLDER

    def test_non_object_json_should_return_placeholder(self) -> None:
        assert extract_reply_text(ProviderFamily.SYSTEM_FIELD, "[1, 2]") == EMPTY_REPLY_PLACEHOLDER
