"""
Reply extraction for each provider family.

Pulls the reply text (and, for the flattened-instructions family, the
continuation tokens) out of a provider response body. Extraction never
raises: a structurally missing field yields a fixed placeholder and an
unparsable body yields the extraction-failure text, both flagged with
``ok=False``.

Dependencies: json, re (stdlib), onboarding_buddy.core
System role: Provider response parsing and output sanitation
"""

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from onboarding_buddy.core.degraded_responses import (
    EMPTY_REPLY_PLACEHOLDER,
    EXTRACTION_FAILURE_REPLY,
)
from onboarding_buddy.core.exceptions import ReplyExtractionError
from onboarding_buddy.core.provider.schemas import ProviderReply
from onboarding_buddy.models.provider import ProviderFamily

logger = logging.getLogger(__name__)

# A language tag only counts when the rest of the fence line is empty
_TAGGED_FENCE = re.compile(r"```[\w+.-]*[ \t]*\r?\n")
_BARE_FENCE = re.compile(r"```")


def sanitize_reply(text: str) -> str:
    """Strip fenced-code delimiters (with or without language tag) and trim."""
    return _BARE_FENCE.sub("", _TAGGED_FENCE.sub("", text)).strip()


def _join_text_blocks(blocks: Any, text_types: tuple[str, ...]) -> str:
    if isinstance(blocks, str):
        return blocks
    if not isinstance(blocks, list):
        raise ReplyExtractionError("content is neither text nor a block list")
    texts = [
        b["text"]
        for b in blocks
        if isinstance(b, dict) and b.get("type") in text_types and isinstance(b.get("text"), str)
    ]
    return "".join(texts)


def _extract_chat(data: dict[str, Any]) -> ProviderReply:
    # {"choices": [{"message": {"role": "assistant", "content": "..."}}]}
    content = data["choices"][0]["message"]["content"]
    return ProviderReply(text=_join_text_blocks(content, ("text",)), response_id=data.get("id"))


def _extract_system_field(data: dict[str, Any]) -> ProviderReply:
    # {"id": "...", "content": [{"type": "text", "text": "..."}]}
    return ProviderReply(
        text=_join_text_blocks(data["content"], ("text",)),
        response_id=data.get("id"),
    )


def _extract_flattened(data: dict[str, Any]) -> ProviderReply:
    # {"id": "resp_...", "output_text": "...", "output": [{"type": "message", "content": [...]}]}
    text = data.get("output_text")
    if not isinstance(text, str) or not text.strip():
        texts = [
            _join_text_blocks(item.get("content", []), ("output_text", "text"))
            for item in data["output"]
            if isinstance(item, dict) and item.get("type", "message") == "message"
        ]
        text = "".join(texts)

    conversation = data.get("conversation")
    if isinstance(conversation, dict):
        conversation = conversation.get("id")
    return ProviderReply(
        text=text,
        response_id=data.get("id"),
        conversation_id=conversation if isinstance(conversation, str) else None,
    )


EXTRACTORS: dict[ProviderFamily, Callable[[dict[str, Any]], ProviderReply]] = {
    ProviderFamily.CHAT: _extract_chat,
    ProviderFamily.FLATTENED_INSTRUCTIONS: _extract_flattened,
    ProviderFamily.SYSTEM_FIELD: _extract_system_field,
}


def extract_reply(family: ProviderFamily, body: str | bytes | dict[str, Any] | None) -> ProviderReply:
    """
    Extract and sanitize the reply from a provider response body.

    Args:
        family: Provider family that produced the body
        body: Raw JSON text or already-decoded JSON object

    Returns:
        ProviderReply: Reply text and continuation tokens; ``ok`` is False
        when the placeholder or failure text was substituted
    """
    if isinstance(body, (str, bytes)):
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(
                "Provider response is not valid JSON",
                extra={"provider_family": family.value, "error_msg": str(e)},
            )
            return ProviderReply(text=EXTRACTION_FAILURE_REPLY, ok=False)
    else:
        data = body

    try:
        if not isinstance(data, dict):
            raise ReplyExtractionError("response body is not a JSON object")
        reply = EXTRACTORS[family](data)
    except (KeyError, IndexError, TypeError, ReplyExtractionError) as e:
        logger.warning(
            "Provider response missing reply field",
            extra={"provider_family": family.value, "error_type": type(e).__name__},
        )
        return ProviderReply(text=EMPTY_REPLY_PLACEHOLDER, ok=False)

    text = sanitize_reply(reply.text or "")
    if not text:
        logger.warning("Provider returned an empty reply", extra={"provider_family": family.value})
        return ProviderReply(
            text=EMPTY_REPLY_PLACEHOLDER,
            ok=False,
            response_id=reply.response_id,
            conversation_id=reply.conversation_id,
        )
    return ProviderReply(
        text=text,
        response_id=reply.response_id,
        conversation_id=reply.conversation_id,
    )


def extract_reply_text(family: ProviderFamily, body: str | bytes | dict[str, Any] | None) -> str:
    """Reply text only; see :func:`extract_reply`."""
    return extract_reply(family, body).text
