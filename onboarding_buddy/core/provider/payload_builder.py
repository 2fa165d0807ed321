"""
Provider request payload construction.

Translates (system prompt, history, current message, attachments, session
state) into the request shape of the configured provider family:

- CHAT: ``messages`` with a leading ``system`` message, then alternating
  ``user``/``assistant`` messages.
- SYSTEM_FIELD: alternating ``user``/``assistant`` messages with the
  instructions in a top-level ``system`` field.
- FLATTENED_INSTRUCTIONS: ``instructions`` plus a single ``input`` string
  carrying the serialized history. When continuation is enabled and the
  session holds a previous response id, the instructions and history are
  omitted in favour of ``previous_response_id``; a short refresh
  instruction is sent instead when the session is stale.

Image attachments are base64-inlined on the current message only;
other attachments contribute their processed text to the message.

Dependencies: base64 (stdlib), onboarding_buddy.configs, onboarding_buddy.core
System role: Provider wire-format builder
"""

import base64
import logging
from collections.abc import Callable, Sequence
from typing import Any

from onboarding_buddy.configs.provider import ProviderSettings
from onboarding_buddy.core.provider.history import flatten_history, split_history
from onboarding_buddy.core.provider.reply_extraction import extract_reply
from onboarding_buddy.core.provider.schemas import (
    ImagePart,
    MessageContent,
    PartsContent,
    ProviderMessage,
    ProviderReply,
    ProviderRequest,
    TextContent,
    TextPart,
)
from onboarding_buddy.models.attachment import FileAttachment
from onboarding_buddy.models.conversation import SessionSnapshot
from onboarding_buddy.models.provider import ProviderFamily

logger = logging.getLogger(__name__)

ATTACHED_FILES_HEADER = "Attached Files:"

REFRESH_INSTRUCTION = (
    "Context refresh: keep following the onboarding instructions and training materials "
    "provided earlier in this conversation. Answer only from that material and keep "
    "replies formatted as clean HTML."
)

Pairs = list[tuple[str, str]]


def build_user_content(message: str, attachments: Sequence[FileAttachment] | None = None) -> MessageContent:
    """
    Build the content of the current user message.

    Images with raw bytes become inline image parts. Every other attachment
    with processed text is appended to the message under an
    ``Attached Files:`` header.
    """
    attachments = attachments or []
    images: list[ImagePart] = []
    file_blocks: list[str] = []

    for attachment in attachments:
        if attachment.is_image and attachment.raw_bytes:
            images.append(
                ImagePart(
                    media_type=attachment.content_type,
                    data=base64.b64encode(attachment.raw_bytes).decode("ascii"),
                )
            )
        elif attachment.has_processed_text:
            file_blocks.append(f"File: {attachment.original_file_name}\n{attachment.processed_content.strip()}")

    text = message
    if file_blocks:
        text = f"{message}\n\n{ATTACHED_FILES_HEADER}\n" + "\n\n".join(file_blocks)

    if images:
        return PartsContent(parts=(TextPart(text), *images))
    return TextContent(text)


class ProviderPayloadBuilder:
    """
    Builds provider requests and extracts replies for one provider family.

    The family is fixed at construction; the per-family body builder is
    chosen once and never re-checked per call.
    """

    def __init__(self, settings: ProviderSettings) -> None:
        """
        Initialize the builder.

        Args:
            settings: Provider configuration (family, model, credentials)
        """
        self.settings = settings
        self.family = settings.provider_family
        builders: dict[ProviderFamily, Callable[..., dict[str, Any]]] = {
            ProviderFamily.CHAT: self._build_chat_body,
            ProviderFamily.FLATTENED_INSTRUCTIONS: self._build_flattened_body,
            ProviderFamily.SYSTEM_FIELD: self._build_system_field_body,
        }
        self._build_body = builders[self.family]

    def build_request(
        self,
        message: str,
        system_prompt: str,
        history: Sequence[str],
        attachments: Sequence[FileAttachment] | None = None,
        session_state: SessionSnapshot | None = None,
    ) -> ProviderRequest:
        """
        Build the request for the current message.

        Args:
            message: Current user message (or internal directive)
            system_prompt: Instructions from the PromptBuilder
            history: Flattened session log, oldest first
            attachments: Files sent with this message
            session_state: Snapshot of the session, for continuation tokens

        Returns:
            ProviderRequest: JSON body and headers
        """
        current = ProviderMessage(role="user", content=build_user_content(message, attachments))
        pairs = split_history(history)
        body = self._build_body(system_prompt, pairs, current, session_state)
        return ProviderRequest(family=self.family, body=body, headers=self._headers())

    def extract_reply(self, body: str | bytes | dict[str, Any] | None) -> ProviderReply:
        return extract_reply(self.family, body)

    def extract_reply_text(self, body: str | bytes | dict[str, Any] | None) -> str:
        return self.extract_reply(body).text

    # Headers

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.api_key:
            if self.family is ProviderFamily.SYSTEM_FIELD:
                headers["x-api-key"] = self.settings.api_key
            else:
                headers["Authorization"] = f"Bearer {self.settings.api_key}"
        if self.family is ProviderFamily.SYSTEM_FIELD and self.settings.api_version:
            headers["anthropic-version"] = self.settings.api_version
        if self.settings.subscription_key:
            headers["Ocp-Apim-Subscription-Key"] = self.settings.subscription_key
        return headers

    # Chat-completion family

    def _build_chat_body(
        self,
        system_prompt: str,
        pairs: Pairs,
        current: ProviderMessage,
        session_state: SessionSnapshot | None,
    ) -> dict[str, Any]:
        messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        messages.extend(_history_messages(pairs))
        messages.append({"role": current.role, "content": _chat_content(current.content)})
        return {
            "model": self.settings.model,
            "max_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
            "messages": messages,
        }

    # System-field family

    def _build_system_field_body(
        self,
        system_prompt: str,
        pairs: Pairs,
        current: ProviderMessage,
        session_state: SessionSnapshot | None,
    ) -> dict[str, Any]:
        messages = _history_messages(pairs)
        messages.append({"role": current.role, "content": _system_field_content(current.content)})
        return {
            "model": self.settings.model,
            "max_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
            "system": system_prompt,
            "messages": messages,
        }

    # Flattened-instructions family

    def _build_flattened_body(
        self,
        system_prompt: str,
        pairs: Pairs,
        current: ProviderMessage,
        session_state: SessionSnapshot | None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.settings.model,
            "max_output_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
            "store": self.settings.store_conversations,
        }

        previous_id = session_state.last_provider_response_id if session_state else None
        if self.settings.uses_continuation and previous_id:
            # Server-side state already carries the instructions and history
            body["previous_response_id"] = previous_id
            if session_state.context_is_stale:
                body["instructions"] = REFRESH_INSTRUCTION
                logger.info(
                    "Refreshing stale provider context",
                    extra={"session_id": session_state.session_id},
                )
            body["input"] = _flattened_input(current.content, "")
            return body

        body["instructions"] = system_prompt
        body["input"] = _flattened_input(current.content, flatten_history(pairs))
        return body


def _history_messages(pairs: Pairs) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []
    for user, assistant in pairs:
        messages.append({"role": "user", "content": user})
        messages.append({"role": "assistant", "content": assistant})
    return messages


def _chat_content(content: MessageContent) -> str | list[dict[str, Any]]:
    if isinstance(content, TextContent):
        return content.text
    parts: list[dict[str, Any]] = []
    for part in content.parts:
        if isinstance(part, TextPart):
            parts.append({"type": "text", "text": part.text})
        else:
            parts.append({"type": "image_url", "image_url": {"url": part.data_url}})
    return parts


def _system_field_content(content: MessageContent) -> str | list[dict[str, Any]]:
    if isinstance(content, TextContent):
        return content.text
    parts: list[dict[str, Any]] = []
    for part in content.parts:
        if isinstance(part, TextPart):
            parts.append({"type": "text", "text": part.text})
        else:
            parts.append({
                "type": "image",
                "source": {"type": "base64", "media_type": part.media_type, "data": part.data},
            })
    return parts


def _flattened_input(content: MessageContent, transcript: str) -> str | list[dict[str, Any]]:
    text = content.text
    if transcript:
        text = f"Previous conversation:\n{transcript}\n\nHuman: {text}"

    if isinstance(content, TextContent):
        return text
    parts: list[dict[str, Any]] = [{"type": "input_text", "text": text}]
    for part in content.parts:
        if isinstance(part, ImagePart):
            parts.append({"type": "input_image", "image_url": part.data_url})
    return [{"role": "user", "content": parts}]
