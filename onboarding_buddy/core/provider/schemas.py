"""
Provider request and reply schemas.

Message content is an explicit tagged union decided when the message is
built: plain text, or a list of content parts when images are inlined.
Each provider family serializes the union in its own shape.

Dependencies: dataclasses (stdlib), onboarding_buddy.models
System role: Provider-neutral message representation
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Union

from onboarding_buddy.models.provider import ProviderFamily

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    """Base64-encoded inline image."""

    media_type: str
    data: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


ContentPart = Union[TextPart, ImagePart]


@dataclass(frozen=True)
class TextContent:
    text: str


@dataclass(frozen=True)
class PartsContent:
    parts: tuple[ContentPart, ...]

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "\n".join(p.text for p in self.parts if isinstance(p, TextPart))


MessageContent = Union[TextContent, PartsContent]


@dataclass(frozen=True)
class ProviderMessage:
    role: Role
    content: MessageContent


@dataclass(frozen=True)
class ProviderRequest:
    """Serialized request ready to POST."""

    family: ProviderFamily
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderReply:
    """
    Reply extracted from a provider response.

    Attributes:
        text: Sanitized reply text (placeholder when extraction failed)
        ok: False when the expected field was missing or the body unparsable
        response_id: Continuation token for the next request, if any
        conversation_id: Server-side conversation id, if any
    """

    text: str
    ok: bool = True
    response_id: str | None = None
    conversation_id: str | None = None


__all__ = [
    "ContentPart",
    "ImagePart",
    "MessageContent",
    "PartsContent",
    "ProviderFamily",
    "ProviderMessage",
    "ProviderReply",
    "ProviderRequest",
    "Role",
    "TextContent",
    "TextPart",
]
