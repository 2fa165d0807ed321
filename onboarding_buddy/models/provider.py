"""
Upstream provider family enumeration.

Dependencies: None
System role: Closed set of supported provider wire formats
"""

from enum import Enum


class ProviderFamily(str, Enum):
    """
    Wire-protocol family spoken by the configured upstream model provider.

    CHAT: ``system`` message followed by alternating ``user``/``assistant`` messages.
    FLATTENED_INSTRUCTIONS: one instructions string plus one flattened input,
        with optional server-side continuation (previous response id).
    SYSTEM_FIELD: alternating ``user``/``assistant`` messages and a top-level
        ``system`` field.
    """

    CHAT = "chat"
    FLATTENED_INSTRUCTIONS = "flattened_instructions"
    SYSTEM_FIELD = "system_field"

    @property
    def supports_continuation(self) -> bool:
        return self is ProviderFamily.FLATTENED_INSTRUCTIONS


FAMILY_ALIASES: dict[str, ProviderFamily] = {
    "openai": ProviderFamily.CHAT,
    "chat_completions": ProviderFamily.CHAT,
    "responses": ProviderFamily.FLATTENED_INSTRUCTIONS,
    "anthropic": ProviderFamily.SYSTEM_FIELD,
    "messages": ProviderFamily.SYSTEM_FIELD,
}
