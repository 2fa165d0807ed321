"""
Provider payload construction and reply extraction.

Exports:
  - ProviderPayloadBuilder: per-family request builder and reply extractor
  - split_history, flatten_history: history reconstruction helpers
  - extract_reply, extract_reply_text, sanitize_reply: reply parsing
"""

from onboarding_buddy.core.provider.history import flatten_history, split_history
from onboarding_buddy.core.provider.payload_builder import (
    REFRESH_INSTRUCTION,
    ProviderPayloadBuilder,
    build_user_content,
)
from onboarding_buddy.core.provider.reply_extraction import (
    extract_reply,
    extract_reply_text,
    sanitize_reply,
)
from onboarding_buddy.core.provider.schemas import (
    ImagePart,
    PartsContent,
    ProviderMessage,
    ProviderReply,
    ProviderRequest,
    TextContent,
    TextPart,
)

__all__ = [
    "REFRESH_INSTRUCTION",
    "ProviderPayloadBuilder",
    "build_user_content",
    "split_history",
    "flatten_history",
    "extract_reply",
    "extract_reply_text",
    "sanitize_reply",
    "ImagePart",
    "PartsContent",
    "ProviderMessage",
    "ProviderReply",
    "ProviderRequest",
    "TextContent",
    "TextPart",
]
