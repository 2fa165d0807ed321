"""Domain models and API schemas."""

from onboarding_buddy.models.attachment import FileAttachment
from onboarding_buddy.models.conversation import (
    ConversationSession,
    ConversationTurn,
    SessionSnapshot,
    TurnType,
)
from onboarding_buddy.models.provider import ProviderFamily
from onboarding_buddy.models.training_material import (
    SYSTEM_PROMPT_CATEGORY,
    TrainingMaterial,
)

__all__ = [
    "FileAttachment",
    "ConversationSession",
    "ConversationTurn",
    "SessionSnapshot",
    "TurnType",
    "ProviderFamily",
    "SYSTEM_PROMPT_CATEGORY",
    "TrainingMaterial",
]
