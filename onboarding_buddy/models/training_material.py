"""
Training material domain model.

Admin-curated documents that supply reference knowledge, or persona and
instruction text when filed under the "System Prompts" category.

Dependencies: pydantic
System role: Training material contract consumed by the conversation core
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from onboarding_buddy.models.attachment import FileAttachment

SYSTEM_PROMPT_CATEGORY = "System Prompts"


class TrainingMaterial(BaseModel):
    """
    Training material as read from the material store.

    Attributes:
        id: Opaque identifier
        title: Display title
        category: Free-text category
        content: Rich text body sent to the model
        internal_notes: Admin notes, never sent to the model
        is_active: Soft-delete flag; inactive materials never reach the model
        attachments: Files attached to this material
    """

    id: str
    title: str
    category: str
    content: str = ""
    internal_notes: str = Field(default="", repr=False)
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime | None = None
    attachments: list[FileAttachment] = Field(default_factory=list)

    @property
    def is_system_prompt(self) -> bool:
        return self.category.strip().lower() == SYSTEM_PROMPT_CATEGORY.lower()
