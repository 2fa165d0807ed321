"""
Training material admin schemas.

Dependencies: pydantic
System role: Material admin API contracts
"""

from datetime import datetime

from pydantic import BaseModel, Field


class MaterialRequest(BaseModel):
    """Create or replace a training material."""

    title: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=100)
    content: str = ""
    internal_notes: str = ""
    is_active: bool = True


class AttachmentInfo(BaseModel):
    """Attachment summary returned by the admin API."""

    id: str
    original_file_name: str
    content_type: str
    description: str | None = None
    is_processed: bool
    attached_at: datetime


class MaterialResponse(BaseModel):
    """Training material as returned by the admin API."""

    id: str
    title: str
    category: str
    content: str
    internal_notes: str
    is_active: bool
    created_at: datetime
    updated_at: datetime | None = None
    attachments: list[AttachmentInfo] = Field(default_factory=list)
