"""
File attachment domain model.

An uploaded document or image as the conversation core consumes it: the
extraction pipeline has already run, so only the processed text (when
present) and the raw bytes (for images) matter here.

Dependencies: pydantic
System role: Attachment contract between upload store and conversation core
"""

from pydantic import BaseModel, ConfigDict, Field


class FileAttachment(BaseModel):
    """Read-only view of an uploaded file."""

    model_config = ConfigDict(frozen=True)

    original_file_name: str = Field(description="File name as uploaded")
    content_type: str = Field(default="application/octet-stream", description="MIME type")
    processed_content: str | None = Field(default=None, description="Extracted plain text")
    is_processed: bool = Field(default=False, description="Extraction finished")
    description: str | None = Field(default=None, description="Optional admin description")
    raw_bytes: bytes | None = Field(default=None, repr=False, description="Original file bytes")

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")

    @property
    def has_processed_text(self) -> bool:
        """Extraction finished and produced non-blank text."""
        return self.is_processed and bool(self.processed_content and self.processed_content.strip())
