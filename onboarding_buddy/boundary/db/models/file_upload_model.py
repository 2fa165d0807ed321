"""
File upload ORM model.

Uploaded file bytes plus the text the extraction pipeline produced.

Dependencies: sqlalchemy, onboarding_buddy.boundary.db.base
System role: Attachment content persistence
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from onboarding_buddy.boundary.db.base import Base, UUIDMixin, utc_now


class FileUploadModel(Base, UUIDMixin):
    """
    Uploaded file.

    Attributes:
        original_file_name: File name as uploaded
        content_type: MIME type reported at upload
        file_size_bytes: Size of ``file_content``
        file_content: Raw bytes
        session_id: Chat session that uploaded it, if any
        is_processed: Extraction finished
        processed_content: Extracted plain text
        processing_error: Extraction failure message
    """

    __tablename__ = "file_uploads"

    original_file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size_bytes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    file_content: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, default=b"")
    session_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    is_processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    processed_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    processing_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    material_attachments = relationship(
        "MaterialAttachmentModel",
        back_populates="file_upload",
        cascade="all, delete-orphan",
    )
