"""
Training material ORM models.

Dependencies: sqlalchemy, onboarding_buddy.boundary.db.base
System role: Training material persistence
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from onboarding_buddy.boundary.db.base import Base, TimestampMixin, UUIDMixin, utc_now


class TrainingMaterialModel(Base, UUIDMixin, TimestampMixin):
    """
    Training material row.

    ``is_active`` is a soft-delete flag: inactive rows never reach the model.
    ``internal_notes`` are admin-only and never rendered into context.
    """

    __tablename__ = "training_materials"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    internal_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    attachments = relationship(
        "MaterialAttachmentModel",
        back_populates="training_material",
        cascade="all, delete-orphan",
        order_by="MaterialAttachmentModel.attached_at",
    )


class MaterialAttachmentModel(Base, UUIDMixin):
    """Junction between a training material and an uploaded file."""

    __tablename__ = "training_material_attachments"

    training_material_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("training_materials.id", ondelete="CASCADE"),
        nullable=False,
    )
    file_upload_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("file_uploads.id", ondelete="CASCADE"),
        nullable=False,
    )
    attached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    training_material = relationship("TrainingMaterialModel", back_populates="attachments")
    file_upload = relationship("FileUploadModel", back_populates="material_attachments")
