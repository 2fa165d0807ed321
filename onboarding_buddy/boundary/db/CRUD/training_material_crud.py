"""
Training material CRUD operations.

Extends BaseCRUD with the queries the conversation core and the admin API
need: active materials in canonical order with attachments eagerly loaded,
soft delete, and attachment management.

Dependencies: sqlalchemy, onboarding_buddy.boundary.db.models
System role: Training material persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from onboarding_buddy.boundary.db.CRUD.base_crud import BaseCRUD
from onboarding_buddy.boundary.db.models import (
    FileUploadModel,
    MaterialAttachmentModel,
    TrainingMaterialModel,
)

_WITH_ATTACHMENTS = selectinload(TrainingMaterialModel.attachments).selectinload(
    MaterialAttachmentModel.file_upload
)


class TrainingMaterialCRUD(BaseCRUD[TrainingMaterialModel]):
    """CRUD operations for TrainingMaterialModel."""

    def __init__(self) -> None:
        """Initialize TrainingMaterialCRUD with TrainingMaterialModel."""
        super().__init__(TrainingMaterialModel)

    async def list_active(self, session: AsyncSession) -> Sequence[TrainingMaterialModel]:
        """
        Active materials ordered by category then title, attachments loaded.

        Args:
            session: Async database session

        Returns:
            Sequence of active TrainingMaterialModels
        """
        stmt = (
            select(TrainingMaterialModel)
            .where(TrainingMaterialModel.is_active.is_(True))
            .order_by(TrainingMaterialModel.category, TrainingMaterialModel.title)
            .options(_WITH_ATTACHMENTS)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_all(self, session: AsyncSession) -> Sequence[TrainingMaterialModel]:
        """All materials, including inactive ones, for the admin screens."""
        stmt = (
            select(TrainingMaterialModel)
            .order_by(TrainingMaterialModel.category, TrainingMaterialModel.title)
            .options(_WITH_ATTACHMENTS)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_with_attachments(
        self,
        session: AsyncSession,
        id: UUID,
    ) -> TrainingMaterialModel | None:
        stmt = (
            select(TrainingMaterialModel)
            .where(TrainingMaterialModel.id == id)
            .options(_WITH_ATTACHMENTS)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def soft_delete(self, session: AsyncSession, id: UUID) -> bool:
        """
        Deactivate a material.

        Returns:
            True if the material existed
        """
        material = await self.update_by_id(session, id, is_active=False)
        return material is not None

    async def add_attachment(
        self,
        session: AsyncSession,
        material_id: UUID,
        file_upload: FileUploadModel,
        description: str | None = None,
    ) -> MaterialAttachmentModel:
        """
        Store an uploaded file and attach it to a material.

        Args:
            session: Async database session
            material_id: Target material UUID
            file_upload: Unsaved FileUploadModel
            description: Optional attachment description

        Returns:
            The created junction row
        """
        session.add(file_upload)
        await session.flush()
        attachment = MaterialAttachmentModel(
            training_material_id=material_id,
            file_upload_id=file_upload.id,
            description=description,
        )
        session.add(attachment)
        await session.flush()
        await session.refresh(attachment)
        return attachment

    async def remove_attachment(
        self,
        session: AsyncSession,
        material_id: UUID,
        attachment_id: UUID,
    ) -> bool:
        """
        Detach a file from a material.

        Returns:
            True if the attachment belonged to the material and was removed
        """
        stmt = select(MaterialAttachmentModel).where(
            MaterialAttachmentModel.id == attachment_id,
            MaterialAttachmentModel.training_material_id == material_id,
        )
        result = await session.execute(stmt)
        attachment = result.scalar_one_or_none()
        if attachment is None:
            return False
        await session.delete(attachment)
        await session.flush()
        return True


training_material_crud = TrainingMaterialCRUD()
