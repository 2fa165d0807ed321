"""
Training material admin service.

Create, update, soft-delete and attachment management for training
materials. Every committed mutation invalidates the training context of
all live sessions so the next message re-selects materials.

Dependencies: sqlalchemy, onboarding_buddy.boundary.db, onboarding_buddy.core
System role: Material administration layer
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from onboarding_buddy.boundary.db.CRUD import training_material_crud
from onboarding_buddy.boundary.db.models import (
    FileUploadModel,
    MaterialAttachmentModel,
    TrainingMaterialModel,
)
from onboarding_buddy.core.exceptions import MaterialNotFoundError, ValidationError
from onboarding_buddy.core.session_store import SessionStore
from onboarding_buddy.models.material import (
    AttachmentInfo,
    MaterialRequest,
    MaterialResponse,
)

logger = logging.getLogger(__name__)


def _parse_id(value: str, field: str = "material_id") -> UUID:
    try:
        return UUID(value)
    except ValueError as e:
        raise ValidationError(f"Invalid identifier: {value}", field=field) from e


def _to_attachment_info(row: MaterialAttachmentModel) -> AttachmentInfo:
    return AttachmentInfo(
        id=str(row.id),
        original_file_name=row.file_upload.original_file_name,
        content_type=row.file_upload.content_type,
        description=row.description,
        is_processed=row.file_upload.is_processed,
        attached_at=row.attached_at,
    )


def to_material_response(row: TrainingMaterialModel) -> MaterialResponse:
    return MaterialResponse(
        id=str(row.id),
        title=row.title,
        category=row.category,
        content=row.content,
        internal_notes=row.internal_notes,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
        attachments=[_to_attachment_info(a) for a in row.attachments],
    )


class MaterialService:
    """Material administration with session-context invalidation."""

    def __init__(self, db: AsyncSession, store: SessionStore) -> None:
        """
        Initialize material service.

        Args:
            db: Request-scoped database session
            store: Session store whose contexts are invalidated on change
        """
        self.db = db
        self.store = store

    async def list_materials(self, include_inactive: bool = False) -> list[MaterialResponse]:
        if include_inactive:
            rows = await training_material_crud.list_all(self.db)
        else:
            rows = await training_material_crud.list_active(self.db)
        return [to_material_response(row) for row in rows]

    async def get_material(self, material_id: str) -> MaterialResponse:
        row = await training_material_crud.get_with_attachments(self.db, _parse_id(material_id))
        if row is None:
            raise MaterialNotFoundError(material_id)
        return to_material_response(row)

    async def create_material(self, request: MaterialRequest) -> MaterialResponse:
        """
        Create a material.

        Args:
            request: Title, category, content and flags

        Returns:
            MaterialResponse: Created material
        """
        row = await training_material_crud.create(self.db, **request.model_dump())
        await self.db.commit()
        logger.info("Created training material", extra={"material_id": str(row.id), "category": row.category})
        self._invalidate()
        return await self.get_material(str(row.id))

    async def update_material(self, material_id: str, request: MaterialRequest) -> MaterialResponse:
        """
        Replace a material's fields.

        Raises:
            MaterialNotFoundError: No material with this id
        """
        row = await training_material_crud.update_by_id(
            self.db,
            _parse_id(material_id),
            **request.model_dump(),
        )
        if row is None:
            raise MaterialNotFoundError(material_id)
        await self.db.commit()
        logger.info("Updated training material", extra={"material_id": material_id})
        self._invalidate()
        return await self.get_material(material_id)

    async def delete_material(self, material_id: str) -> None:
        """Soft-delete a material; it stops reaching the model immediately."""
        deleted = await training_material_crud.soft_delete(self.db, _parse_id(material_id))
        if not deleted:
            raise MaterialNotFoundError(material_id)
        await self.db.commit()
        logger.info("Deactivated training material", extra={"material_id": material_id})
        self._invalidate()

    async def add_attachment(
        self,
        material_id: str,
        file_name: str,
        content_type: str,
        file_content: bytes,
        processed_content: str | None = None,
        description: str | None = None,
    ) -> MaterialResponse:
        """
        Attach an uploaded file to a material.

        Text extraction happens upstream; ``processed_content`` is stored as
        given. Plain-text uploads without it are decoded as UTF-8.

        Raises:
            MaterialNotFoundError: No material with this id
        """
        material_uuid = _parse_id(material_id)
        if not await training_material_crud.exists(self.db, material_uuid):
            raise MaterialNotFoundError(material_id)

        if processed_content is None and content_type.startswith("text/"):
            processed_content = file_content.decode("utf-8", errors="replace")

        upload = FileUploadModel(
            original_file_name=file_name,
            content_type=content_type,
            file_size_bytes=len(file_content),
            file_content=file_content,
            is_processed=processed_content is not None,
            processed_content=processed_content,
        )
        attachment = await training_material_crud.add_attachment(
            self.db,
            material_uuid,
            upload,
            description=description,
        )
        await self.db.commit()
        logger.info(
            "Attached file to training material",
            extra={"material_id": material_id, "attachment_id": str(attachment.id), "file_name": file_name},
        )
        self._invalidate()
        return await self.get_material(material_id)

    async def remove_attachment(self, material_id: str, attachment_id: str) -> None:
        """
        Detach a file from a material.

        Raises:
            MaterialNotFoundError: Material or attachment missing
        """
        removed = await training_material_crud.remove_attachment(
            self.db,
            _parse_id(material_id),
            _parse_id(attachment_id, field="attachment_id"),
        )
        if not removed:
            raise MaterialNotFoundError(material_id, attachment_id=attachment_id)
        await self.db.commit()
        logger.info(
            "Removed attachment from training material",
            extra={"material_id": material_id, "attachment_id": attachment_id},
        )
        self._invalidate()

    def _invalidate(self) -> None:
        self.store.invalidate_all_training_contexts()
