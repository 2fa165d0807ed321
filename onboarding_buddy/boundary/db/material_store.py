"""
SQL-backed material store.

Reads active training materials through TrainingMaterialCRUD and converts
ORM rows into the domain models the conversation core consumes.

Dependencies: sqlalchemy, onboarding_buddy.boundary.db.CRUD
System role: MaterialStore implementation over the relational database
"""

import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from onboarding_buddy.boundary.db.CRUD import training_material_crud
from onboarding_buddy.boundary.db.models import (
    MaterialAttachmentModel,
    TrainingMaterialModel,
)
from onboarding_buddy.models.attachment import FileAttachment
from onboarding_buddy.models.training_material import TrainingMaterial

logger = logging.getLogger(__name__)


def attachment_to_domain(row: MaterialAttachmentModel) -> FileAttachment:
    upload = row.file_upload
    return FileAttachment(
        original_file_name=upload.original_file_name,
        content_type=upload.content_type,
        processed_content=upload.processed_content,
        is_processed=upload.is_processed,
        description=row.description,
        raw_bytes=upload.file_content or None,
    )


def material_to_domain(row: TrainingMaterialModel) -> TrainingMaterial:
    """Convert an ORM row (attachments already loaded) to a TrainingMaterial."""
    return TrainingMaterial(
        id=str(row.id),
        title=row.title,
        category=row.category,
        content=row.content or "",
        internal_notes=row.internal_notes or "",
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
        attachments=[attachment_to_domain(a) for a in row.attachments if a.file_upload is not None],
    )


class SqlMaterialStore:
    """MaterialStore reading from the training_materials tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def list_active(self) -> Sequence[TrainingMaterial]:
        async with self.session_factory() as session:
            rows = await training_material_crud.list_active(session)
            materials = [material_to_domain(row) for row in rows]
        logger.debug("Loaded active training materials", extra={"material_count": len(materials)})
        return materials
