"""
Database models package.

Exports:
  - TrainingMaterialModel: Training material ORM model
  - FileUploadModel: Uploaded file with extracted text
  - MaterialAttachmentModel: Material to file junction with description

Dependencies: sqlalchemy, onboarding_buddy.boundary.db.base
System role: Database model definitions for the material store
"""

from onboarding_buddy.boundary.db.models.file_upload_model import FileUploadModel
from onboarding_buddy.boundary.db.models.training_material_model import (
    MaterialAttachmentModel,
    TrainingMaterialModel,
)

__all__ = [
    "FileUploadModel",
    "MaterialAttachmentModel",
    "TrainingMaterialModel",
]
