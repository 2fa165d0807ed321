"""
CRUD operations for database models.

Usage:
    from onboarding_buddy.boundary.db.CRUD import training_material_crud

    materials = await training_material_crud.list_active(db)
"""

from onboarding_buddy.boundary.db.CRUD.base_crud import BaseCRUD
from onboarding_buddy.boundary.db.CRUD.training_material_crud import (
    TrainingMaterialCRUD,
    training_material_crud,
)

__all__ = [
    "BaseCRUD",
    "TrainingMaterialCRUD",
    "training_material_crud",
]
