"""
Database boundary: engine lifecycle, ORM models, CRUD and the material store.
"""

from onboarding_buddy.boundary.db.base import Base
from onboarding_buddy.boundary.db.connection import (
    create_engine_from_settings,
    create_session_factory,
    create_tables,
    get_async_db,
)
from onboarding_buddy.boundary.db.material_store import SqlMaterialStore

__all__ = [
    "Base",
    "SqlMaterialStore",
    "create_engine_from_settings",
    "create_session_factory",
    "create_tables",
    "get_async_db",
]
