"""API-specific dependencies."""

from .dependencies import (
    get_material_service,
    get_orchestrator,
    get_provider_client,
    get_session_store,
    get_settings_dependency,
)

__all__ = [
    "get_material_service",
    "get_orchestrator",
    "get_provider_client",
    "get_session_store",
    "get_settings_dependency",
]
