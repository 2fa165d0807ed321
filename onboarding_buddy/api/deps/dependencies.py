"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived collaborators
(session store, orchestrator, provider client) are built once in the
application lifespan and read from ``app.state``; the material service is
built per request around a request-scoped database session.

Dependencies: onboarding_buddy.configs, onboarding_buddy.application, onboarding_buddy.boundary
System role: DI container for service injection
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from onboarding_buddy.application.services import ConversationOrchestrator, MaterialService
from onboarding_buddy.boundary.db import get_async_db
from onboarding_buddy.boundary.llm import ProviderClient
from onboarding_buddy.configs import Settings, get_settings
from onboarding_buddy.core.session_store import SessionStore


def get_settings_dependency() -> Settings:
    return get_settings()


def get_session_store(request: Request) -> SessionStore:
    """Process-wide session store created at startup."""
    return request.app.state.session_store


def get_orchestrator(request: Request) -> ConversationOrchestrator:
    return request.app.state.orchestrator


def get_provider_client(request: Request) -> ProviderClient:
    return request.app.state.provider_client


def get_material_service(
    db: AsyncSession = Depends(get_async_db),
    store: SessionStore = Depends(get_session_store),
) -> MaterialService:
    """
    Get MaterialService bound to the request's database session.

    Args:
        db: Injected AsyncSession
        store: Injected SessionStore

    Returns:
        MaterialService: Service instance
    """
    return MaterialService(db=db, store=store)
