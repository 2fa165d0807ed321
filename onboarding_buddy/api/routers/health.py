"""
Health check API endpoints.

Routes: GET /health, GET /health/db, GET /health/provider

Dependencies: onboarding_buddy.boundary
System role: Health check HTTP API
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from onboarding_buddy.api.deps import get_provider_client, get_session_store
from onboarding_buddy.boundary.db import get_async_db
from onboarding_buddy.boundary.llm import ProviderClient
from onboarding_buddy.core.session_store import SessionStore

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str
    active_sessions: int | None = None


class ProviderHealthResponse(BaseModel):
    """Provider configuration status."""

    status: str
    configured: bool
    provider_family: str
    model: str
    continuation_enabled: bool


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(store: SessionStore = Depends(get_session_store)) -> HealthResponse:
    """Basic health check."""
    return HealthResponse(
        status="healthy",
        message="Server Healthy",
        active_sessions=len(store.active_session_ids()),
    )


@router.get("/db", response_model=HealthResponse)
async def health_check_db(db: AsyncSession = Depends(get_async_db)) -> HealthResponse:
    """Material store connectivity check."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database health check failed", extra={"error_msg": str(e)})
        return HealthResponse(status="unhealthy", message="Database connection failed")
    return HealthResponse(status="healthy", message="Database connection OK")


@router.get("/provider", response_model=ProviderHealthResponse)
async def health_check_provider(
    client: ProviderClient = Depends(get_provider_client),
) -> ProviderHealthResponse:
    """
    Provider configuration check.

    Reports configuration only; no request is sent upstream. An unconfigured
    provider is "degraded": chat still answers with the canned notice.
    """
    settings = client.settings
    return ProviderHealthResponse(
        status="healthy" if client.is_configured else "degraded",
        configured=client.is_configured,
        provider_family=settings.provider_family.value,
        model=settings.model,
        continuation_enabled=settings.uses_continuation,
    )
