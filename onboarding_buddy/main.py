"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, httpx, onboarding_buddy.api, onboarding_buddy.observability, onboarding_buddy.configs
System role: Application initialization and configuration
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from onboarding_buddy.api import api_router
from onboarding_buddy.api.routers import ConnectionRegistry, chat_stream_router
from onboarding_buddy.application.services import ConversationOrchestrator
from onboarding_buddy.boundary.db import (
    SqlMaterialStore,
    create_engine_from_settings,
    create_session_factory,
    create_tables,
)
from onboarding_buddy.boundary.llm import ProviderClient
from onboarding_buddy.configs import Settings, get_settings
from onboarding_buddy.core.provider import ProviderPayloadBuilder
from onboarding_buddy.core.session_store import SessionStore
from onboarding_buddy.observability.logger import configure_logging
from onboarding_buddy.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Builds the process-wide collaborators once at startup and tears them
    down on shutdown: database engine, session store and its expiry sweep,
    the shared HTTP client and the orchestrator.
    """
    settings: Settings = app.state.settings

    # Startup
    configure_logging(settings.log_level)
    logger.info("Application startup: logging configured")

    engine = create_engine_from_settings(settings.database)
    session_factory = create_session_factory(engine)
    if settings.database.create_tables:
        await create_tables(engine)

    store = SessionStore(settings.sessions)
    store.start()

    http_client = httpx.AsyncClient(timeout=settings.provider.request_timeout_seconds)
    provider_client = ProviderClient(settings.provider, http_client)
    orchestrator = ConversationOrchestrator(
        store=store,
        material_store=SqlMaterialStore(session_factory),
        payload_builder=ProviderPayloadBuilder(settings.provider),
        provider_client=provider_client,
        session_settings=settings.sessions,
    )

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.session_store = store
    app.state.provider_client = provider_client
    app.state.orchestrator = orchestrator
    app.state.connection_registry = ConnectionRegistry()

    if not provider_client.is_configured:
        logger.warning("No provider endpoint configured: chat runs in degraded mode")
    logger.info(
        "Application startup complete",
        extra={"provider_family": settings.provider.provider_family.value},
    )

    try:
        yield
    finally:
        # Shutdown
        await store.stop()
        await http_client.aclose()
        await engine.dispose()
        logger.info("Application shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings override (defaults to the cached environment settings)

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="OnboardingBuddy API",
        description="AI onboarding assistant grounded in admin-curated training materials",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Add observability middleware (added first = last to execute)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")
    app.include_router(chat_stream_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "onboarding_buddy.main:app",
        host="localhost",
        port=8082,
        reload=True,
    )
