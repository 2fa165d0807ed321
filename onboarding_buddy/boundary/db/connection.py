"""
Database connection management.

Provides the async SQLAlchemy engine, session factory, and the FastAPI
dependency for request-scoped sessions. The engine is created once in the
application lifespan and kept on ``app.state``.

Dependencies: sqlalchemy, onboarding_buddy.configs
System role: Database connection lifecycle management
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from onboarding_buddy.boundary.db.base import Base
from onboarding_buddy.configs.database import DatabaseSettings


def create_engine_from_settings(db_settings: DatabaseSettings) -> AsyncEngine:
    """
    Create the async engine for the material store.

    Args:
        db_settings: Database URL and echo flag

    Returns:
        AsyncEngine: Configured async engine
    """
    return create_async_engine(
        db_settings.url,
        echo=db_settings.echo_sql,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create async session factory bound to the engine.

    Sessions use explicit commits and keep attributes loaded after commit.
    """
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a request-scoped async session.

    Yields:
        AsyncSession: Session from the factory on ``app.state``
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        yield session
