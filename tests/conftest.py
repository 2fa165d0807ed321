"""
Shared test fixtures and configuration for entire test suite.

Provides: fake clock, sample training materials, session store, in-memory
async database, provider settings
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from datetime import datetime, timedelta, timezone

import pytest

from onboarding_buddy.configs.provider import ProviderSettings
from onboarding_buddy.configs.sessions import SessionSettings
from onboarding_buddy.core.session_store import SessionStore
from onboarding_buddy.models.attachment import FileAttachment
from onboarding_buddy.models.provider import ProviderFamily
from onboarding_buddy.models.training_material import TrainingMaterial


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += timedelta(minutes=minutes)


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake clock starting Monday 09:00 UTC."""
    return FakeClock()


@pytest.fixture
def session_settings() -> SessionSettings:
    """Provide session settings with default limits."""
    return SessionSettings()


@pytest.fixture
def store(session_settings: SessionSettings, clock: FakeClock) -> SessionStore:
    """Provide a session store driven by the fake clock."""
    return SessionStore(session_settings, clock=clock)


@pytest.fixture
def provider_settings() -> ProviderSettings:
    """Provide configured chat-family provider settings."""
    return ProviderSettings(
        api_url="https://llm.example.test/v1/chat/completions",
        api_key="test-key",
        model="test-model",
        provider_family=ProviderFamily.CHAT,
    )


def make_material(
    id: str,
    title: str,
    category: str,
    content: str = "",
    is_active: bool = True,
    attachments: list[FileAttachment] | None = None,
) -> TrainingMaterial:
    return TrainingMaterial(
        id=id,
        title=title,
        category=category,
        content=content,
        is_active=is_active,
        attachments=attachments or [],
    )


@pytest.fixture
def sample_materials() -> list[TrainingMaterial]:
    """
    Provide a small material library.

    Canonical (category, title) order of the active ones:
    Benefits Overview, Expense Policy, Onboarding Checklist, AI Assistant Rules.
    """
    return [
        make_material(
            "sys",
            "AI Assistant Rules",
            "System Prompts",
            "You are the onboarding assistant for Acme.",
        ),
        make_material(
            "checklist",
            "Onboarding Checklist",
            "Getting Started",
            "Complete IT setup and security training in week one.",
        ),
        make_material(
            "expenses",
            "Expense Policy",
            "Finance",
            "Submit receipts within 30 days.",
        ),
        make_material(
            "benefits",
            "Benefits Overview",
            "Benefits",
            "Health insurance starts on day one.",
        ),
        make_material(
            "archived",
            "Archived Policy",
            "Zz Legacy",
            "Old onboarding rules.",
            is_active=False,
        ),
    ]


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        async_sessionmaker: Session factory bound to a fresh schema
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from onboarding_buddy.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    yield session_factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_async_db):
    """Provide a session on the in-memory database."""
    async with test_async_db() as session:
        yield session
        await session.rollback()
