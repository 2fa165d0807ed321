"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from onboarding_buddy.configs.base import BaseSettings
from onboarding_buddy.configs.database import DatabaseSettings
from onboarding_buddy.configs.provider import ProviderSettings
from onboarding_buddy.configs.sessions import SessionSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    sessions: SessionSettings = Field(default_factory=SessionSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from onboarding_buddy.configs import get_settings
        settings = get_settings()
    """
    return Settings()
