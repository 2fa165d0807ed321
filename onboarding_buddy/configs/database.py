"""
Database configuration settings.

Connection URL for the training-material store. Defaults to a local SQLite
file so the service starts without a database server.

Dependencies: pydantic, pydantic_settings
System role: Material store connection configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from onboarding_buddy.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Training-material database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DATABASE_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./onboarding.db",
        description="SQLAlchemy async database URL",
    )
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")
    create_tables: bool = Field(
        default=True,
        description="Create missing tables at startup",
    )
