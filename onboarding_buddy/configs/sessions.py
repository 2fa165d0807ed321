"""
Conversation session settings.

Lifetimes and size limits for the in-memory session store.

Dependencies: pydantic_settings
System role: Session store configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from onboarding_buddy.configs.base import BaseSettings


class SessionSettings(BaseSettings):
    """In-memory conversation session configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SESSION_",
        case_sensitive=False,
        extra="ignore",
    )

    timeout_minutes: int = Field(
        default=60,
        description="Inactivity after which a session is evicted",
    )
    sweep_interval_minutes: float = Field(
        default=10,
        description="Interval between expiry sweeps",
    )
    max_history_turns: int = Field(
        default=10,
        description="Turns of history replayed to the provider",
    )
    max_log_entries: int = Field(
        default=20,
        description="Cap on the flattened Human/Assistant log",
    )
    stale_turn_count: int = Field(
        default=20,
        description="Turn count after which provider-side context is refreshed",
    )
    stale_after_minutes: int = Field(
        default=60,
        description="Gap since the last turn after which provider-side context is refreshed",
    )
