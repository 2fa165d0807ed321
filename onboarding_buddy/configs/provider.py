"""
Upstream model provider settings.

Endpoint, credentials and generation parameters for the LLM provider.
The provider family is parsed into a closed enum here, once, at load time.

Dependencies: pydantic, pydantic_settings
System role: Provider configuration
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from onboarding_buddy.configs.base import BaseSettings
from onboarding_buddy.models.provider import FAMILY_ALIASES, ProviderFamily


class ProviderSettings(BaseSettings):
    """Upstream LLM provider configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AI_",
        case_sensitive=False,
        extra="ignore",
    )

    api_url: str = Field(default="", description="Provider endpoint URL (empty = degraded mode)")
    api_key: str = Field(default="", description="Bearer / x-api-key credential")
    subscription_key: str | None = Field(
        default=None,
        description="Optional gateway subscription key (Ocp-Apim-Subscription-Key)",
    )
    model: str = Field(default="claude-3-haiku-20240307", description="Model identifier")
    max_tokens: int = Field(default=1000, description="Maximum tokens in a reply")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    api_version: str = Field(
        default="2023-06-01",
        description="API version header for the system-field family",
    )
    provider_family: ProviderFamily = Field(
        default=ProviderFamily.SYSTEM_FIELD,
        description="Wire format spoken by the provider",
    )
    stateful_mode: bool = Field(
        default=False,
        description="Use server-side continuation tokens when the family supports them",
    )
    store_conversations: bool = Field(
        default=True,
        description="Ask the provider to retain responses for continuation",
    )
    request_timeout_seconds: float = Field(default=60.0, description="HTTP timeout per request")
    max_connect_retries: int = Field(
        default=2,
        description="Retries for connection-level failures before giving up",
    )

    @field_validator("provider_family", mode="before")
    @classmethod
    def _parse_family(cls, value: Any) -> Any:
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_")
            return FAMILY_ALIASES.get(key, key)
        return value

    @property
    def is_configured(self) -> bool:
        """True when an upstream endpoint is set."""
        return bool(self.api_url.strip())

    @property
    def uses_continuation(self) -> bool:
        return self.stateful_mode and self.provider_family.supports_continuation
