"""Upstream LLM provider adapter."""

from onboarding_buddy.boundary.llm.provider_client import ProviderClient

__all__ = ["ProviderClient"]
