"""
Exception hierarchy for the onboarding assistant.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class OnboardingBuddyError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(OnboardingBuddyError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class MaterialNotFoundError(OnboardingBuddyError):
    """Raised when a training material or one of its attachments is missing."""

    def __init__(
        self,
        material_id: str,
        attachment_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["material_id"] = material_id
        if attachment_id:
            details["attachment_id"] = attachment_id
            message = f"Attachment {attachment_id} not found on material {material_id}"
        else:
            message = f"Training material not found: {material_id}"
        super().__init__(message, details)


class ProviderError(OnboardingBuddyError):
    """Base exception for upstream model provider failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            status_code: HTTP status returned by the provider, if any
            details: Additional context
        """
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, details)


class ProviderNotConfiguredError(ProviderError):
    """Raised when no upstream endpoint is configured."""


class RateLimitedError(ProviderError):
    """Raised when the provider signals too many requests."""


class ContentTooLargeError(ProviderError):
    """Raised when the provider rejects the request for token or context length."""


class UpstreamFailureError(ProviderError):
    """Raised on any other transport or protocol failure talking to the provider."""


class ReplyExtractionError(ProviderError):
    """Raised when a provider response body does not match the expected shape."""
