"""
Upstream model provider HTTP client.

Sends one JSON POST per orchestrated message and classifies failures into
the provider error taxonomy. Connection-level failures are retried a
bounded number of times with tenacity; everything else is raised
immediately for the orchestrator to turn into a degraded reply.

Dependencies: httpx, tenacity, onboarding_buddy.core
System role: Provider transport adapter
"""

import logging
import re

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)
from tenacity.wait import wait_base

from onboarding_buddy.configs.provider import ProviderSettings
from onboarding_buddy.core.exceptions import (
    ContentTooLargeError,
    ProviderNotConfiguredError,
    RateLimitedError,
    UpstreamFailureError,
)
from onboarding_buddy.core.provider.schemas import ProviderRequest
from onboarding_buddy.observability.log_utils import preview

logger = logging.getLogger(__name__)

RATE_LIMIT_PATTERN = re.compile(r"rate[_ ]?limit|too many requests|toomanyrequests", re.IGNORECASE)
CONTENT_LIMIT_PATTERN = re.compile(
    r"context[_ ]length|too many tokens|token limit|prompt is too long|request too large"
    r"|maximum context|content[_ ]?(?:length|size)?[_ ]?limit",
    re.IGNORECASE,
)

RETRYABLE_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout)

# Exponential backoff capped at 5s with up to 1s of jitter
DEFAULT_RETRY_WAIT = wait_exponential(multiplier=0.5, max=5) + wait_random(0, 1)


def classify_http_error(status_code: int, body: str) -> Exception:
    """
    Map a non-success provider response to a provider error.

    Args:
        status_code: HTTP status code
        body: Response body text

    Returns:
        ProviderError subclass instance (not raised)
    """
    message = f"Provider request failed: {status_code} - {preview(body, 300)}"
    if status_code == 429 or RATE_LIMIT_PATTERN.search(body):
        return RateLimitedError(message, status_code=status_code)
    if status_code == 413 or CONTENT_LIMIT_PATTERN.search(body):
        return ContentTooLargeError(message, status_code=status_code)
    return UpstreamFailureError(message, status_code=status_code)


class ProviderClient:
    """Posts provider requests over a shared httpx.AsyncClient."""

    def __init__(
        self,
        settings: ProviderSettings,
        http_client: httpx.AsyncClient,
        retry_wait: wait_base | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Provider endpoint and retry configuration
            http_client: Shared async HTTP client (owned by the app lifespan)
            retry_wait: Wait strategy between connection retries
        """
        self.settings = settings
        self._http = http_client
        self._retry_wait = retry_wait or DEFAULT_RETRY_WAIT

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    async def send(self, request: ProviderRequest) -> str:
        """
        POST the request and return the raw response body.

        Args:
            request: Body and headers from the payload builder

        Returns:
            str: Response body text (parsed later by reply extraction)

        Raises:
            ProviderNotConfiguredError: No endpoint configured
            RateLimitedError: Provider signalled too many requests
            ContentTooLargeError: Provider rejected the request size
            UpstreamFailureError: Timeout, transport error or other failure
        """
        if not self.is_configured:
            raise ProviderNotConfiguredError("No upstream provider endpoint configured")

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                stop=stop_after_attempt(self.settings.max_connect_retries + 1),
                wait=self._retry_wait,
                before_sleep=lambda state: logger.warning(
                    f"{__name__}:send - Retry {state.attempt_number} after connection failure"
                ),
                reraise=True,
            ):
                with attempt:
                    response = await self._http.post(
                        self.settings.api_url,
                        json=request.body,
                        headers=request.headers,
                        timeout=self.settings.request_timeout_seconds,
                    )
        except httpx.TimeoutException as e:
            raise UpstreamFailureError(f"Provider request timed out: {type(e).__name__}") from e
        except httpx.HTTPError as e:
            raise UpstreamFailureError(f"Provider transport error: {type(e).__name__}: {e}") from e

        if response.is_success:
            logger.debug(
                "Provider request succeeded",
                extra={"status_code": response.status_code, "provider_family": request.family.value},
            )
            return response.text

        error = classify_http_error(response.status_code, response.text)
        logger.warning(
            "Provider request rejected",
            extra={"status_code": response.status_code, "error_type": type(error).__name__},
        )
        raise error
