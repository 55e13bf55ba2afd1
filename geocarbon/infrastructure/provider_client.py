"""
Infrastructure layer: Base HTTP client for geodata providers with retry logic.
"""
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from geocarbon.config import settings
from geocarbon.domain.exceptions import ProviderError
from geocarbon.infrastructure.api_constants import APIConstants

RETRYABLE_STATUS_CODES = {429}


class ProviderHTTPClient:
    """
    Shared async HTTP plumbing for provider adapters.

    Server errors, rate limiting and transport errors are retried with
    exponential backoff; other client errors fail immediately. Anything that
    still fails is raised as ProviderError.
    """

    provider_name = "provider"

    def __init__(
        self,
        base_url: str = "",
        headers: Optional[Dict[str, str]] = None,
        timeout: float = APIConstants.DEFAULT_TIMEOUT,
    ):
        """
        Initialize the HTTP client.

        Args:
            base_url: Base URL prepended to relative endpoints
            headers: Extra default headers
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "accept": APIConstants.CONTENT_TYPE_JSON,
                "user-agent": APIConstants.USER_AGENT,
                **(headers or {}),
            },
            timeout=timeout,
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Endpoint path or absolute URL
            **kwargs: Additional arguments for the request

        Returns:
            Decoded JSON body

        Raises:
            ProviderError: On non-retryable client errors or undecodable bodies
            httpx.HTTPStatusError: On retryable status codes (consumed by retry)
            httpx.RequestError: On transport errors (consumed by retry)
        """
        try:
            response = await self.client.request(method, endpoint, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            # Retry on server errors (5xx) and rate limiting
            if status_code >= 500 or status_code in RETRYABLE_STATUS_CODES:
                raise
            # Don't retry on other client errors (4xx)
            raise ProviderError(
                f"{self.provider_name} request failed: {status_code} - {e.response.text}",
                provider=self.provider_name,
                status_code=status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.provider_name} returned a non-JSON response",
                provider=self.provider_name,
                status_code=response.status_code,
            ) from e

    async def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        Make a request and translate exhausted retries into ProviderError.
        """
        try:
            return await self._make_request(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"{self.provider_name} request failed after retries: "
                f"{e.response.status_code} - {e.response.text}",
                provider=self.provider_name,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(
                f"{self.provider_name} request error: {str(e)}",
                provider=self.provider_name,
            ) from e
