"""
Base API client with common functionality for all external API providers
"""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from core.config import get_settings
from core.exceptions import ExternalAPIError
from core.logging import get_logger

from .exceptions import ProviderTimeoutError


class BaseAPIClient(ABC):
    """Abstract base class for all external API clients"""

    def __init__(
        self,
        provider: str,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self.provider = provider
        self.settings = get_settings()
        self.logger = get_logger(f"gateway.{provider}", domain="d0")
        self.timeout = timeout or self.settings.llm_timeout

        if self.settings.use_stubs:
            self.api_key = f"stub-{provider}-key"
        else:
            self.api_key = api_key or self.settings.get_api_key(provider)
        self.base_url = base_url or self._get_base_url()

    @abstractmethod
    def _get_base_url(self) -> str:
        """Get the base URL for this provider"""

    @abstractmethod
    def _get_headers(self) -> dict[str, str]:
        """Get authentication headers for this provider"""

    def _get_stub_response(self, method: str, endpoint: str, **kwargs) -> dict[str, Any]:
        """Canned response used when USE_STUBS=true"""
        raise NotImplementedError(f"{self.provider} has no stub response for {method}:{endpoint}")

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Translate an HTTP error response into an exception; providers refine this"""
        error_msg = f"HTTP {response.status_code}"
        try:
            error_data = response.json()
            error_msg = error_data.get("message", error_msg)
        except Exception:
            error_msg = response.text or error_msg

        raise ExternalAPIError(
            provider=self.provider,
            message=error_msg,
            status_code=response.status_code,
            response_body=response.text,
        )

    async def make_request(self, method: str, endpoint: str, **kwargs) -> dict[str, Any]:
        """
        Make an authenticated API request

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            **kwargs: Additional arguments passed to httpx

        Returns:
            Dict containing the API response

        Raises:
            ExternalAPIError: When the API returns an error
            ProviderTimeoutError: When the request exceeds the client timeout
        """
        operation = f"{method}:{endpoint}"

        if self.settings.use_stubs:
            self.logger.debug(f"Stub response for {operation}")
            return self._get_stub_response(method, endpoint, **kwargs)

        start_time = time.time()
        url = f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), headers=self._get_headers()) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(self.provider, self.timeout) from e
        except httpx.HTTPError as e:
            raise ExternalAPIError(provider=self.provider, message=str(e), status_code=502) from e
        finally:
            duration_ms = int((time.time() - start_time) * 1000)
            self.logger.debug(f"{operation} finished in {duration_ms}ms")

        if response.status_code >= 400:
            self.logger.warning(f"{operation} returned HTTP {response.status_code}")
            self._raise_for_status(response)

        return response.json()
