"""
Factory for creating D0 Gateway API clients
"""
from typing import Dict, Optional, Type

from core.config import get_settings
from core.logging import get_logger

from .base import BaseAPIClient
from .exceptions import UnknownProviderError
from .providers.anthropic import AnthropicClient

logger = get_logger("gateway.factory", domain="d0")

PROVIDERS: Dict[str, Type[BaseAPIClient]] = {
    "anthropic": AnthropicClient,
}


def create_client(provider: str, api_key: Optional[str] = None, **kwargs) -> BaseAPIClient:
    """
    Create a client for the specified provider

    Clients hold no connection state, so each audit gets its own instance.

    Args:
        provider: Provider name
        api_key: Explicit key; defaults to the configured key
        **kwargs: Additional configuration for the client

    Raises:
        UnknownProviderError: If provider is not known
    """
    if provider not in PROVIDERS:
        raise UnknownProviderError(provider, list(PROVIDERS))

    settings = get_settings()
    if api_key is None and not settings.use_stubs:
        api_key = settings.get_api_key(provider)

    client = PROVIDERS[provider](api_key=api_key, **kwargs)
    logger.debug(f"Created new client for {provider}")
    return client
