"""
D0 Gateway - outbound calls to external APIs

The language-model provider is the only external API the audit pipeline
calls; everything goes through this gateway.
"""

from .base import BaseAPIClient
from .exceptions import GatewayError, InvalidResponseError, ProviderTimeoutError, UnknownProviderError
from .factory import PROVIDERS, create_client
from .providers.anthropic import AnthropicClient

__all__ = [
    "BaseAPIClient",
    "AnthropicClient",
    "GatewayError",
    "InvalidResponseError",
    "ProviderTimeoutError",
    "UnknownProviderError",
    "PROVIDERS",
    "create_client",
]
