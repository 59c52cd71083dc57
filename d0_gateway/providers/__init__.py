"""
Provider-specific API clients for D0 Gateway
"""

from .anthropic import AnthropicClient

__all__ = [
    "AnthropicClient",
]
