"""
Gateway-specific exceptions
"""
from core.exceptions import ExternalAPIError, UXAuditError


class GatewayError(UXAuditError):
    """Base exception for gateway domain"""


class InvalidResponseError(ExternalAPIError):
    """Invalid or unexpected response from API provider"""

    def __init__(self, provider: str, expected_format: str, received_data: str | None = None):
        super().__init__(
            provider=provider,
            message=f"Invalid response format, expected {expected_format}",
            status_code=502,
            response_body=received_data,
        )


class ProviderTimeoutError(ExternalAPIError):
    """Request to API provider timed out"""

    def __init__(self, provider: str, timeout_seconds: float):
        super().__init__(provider=provider, message=f"Request timed out after {timeout_seconds}s", status_code=504)
        self.timeout_seconds = timeout_seconds


class UnknownProviderError(GatewayError):
    """Requested provider is not registered with the factory"""

    def __init__(self, provider: str, available: list[str]):
        super().__init__(
            message=f"Unknown provider '{provider}'. Available: {', '.join(available)}",
            error_code="UNKNOWN_PROVIDER",
            status_code=500,
        )
        self.provider = provider
