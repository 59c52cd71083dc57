"""
Custom exceptions for UXAudit
Provides structured error handling across all domains

Every exception that can reach the HTTP layer carries a status code, a
user-facing message and, where the user can act on it, an ordered list of
troubleshooting steps.
"""
from typing import Any, Dict, List, Optional


class UXAuditError(Exception):
    """Base exception for all UXAudit errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[str] = None,
        troubleshooting: Optional[List[str]] = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details
        self.troubleshooting = troubleshooting or []
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        if self.troubleshooting:
            body["troubleshooting"] = list(self.troubleshooting)
        return body


class ValidationError(UXAuditError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
        )
        self.field = field


class PageUnreachableError(UXAuditError):
    """Raised when the target page cannot be loaded"""

    def __init__(self, url: str, reason: Optional[str] = None):
        super().__init__(
            message="Failed to load page. Please check the URL is accessible.",
            error_code="PAGE_UNREACHABLE",
            details=reason,
            status_code=400,
        )
        self.url = url


class BrowserLaunchError(UXAuditError):
    """Raised when no usable browser binary can be started"""

    def __init__(self, message: str, provider: Optional[str] = None, details: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="BROWSER_LAUNCH_ERROR",
            details=details,
            troubleshooting=[
                "1. Run `playwright install chromium` to download a local browser",
                "2. For bundled deployments set BROWSER_PROVIDER=bundled and BROWSER_EXECUTABLE_PATH",
                "3. In containers make sure the Chromium system dependencies are installed",
            ],
            status_code=500,
        )
        self.provider = provider


class LLMConfigurationError(UXAuditError):
    """Raised when the LLM credential is missing or malformed"""

    def __init__(self, details: str):
        super().__init__(
            message="Invalid API key configuration. Please check your ANTHROPIC_API_KEY in the .env file.",
            error_code="LLM_CONFIGURATION_ERROR",
            details=details,
            troubleshooting=[
                "1. Set ANTHROPIC_API_KEY in the environment or the .env file",
                '2. Ensure the key starts with "sk-ant-"',
                "3. Restart the service after updating the environment",
            ],
            status_code=500,
        )


class ExternalAPIError(UXAuditError):
    """Raised when an external API call fails"""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(
            message=f"{provider} API error: {message}",
            error_code="EXTERNAL_API_ERROR",
            status_code=status_code or 502,
        )
        self.provider = provider
        self.api_status_code = status_code
        self.response_body = response_body


class LLMAuthenticationError(ExternalAPIError):
    """Raised when the LLM provider rejects the credential"""

    def __init__(self, provider: str, response_body: Optional[str] = None):
        super().__init__(provider=provider, message="authentication failed", status_code=401, response_body=response_body)
        self.message = "Authentication failed. Please verify your ANTHROPIC_API_KEY is correct."
        self.details = (
            "The API key may be invalid, expired, or incorrectly formatted. "
            'Check your .env file and ensure the key starts with "sk-ant-"'
        )
        self.troubleshooting = [
            "1. Verify the API key in the .env file",
            '2. Ensure key starts with "sk-ant-"',
            "3. Check for extra spaces or quotes around the key",
            "4. Restart the service after updating the environment",
            "5. Verify the key is valid at https://console.anthropic.com/",
        ]


class ModelNotFoundError(ExternalAPIError):
    """Raised when the requested model does not exist for this account"""

    def __init__(self, provider: str, model: str, response_body: Optional[str] = None):
        super().__init__(provider=provider, message=f"model {model} not found", status_code=404, response_body=response_body)
        self.model = model
        self.tried_models: List[str] = [model]

    def exhausted(self, tried_models: List[str]) -> "ModelNotFoundError":
        """Mark the error as final after every candidate model was tried"""
        self.tried_models = list(tried_models)
        self.message = "Model not found. The specified Claude model is not available."
        self.details = (
            f"Tried {len(tried_models)} model name(s) but none were found: {', '.join(tried_models)}. "
            "This may indicate an API version mismatch."
        )
        self.troubleshooting = [
            "1. Check the Anthropic API documentation for available models",
            "2. Verify your API key has access to the requested model",
            "3. Update LLM_PREFERRED_MODEL / LLM_FALLBACK_MODELS",
            "4. Check the Anthropic console for model availability",
        ]
        return self


class AssessmentError(UXAuditError):
    """Raised when an audit step fails for a reason not covered above"""

    def __init__(self, message: str, step: Optional[str] = None, url: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="ASSESSMENT_ERROR",
            status_code=500,
        )
        self.step = step
        self.url = url
