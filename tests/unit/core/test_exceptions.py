"""
Tests for the typed audit errors and their response bodies
"""
import pytest

from core.exceptions import (
    AssessmentError,
    BrowserLaunchError,
    ExternalAPIError,
    LLMAuthenticationError,
    LLMConfigurationError,
    ModelNotFoundError,
    PageUnreachableError,
    UXAuditError,
    ValidationError,
)

pytestmark = [pytest.mark.unit]


class TestErrorBodies:
    def test_message_only(self):
        assert ValidationError("URL is required").to_dict() == {"error": "URL is required"}

    def test_details_and_troubleshooting(self):
        body = LLMConfigurationError("API key is missing").to_dict()

        assert body["details"] == "API key is missing"
        assert body["troubleshooting"][1] == '2. Ensure the key starts with "sk-ant-"'
        assert set(body) == {"error", "details", "troubleshooting"}

    def test_empty_details_are_omitted(self):
        body = PageUnreachableError("https://down.test").to_dict()

        assert body == {"error": "Failed to load page. Please check the URL is accessible."}

    @pytest.mark.parametrize(
        "error,status",
        [
            (ValidationError("Invalid URL"), 400),
            (PageUnreachableError("https://down.test", reason="timeout"), 400),
            (LLMAuthenticationError("anthropic"), 401),
            (ModelNotFoundError("anthropic", "model-a"), 404),
            (BrowserLaunchError("Failed to launch browser"), 500),
            (LLMConfigurationError("API key is missing"), 500),
            (AssessmentError("boom"), 500),
            (ExternalAPIError("anthropic", "overloaded"), 502),
            (ExternalAPIError("anthropic", "overloaded", status_code=529), 529),
        ],
    )
    def test_status_codes(self, error, status):
        assert isinstance(error, UXAuditError)
        assert error.status_code == status


class TestModelNotFound:
    def test_exhausted_lists_every_model(self):
        error = ModelNotFoundError("anthropic", "model-b").exhausted(["model-a", "model-b"])

        assert error.tried_models == ["model-a", "model-b"]
        assert error.message == "Model not found. The specified Claude model is not available."
        assert "Tried 2 model name(s)" in error.details
        assert "model-a, model-b" in error.details
        assert len(error.troubleshooting) == 4

    def test_single_model_before_exhaustion(self):
        error = ModelNotFoundError("anthropic", "model-a")

        assert error.tried_models == ["model-a"]
        assert error.api_status_code == 404
        assert error.error_code == "EXTERNAL_API_ERROR"
