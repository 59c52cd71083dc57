"""
Test Anthropic Messages API client implementation
"""
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from core.config import get_settings
from core.exceptions import ExternalAPIError, LLMAuthenticationError, ModelNotFoundError
from d0_gateway.exceptions import InvalidResponseError, ProviderTimeoutError
from d0_gateway.providers.anthropic import MESSAGES_ENDPOINT, STUB_ANALYSIS, AnthropicClient


def live_settings():
    settings = MagicMock()
    settings.use_stubs = False
    settings.llm_timeout = 60
    settings.anthropic_base_url = "https://api.anthropic.test"
    settings.anthropic_api_version = "2023-06-01"
    return settings


def http_response(status_code, body):
    request = httpx.Request("POST", "https://api.anthropic.test/v1/messages")
    return httpx.Response(status_code, json=body, request=request)


@pytest.fixture
def http_client():
    """Patch httpx.AsyncClient and hand back the inner client mock"""
    inner = MagicMock()
    inner.request = AsyncMock()
    client_cm = MagicMock()
    client_cm.__aenter__ = AsyncMock(return_value=inner)
    client_cm.__aexit__ = AsyncMock(return_value=False)
    with patch("d0_gateway.base.httpx.AsyncClient", return_value=client_cm) as async_client:
        inner.constructor = async_client
        yield inner


@pytest.fixture
def live_client():
    with patch("d0_gateway.base.get_settings", return_value=live_settings()):
        yield AnthropicClient(api_key="sk-ant-test-key")


class TestAnthropicClientStubMode:
    @pytest.fixture
    def client(self, monkeypatch):
        # Defaults only; a developer shell may point these elsewhere
        monkeypatch.delenv("ANTHROPIC_BASE_URL", raising=False)
        monkeypatch.delenv("ANTHROPIC_API_VERSION", raising=False)
        get_settings.cache_clear()
        return AnthropicClient()

    def test_initialization(self, client):
        assert client.provider == "anthropic"
        assert client.api_key == "stub-anthropic-key"
        assert client._get_base_url() == "https://api.anthropic.com"

    def test_headers(self, client):
        headers = client._get_headers()

        assert headers["x-api-key"] == "stub-anthropic-key"
        assert headers["anthropic-version"] == "2023-06-01"
        assert headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_create_message_returns_canned_analysis(self, client):
        response = await client.create_message("Audit this page", model="claude-3-5-haiku-20241022")

        assert response["model"] == "claude-3-5-haiku-20241022"
        assert json.loads(client.extract_text(response)) == STUB_ANALYSIS

    def test_stub_analysis_has_scores_shape(self):
        assert STUB_ANALYSIS["scores"]["design"] == 72
        assert len(STUB_ANALYSIS["top_issues"]) == 3

    def test_extract_text_joins_blocks(self, client):
        response = {"content": [{"type": "text", "text": "[1,"}, {"type": "tool_use"}, {"type": "text", "text": "2]"}]}

        assert client.extract_text(response) == "[1,2]"

    def test_extract_text_without_text_block(self, client):
        with pytest.raises(InvalidResponseError):
            client.extract_text({"content": []})


class TestAnthropicClientLive:
    @pytest.mark.asyncio
    async def test_request_payload(self, live_client, http_client):
        http_client.request.return_value = http_response(
            200, {"model": "claude-3-5-sonnet-20241022", "content": [{"type": "text", "text": "[]"}]}
        )

        await live_client.create_message(
            "Audit this page", model="claude-3-5-sonnet-20241022", max_tokens=4000, temperature=0.0, system="Be terse"
        )

        method, url = http_client.request.await_args.args
        assert method == "POST"
        assert url == f"https://api.anthropic.test{MESSAGES_ENDPOINT}"
        assert http_client.request.await_args.kwargs["json"] == {
            "model": "claude-3-5-sonnet-20241022",
            "max_tokens": 4000,
            "temperature": 0.0,
            "messages": [{"role": "user", "content": "Audit this page"}],
            "system": "Be terse",
        }
        headers = http_client.constructor.call_args.kwargs["headers"]
        assert headers["x-api-key"] == "sk-ant-test-key"

    @pytest.mark.asyncio
    async def test_401_raises_authentication_error(self, live_client, http_client):
        http_client.request.return_value = http_response(
            401, {"type": "error", "error": {"type": "authentication_error", "message": "invalid x-api-key"}}
        )

        with pytest.raises(LLMAuthenticationError) as exc_info:
            await live_client.create_message("prompt", model="claude-3-5-sonnet-20241022")

        error = exc_info.value
        assert error.status_code == 401
        assert error.message.startswith("Authentication failed")
        assert len(error.troubleshooting) == 5

    @pytest.mark.asyncio
    async def test_404_raises_model_not_found_with_model(self, live_client, http_client):
        http_client.request.return_value = http_response(
            404, {"type": "error", "error": {"type": "not_found_error", "message": "model: claude-9"}}
        )

        with pytest.raises(ModelNotFoundError) as exc_info:
            await live_client.create_message("prompt", model="claude-9")

        assert exc_info.value.status_code == 404
        assert exc_info.value.model == "claude-9"
        assert exc_info.value.tried_models == ["claude-9"]

    @pytest.mark.asyncio
    async def test_other_errors_pass_status_through(self, live_client, http_client):
        http_client.request.return_value = http_response(
            529, {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}
        )

        with pytest.raises(ExternalAPIError) as exc_info:
            await live_client.create_message("prompt", model="claude-3-5-sonnet-20241022")

        assert not isinstance(exc_info.value, ModelNotFoundError)
        assert exc_info.value.status_code == 529
        assert "Overloaded" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout(self, live_client, http_client):
        http_client.request.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(ProviderTimeoutError) as exc_info:
            await live_client.create_message("prompt", model="claude-3-5-sonnet-20241022")

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_connection_error(self, live_client, http_client):
        http_client.request.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(ExternalAPIError) as exc_info:
            await live_client.create_message("prompt", model="claude-3-5-sonnet-20241022")

        assert exc_info.value.status_code == 502
