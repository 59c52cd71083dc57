"""
Anthropic Messages API client for LLM-powered UX findings
"""
import json
from typing import Any, Dict, List, Optional

import httpx

from core.exceptions import ExternalAPIError, LLMAuthenticationError, ModelNotFoundError

from ..base import BaseAPIClient
from ..exceptions import InvalidResponseError

MESSAGES_ENDPOINT = "/v1/messages"

STUB_ANALYSIS = {
    "scores": {"design": 72},
    "justification": "Stub analysis generated without calling the language model.",
    "severity_breakdown": {"critical": 0, "high": 1, "medium": 1, "low": 1},
    "top_issues": [
        {
            "category": "accessibility",
            "severity": "high",
            "issue": "Images missing alternative text",
            "description": "Some images have no alt attribute, so screen reader users miss their content.",
            "location": "Page-wide",
            "suggestion": "Add descriptive alt text to every meaningful image.",
            "codeSnippet": "<img src=\"hero.jpg\" alt=\"Team reviewing a dashboard\" />",
        },
        {
            "category": "usability",
            "severity": "medium",
            "issue": "Primary call to action is not prominent",
            "description": "The main action competes visually with secondary links.",
            "location": "Hero section",
            "suggestion": "Give the primary button a distinct color and more whitespace.",
        },
        {
            "category": "seo",
            "severity": "low",
            "issue": "Meta description length outside recommended range",
            "description": "Search engines may truncate or rewrite the description.",
            "location": "<head>",
            "suggestion": "Keep the meta description between 50 and 160 characters.",
        },
    ],
}


class AnthropicClient(BaseAPIClient):
    """Anthropic Messages API client"""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, timeout: Optional[float] = None):
        super().__init__(provider="anthropic", api_key=api_key, base_url=base_url, timeout=timeout)

    def _get_base_url(self) -> str:
        return self.settings.anthropic_base_url

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.settings.anthropic_api_version,
            "content-type": "application/json",
        }

    def _get_stub_response(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        payload = kwargs.get("json") or {}
        return {
            "id": "msg_stub",
            "type": "message",
            "role": "assistant",
            "model": payload.get("model", self.settings.llm_preferred_model),
            "content": [{"type": "text", "text": json.dumps(STUB_ANALYSIS)}],
            "stop_reason": "end_turn",
            "usage": {"input_tokens": 0, "output_tokens": 0},
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Map provider errors onto the typed LLM exceptions"""
        error_type = None
        error_msg = f"HTTP {response.status_code}"
        try:
            error = response.json().get("error", {})
            error_type = error.get("type")
            error_msg = error.get("message", error_msg)
        except Exception:
            error_msg = response.text or error_msg

        if response.status_code == 401 or error_type == "authentication_error":
            raise LLMAuthenticationError(self.provider, response_body=response.text)
        if response.status_code == 404 or error_type == "not_found_error":
            raise ModelNotFoundError(self.provider, model="unknown", response_body=response.text)

        raise ExternalAPIError(
            provider=self.provider,
            message=error_msg,
            status_code=response.status_code,
            response_body=response.text,
        )

    async def create_message(
        self,
        prompt: str,
        model: str,
        max_tokens: int = 4000,
        temperature: float = 0.0,
        system: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a single-turn message

        Args:
            prompt: User prompt text
            model: Model identifier
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            system: Optional system prompt

        Returns:
            Dict containing the message response
        """
        payload: Dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            payload["system"] = system

        try:
            return await self.make_request("POST", MESSAGES_ENDPOINT, json=payload)
        except ModelNotFoundError as e:
            e.model = model
            e.tried_models = [model]
            raise

    def extract_text(self, response: Dict[str, Any]) -> str:
        """Concatenate the text blocks of a message response"""
        content: List[Dict[str, Any]] = response.get("content") or []
        texts = [block.get("text", "") for block in content if block.get("type") == "text"]
        if not texts:
            raise InvalidResponseError(self.provider, "text content block", json.dumps(response)[:500])
        return "".join(texts)
