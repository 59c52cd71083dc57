"""
LLM finding synthesizer

Sends the audit prompt to the language model, walking the configured model
chain when a model is unavailable, and parses the answer into findings and
a design score.
"""

from typing import List, Optional

from core.exceptions import ModelNotFoundError, UXAuditError
from core.logging import get_logger
from core.metrics import metrics
from d0_gateway.factory import create_client
from d0_gateway.providers.anthropic import AnthropicClient
from d3_scoring.composer import clamp_score
from d4_synthesis.config import SynthesisConfig
from d4_synthesis.parsers import parse_response
from d4_synthesis.prompts import AuditPrompts, PromptContext, build_prompt
from d4_synthesis.types import SynthesisResult

logger = get_logger(__name__, domain="d4")


class FindingSynthesizer:
    """Turns captured signals into LLM findings and a design score"""

    def __init__(self, config: Optional[SynthesisConfig] = None, client: Optional[AnthropicClient] = None):
        self.config = config or SynthesisConfig()
        self._client = client

    @property
    def client(self) -> AnthropicClient:
        if self._client is None:
            self._client = create_client("anthropic")
        return self._client

    async def synthesize(self, context: PromptContext) -> SynthesisResult:
        prompt = build_prompt(context, html_limit=self.config.prompt_html_limit)
        text, model, model_version, tried = await self._complete(prompt)

        parsed = parse_response(text)
        if parsed.discarded_scores:
            logger.info(f"Ignoring model-reported scores {parsed.discarded_scores}; server-computed values are used")

        design = parsed.design_score
        if design is None:
            design = self.config.default_design_score

        return SynthesisResult(
            findings=parsed.findings,
            design_score=clamp_score(design),
            model=model,
            model_version=model_version,
            response_format=parsed.format,
            justification=parsed.justification,
            tried_models=tried,
        )

    async def _complete(self, prompt: str) -> tuple[str, str, str, List[str]]:
        """
        Call each model in order until one answers

        Only a model-not-found error moves on to the next model. Any other
        error is raised immediately.
        """
        tried: List[str] = []
        last_error: Optional[ModelNotFoundError] = None

        for model in self.config.models:
            tried.append(model)
            logger.info(f"Requesting findings from {model}")
            try:
                response = await self.client.create_message(
                    prompt,
                    model=model,
                    max_tokens=self.config.max_tokens,
                    temperature=self.config.temperature,
                    system=AuditPrompts.SYSTEM_PROMPT,
                )
            except ModelNotFoundError as e:
                metrics.track_llm_request(model, status="model_not_found")
                logger.warning(f"Model {model} not found, trying next model")
                last_error = e
                continue
            except UXAuditError:
                metrics.track_llm_request(model, status="failed")
                raise

            metrics.track_llm_request(model)
            return self.client.extract_text(response), model, response.get("model") or model, tried

        logger.error(f"No available model among {tried}")
        raise last_error.exhausted(tried)
