"""
Synthesis configuration
"""

from dataclasses import dataclass, field
from typing import Tuple

DEFAULT_MODELS = (
    "claude-3-5-sonnet-20241022",
    "claude-3-5-haiku-20241022",
    "claude-3-opus-20240229",
)


@dataclass(frozen=True)
class SynthesisConfig:
    """Model chain and sampling parameters for the finding synthesizer"""

    models: Tuple[str, ...] = field(default=DEFAULT_MODELS)
    temperature: float = 0.0
    max_tokens: int = 4000
    prompt_html_limit: int = 10000
    default_design_score: float = 70.0

    def __post_init__(self):
        if not self.models:
            raise ValueError("At least one model is required")

    @classmethod
    def from_settings(cls, settings) -> "SynthesisConfig":
        return cls(
            models=tuple(settings.model_candidates),
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            prompt_html_limit=settings.prompt_html_limit,
            default_design_score=settings.default_design_score,
        )
