"""
D4 Synthesis - LLM findings and design score
"""

from .config import SynthesisConfig
from .parsers import (
    FindingsArrayParser,
    LegacyUxScoreParser,
    ResponseParser,
    ScoresParser,
    fallback_response,
    parse_response,
)
from .prompts import AuditPrompts, PromptContext, build_prompt
from .synthesizer import FindingSynthesizer
from .types import Finding, FindingCategory, ParsedResponse, ResponseFormat, SynthesisResult

__all__ = [
    "SynthesisConfig",
    "ResponseParser",
    "ScoresParser",
    "LegacyUxScoreParser",
    "FindingsArrayParser",
    "fallback_response",
    "parse_response",
    "AuditPrompts",
    "PromptContext",
    "build_prompt",
    "FindingSynthesizer",
    "Finding",
    "FindingCategory",
    "ParsedResponse",
    "ResponseFormat",
    "SynthesisResult",
]
