"""
D4 Synthesis Types
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FindingCategory(str, Enum):
    ACCESSIBILITY = "accessibility"
    USABILITY = "usability"
    DESIGN = "design"
    PERFORMANCE = "performance"
    SEO = "seo"


class ResponseFormat(str, Enum):
    """Which response shape the parser chain recognized"""

    SCORES = "scores"
    LEGACY_UX_SCORE = "legacy_ux_score"
    FINDINGS_ARRAY = "findings_array"
    FALLBACK = "fallback"


@dataclass
class Finding:
    category: str
    severity: str
    issue: str
    description: str
    location: str = ""
    suggestion: str = ""
    code_snippet: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "category": self.category,
            "severity": self.severity,
            "issue": self.issue,
            "description": self.description,
            "location": self.location,
            "suggestion": self.suggestion,
        }
        if self.code_snippet:
            data["codeSnippet"] = self.code_snippet
        return data


@dataclass
class ParsedResponse:
    """
    Parser chain output

    design_score is None when the shape carried none; the synthesizer then
    applies the configured default. discarded_scores holds any performance,
    accessibility, seo or overall figures the model produced. They are kept
    for logging only and never reach the result.
    """

    format: ResponseFormat
    findings: List[Finding] = field(default_factory=list)
    design_score: Optional[float] = None
    justification: Optional[str] = None
    severity_breakdown: Dict[str, int] = field(default_factory=dict)
    discarded_scores: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SynthesisResult:
    findings: List[Finding]
    design_score: float
    model: str
    response_format: ResponseFormat
    model_version: str = ""
    justification: Optional[str] = None
    tried_models: List[str] = field(default_factory=list)
