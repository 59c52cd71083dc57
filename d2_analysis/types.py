"""
D2 Analysis Types

Signal types produced from a captured page and consumed by the scorers
and the finding synthesizer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    """Ordinal severity shared by accessibility violations and LLM findings"""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AccessibilityIssueType(Enum):
    """Violation types detected in the accessibility tree"""

    MISSING_LABEL = "missing-label"
    MISSING_ARIA_LABEL = "missing-aria-label"
    EMPTY_HEADING = "empty-heading"


@dataclass(frozen=True)
class RawMetrics:
    """Browser-reported timings, milliseconds except CLS"""

    fcp: float = 0.0
    lcp: float = 0.0
    tti: float = 0.0
    tbt: float = 0.0
    cls: float = 0.0
    speed_index: float = 0.0


@dataclass(frozen=True)
class ValidatedMetrics:
    """RawMetrics after rounding and clamping"""

    fcp: float = 0.0
    lcp: float = 0.0
    tti: float = 0.0
    tbt: float = 0.0
    cls: float = 0.0
    speed_index: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "fcp": self.fcp,
            "lcp": self.lcp,
            "tti": self.tti,
            "tbt": self.tbt,
            "cls": self.cls,
            "speedIndex": self.speed_index,
        }


@dataclass(frozen=True)
class AccessibilityIssue:
    """A single accessibility violation"""

    type: AccessibilityIssueType
    severity: Severity
    role: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "role": self.role, "severity": self.severity.value}


@dataclass
class AccessibilityIssueSet:
    """Per-severity counts plus the full issue list"""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    issues: list[AccessibilityIssue] = field(default_factory=list)

    def add(self, issue: AccessibilityIssue) -> None:
        self.issues.append(issue)
        if issue.severity == Severity.CRITICAL:
            self.critical += 1
        elif issue.severity == Severity.HIGH:
            self.high += 1
        elif issue.severity == Severity.MEDIUM:
            self.medium += 1
        else:
            self.low += 1

    @property
    def total(self) -> int:
        return len(self.issues)

    def to_dict(self) -> dict[str, Any]:
        return {
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass(frozen=True)
class SEOValidation:
    """SEO checklist inputs derived from the captured HTML and DOM"""

    has_meta_description: bool = False
    meta_description_length: int = 0
    title_length: int = 0
    has_structured_data: bool = False
    semantic_html: bool = False
    alt_text_coverage: float = 0.0
    has_canonical: bool = False
    has_open_graph: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasMetaDescription": self.has_meta_description,
            "metaDescriptionLength": self.meta_description_length,
            "titleLength": self.title_length,
            "hasStructuredData": self.has_structured_data,
            "semanticHTML": self.semantic_html,
            "altTextCoverage": round(self.alt_text_coverage, 4),
            "hasCanonical": self.has_canonical,
            "hasOpenGraph": self.has_open_graph,
        }
