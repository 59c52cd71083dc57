"""
Response parser chain

The model has answered in three shapes over time. Each parser recognizes
one shape and returns a ParsedResponse, or None to pass the text on to the
next parser. When nothing matches, a single synthetic finding is returned
so the audit still produces a result.
"""

import json
import math
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence

from core.logging import get_logger
from d4_synthesis.types import Finding, FindingCategory, ParsedResponse, ResponseFormat

logger = get_logger(__name__, domain="d4")

SEVERITIES = ("critical", "high", "medium", "low")
CATEGORIES = tuple(c.value for c in FindingCategory)

# Server-computed figures; the model's copies are never used
DISCARDED_SCORE_KEYS = ("performance", "accessibility", "seo", "overall")

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def _candidate_texts(text: str, pattern: re.Pattern) -> List[str]:
    candidates = [text.strip()]
    candidates.extend(match.strip() for match in _FENCE_RE.findall(text))
    match = pattern.search(text)
    if match:
        candidates.append(match.group())
    return candidates


def extract_json(text: str, expected: type) -> Any:
    """
    Find the first JSON value of the expected type in free text

    Tries the whole text, fenced code blocks, then the widest {...} or [...]
    span.
    """
    if not text:
        return None
    pattern = _OBJECT_RE if expected is dict else _ARRAY_RE
    for candidate in _candidate_texts(text, pattern):
        try:
            value = json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(value, expected):
            return value
    return None


def _score(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # json.loads accepts NaN, Infinity and 1e400
    return number if math.isfinite(number) else None


def coerce_finding(item: Any) -> Optional[Finding]:
    """
    Loosely validate one model-produced finding

    Items without an issue or description are dropped. Unknown categories
    fall back to usability and unknown severities to medium.
    """
    if not isinstance(item, Mapping):
        return None
    issue = str(item.get("issue") or item.get("title") or "").strip()
    description = str(item.get("description") or "").strip()
    if not issue and not description:
        return None

    category = str(item.get("category") or "").strip().lower()
    if category not in CATEGORIES:
        category = FindingCategory.USABILITY.value
    severity = str(item.get("severity") or "").strip().lower()
    if severity not in SEVERITIES:
        severity = "medium"

    snippet = item.get("codeSnippet") or item.get("code_snippet")
    return Finding(
        category=category,
        severity=severity,
        issue=issue or description[:80],
        description=description or issue,
        location=str(item.get("location") or "Page-wide"),
        suggestion=str(item.get("suggestion") or item.get("recommendation") or ""),
        code_snippet=str(snippet) if snippet else None,
    )


def coerce_findings(items: Any) -> List[Finding]:
    if not isinstance(items, list):
        return []
    findings = [coerce_finding(item) for item in items]
    return [f for f in findings if f is not None]


def _severity_breakdown(value: Any) -> dict:
    if not isinstance(value, Mapping):
        return {}
    breakdown = {}
    for key in SEVERITIES:
        count = _score(value.get(key))
        if count is not None:
            breakdown[key] = int(count)
    return breakdown


class ResponseParser(ABC):
    format: ResponseFormat

    @abstractmethod
    def parse(self, text: str) -> Optional[ParsedResponse]:
        """Return a ParsedResponse if the text has this parser's shape"""


class ScoresParser(ResponseParser):
    """Current shape: {"scores": {...}, "top_issues": [...], ...}"""

    format = ResponseFormat.SCORES

    def parse(self, text: str) -> Optional[ParsedResponse]:
        data = extract_json(text, dict)
        if not data or not isinstance(data.get("scores"), Mapping):
            return None
        scores = data["scores"]
        discarded = {key: scores[key] for key in DISCARDED_SCORE_KEYS if key in scores}
        if "overall_score" in data:
            discarded["overall"] = data["overall_score"]

        return ParsedResponse(
            format=self.format,
            findings=coerce_findings(data.get("top_issues", data.get("findings"))),
            design_score=_score(scores.get("design")),
            justification=data.get("justification"),
            severity_breakdown=_severity_breakdown(data.get("severity_breakdown")),
            discarded_scores=discarded,
        )


class LegacyUxScoreParser(ResponseParser):
    """Earlier shape: {"ux_score": N, "findings": [...], "design_score"?: N}"""

    format = ResponseFormat.LEGACY_UX_SCORE

    def parse(self, text: str) -> Optional[ParsedResponse]:
        data = extract_json(text, dict)
        if not data or "ux_score" not in data:
            return None

        design = data.get("design_score")
        category_scores = data.get("category_scores")
        if design is None and isinstance(category_scores, Mapping):
            design = category_scores.get("design")

        return ParsedResponse(
            format=self.format,
            findings=coerce_findings(data.get("findings", data.get("issues"))),
            design_score=_score(design),
            justification=data.get("justification") or data.get("summary"),
            discarded_scores={"overall": data.get("ux_score")},
        )


class FindingsArrayParser(ResponseParser):
    """Oldest shape: a bare array of findings"""

    format = ResponseFormat.FINDINGS_ARRAY

    def parse(self, text: str) -> Optional[ParsedResponse]:
        data = extract_json(text, list)
        if data is None:
            return None
        findings = coerce_findings(data)
        if data and not findings:
            return None
        return ParsedResponse(format=self.format, findings=findings)


DEFAULT_PARSERS: Sequence[ResponseParser] = (ScoresParser(), LegacyUxScoreParser(), FindingsArrayParser())


def fallback_response() -> ParsedResponse:
    return ParsedResponse(
        format=ResponseFormat.FALLBACK,
        findings=[
            Finding(
                category=FindingCategory.ACCESSIBILITY.value,
                severity="high",
                issue="Analysis completed",
                description="AI analysis completed. Some findings may need manual review.",
                location="Page-wide",
                suggestion="Review the full audit report",
            )
        ],
    )


def parse_response(text: str, parsers: Sequence[ResponseParser] = DEFAULT_PARSERS) -> ParsedResponse:
    """Run the parser chain in priority order"""
    for parser in parsers:
        parsed = parser.parse(text)
        if parsed is not None:
            logger.debug(f"Model response parsed as {parsed.format.value} with {len(parsed.findings)} findings")
            return parsed

    logger.warning(f"Could not parse model response, using fallback finding (first 200 chars: {text[:200]!r})")
    return fallback_response()
