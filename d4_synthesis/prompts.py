"""
Prompt construction for UX finding synthesis

The computed performance, accessibility and SEO scores are handed to the
model with an instruction to repeat them unchanged; the model contributes
the design score and the findings only.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from d2_analysis.types import SEOValidation, ValidatedMetrics
from d3_scoring.config import MetricThreshold
from d3_scoring.scorers import THRESHOLD_KEYS

METRIC_LABELS = {
    "fcp": ("First Contentful Paint", "ms"),
    "lcp": ("Largest Contentful Paint", "ms"),
    "tti": ("Time to Interactive", "ms"),
    "tbt": ("Total Blocking Time", "ms"),
    "cls": ("Cumulative Layout Shift", ""),
    "speed_index": ("Speed Index", "ms"),
}


@dataclass
class PromptContext:
    """Signals gathered for one audit, ready to be rendered into a prompt"""

    url: str
    metrics: ValidatedMetrics
    seo: SEOValidation
    scores: Dict[str, int]
    thresholds: Mapping[str, MetricThreshold]
    dom: Dict[str, Any] = field(default_factory=dict)
    html: str = ""


class AuditPrompts:
    """Prompt templates for the finding synthesizer"""

    SYSTEM_PROMPT = (
        "You are a UX audit expert. You respond with a single valid JSON object and nothing else."
    )

    UX_AUDIT_PROMPT = """
Analyze the following website data and identify UX issues.

**Website Information:**
- URL: {url}
- Page Title: {title}
- Meta Description: {meta_description}

**Computed Scores (authoritative, copy these values verbatim, do not recalculate):**
- Performance: {performance_score}/100
- Accessibility: {accessibility_score}/100
- SEO: {seo_score}/100

**Measured Metrics:**
{metrics_table}

**SEO Checks:**
{seo_table}

**Page Structure:**
- Images: {image_count} total, {images_missing_alt} missing alt text
- Links: {link_count} total, {links_missing_text} without descriptive text
- Headings: {heading_count} total
- Buttons: {button_count} total
- Form controls: {form_count} total, {unlabeled_controls} without a label

**Text Styles (sample):**
{text_styles}

**HTML Sample (first {html_limit} chars):**
{html_sample}

**Requirements:**
1. Rate the visual design from 0 to 100. This is the only score you decide.
2. Report issues in these categories: accessibility, usability, design, performance, seo
3. Severity is one of: critical, high, medium, low
4. Return 8-15 findings, most impactful first
5. Provide a codeSnippet with an HTML/CSS fix where applicable

**Output Format (JSON):**
{{
    "scores": {{
        "performance": {performance_score},
        "accessibility": {accessibility_score},
        "seo": {seo_score},
        "design": <0-100>
    }},
    "justification": "One paragraph explaining the design score",
    "severity_breakdown": {{"critical": 0, "high": 0, "medium": 0, "low": 0}},
    "top_issues": [
        {{
            "category": "accessibility",
            "severity": "high",
            "issue": "Missing alt text on images",
            "description": "3 images lack alt attributes, impacting screen reader users",
            "location": "Hero section",
            "suggestion": "Add descriptive alt text to all images",
            "codeSnippet": "<img src='...' alt='Descriptive text here' />"
        }}
    ]
}}
"""


def _format_number(value: float) -> str:
    return f"{value:.10g}"


def metrics_table(metrics: ValidatedMetrics, thresholds: Mapping[str, MetricThreshold]) -> str:
    """One line per metric with its value, threshold band and limits"""
    lines = []
    for name, (label, unit) in METRIC_LABELS.items():
        value = getattr(metrics, name)
        threshold = thresholds.get(THRESHOLD_KEYS[name])
        line = f"- {label}: {_format_number(value)}{unit}"
        if threshold is not None:
            line += (
                f" ({threshold.band(value)}; good <= {_format_number(threshold.good)}{unit},"
                f" needs improvement <= {_format_number(threshold.needs_improvement)}{unit})"
            )
        lines.append(line)
    return "\n".join(lines)


def seo_table(seo: SEOValidation) -> str:
    return "\n".join(
        [
            f"- Meta description: {'present' if seo.has_meta_description else 'missing'}"
            f" ({seo.meta_description_length} chars)",
            f"- Title length: {seo.title_length} chars",
            f"- Structured data: {'yes' if seo.has_structured_data else 'no'}",
            f"- Semantic HTML landmarks: {'yes' if seo.semantic_html else 'no'}",
            f"- Alt text coverage: {seo.alt_text_coverage:.0%}",
            f"- Canonical link: {'yes' if seo.has_canonical else 'no'}",
            f"- Open Graph tags: {'yes' if seo.has_open_graph else 'no'}",
        ]
    )


def _count(items: Optional[List[Any]], predicate=None) -> int:
    items = items or []
    if predicate is None:
        return len(items)
    return sum(1 for item in items if isinstance(item, Mapping) and predicate(item))


def build_prompt(context: PromptContext, html_limit: int = 10000) -> str:
    dom = context.dom or {}
    text_styles = dom.get("textStyles") or []

    return AuditPrompts.UX_AUDIT_PROMPT.format(
        url=context.url,
        title=dom.get("title") or "(none)",
        meta_description=dom.get("metaDescription") or "(none)",
        performance_score=context.scores.get("performance", 0),
        accessibility_score=context.scores.get("accessibility", 0),
        seo_score=context.scores.get("seo", 0),
        metrics_table=metrics_table(context.metrics, context.thresholds),
        seo_table=seo_table(context.seo),
        image_count=_count(dom.get("images")),
        images_missing_alt=_count(dom.get("images"), lambda i: not i.get("hasAlt")),
        link_count=_count(dom.get("links")),
        links_missing_text=_count(dom.get("links"), lambda link: not link.get("hasText")),
        heading_count=_count(dom.get("headings")),
        button_count=_count(dom.get("buttons")),
        form_count=_count(dom.get("forms")),
        unlabeled_controls=_count(dom.get("forms"), lambda f: not f.get("hasLabel", True)),
        text_styles=json.dumps(text_styles[:10], indent=2) if text_styles else "(none captured)",
        html_limit=html_limit,
        html_sample=(context.html or "")[:html_limit],
    )
