"""
Deterministic category scorers

Performance, accessibility and SEO scores are always computed here from
validated signals. The LLM never supplies these values.
"""

from d2_analysis.types import AccessibilityIssueSet, SEOValidation, ValidatedMetrics
from d3_scoring.config import MetricThreshold, ScoringConfig

# Metric name in ValidatedMetrics -> key in the threshold table
THRESHOLD_KEYS = {
    "fcp": "fcp",
    "lcp": "lcp",
    "tti": "tti",
    "tbt": "tbt",
    "cls": "cls",
    "speed_index": "si",
}


def metric_subscore(value: float, threshold: MetricThreshold) -> float:
    """
    Score one metric on the two-point curve

    <= good scores 100, the band up to needs_improvement falls linearly to
    50, anything beyond scores 0.
    """
    if value <= threshold.good:
        return 100.0
    if value <= threshold.needs_improvement:
        span = threshold.needs_improvement - threshold.good
        return 100.0 - ((value - threshold.good) / span) * 50.0
    return 0.0


class PerformanceScorer:
    """Weighted Lighthouse-style performance score"""

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()

    def subscores(self, metrics: ValidatedMetrics) -> dict[str, float]:
        return {
            name: metric_subscore(getattr(metrics, name), self.config.thresholds[key])
            for name, key in THRESHOLD_KEYS.items()
        }

    def score(self, metrics: ValidatedMetrics) -> int:
        # Zero paint and interactive timings mean navigation timing was unavailable
        if metrics.fcp == 0 and metrics.lcp == 0 and metrics.tti == 0:
            return self.config.no_timing_default_score

        weights = self.config.performance_weights
        subscores = self.subscores(metrics)
        total = sum(subscores[name] * getattr(weights, name) for name in THRESHOLD_KEYS)
        return int(round(total))


class AccessibilityScorer:
    """100 minus weighted deductions per issue severity"""

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()

    def score(self, issues: AccessibilityIssueSet) -> int:
        deductions = self.config.accessibility_deductions
        penalty = (
            issues.critical * deductions.critical
            + issues.high * deductions.high
            + issues.medium * deductions.medium
            + issues.low * deductions.low
        )
        return max(0, min(100, 100 - penalty))


class SEOScorer:
    """
    Additive SEO checklist

    The point table sums to 70, so a page satisfying every item scores 70
    rather than 100.
    """

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()

    def breakdown(self, seo: SEOValidation) -> dict[str, int]:
        points = self.config.seo_points
        meta_low, meta_high = points.meta_description_range
        title_low, title_high = points.title_range

        if seo.alt_text_coverage > points.alt_text_high_coverage:
            alt_points = points.alt_text_high
        elif seo.alt_text_coverage > points.alt_text_medium_coverage:
            alt_points = points.alt_text_medium
        else:
            alt_points = 0

        return {
            "meta_description": points.meta_description
            if seo.has_meta_description and meta_low <= seo.meta_description_length <= meta_high
            else 0,
            "title_length": points.title_length if title_low <= seo.title_length <= title_high else 0,
            "structured_data": points.structured_data if seo.has_structured_data else 0,
            "alt_text": alt_points,
            "semantic_html": points.semantic_html if seo.semantic_html else 0,
            "canonical": points.canonical if seo.has_canonical else 0,
            "open_graph": points.open_graph if seo.has_open_graph else 0,
        }

    def score(self, seo: SEOValidation) -> int:
        return min(100, sum(self.breakdown(seo).values()))


def score_performance(metrics: ValidatedMetrics, config: ScoringConfig | None = None) -> int:
    return PerformanceScorer(config).score(metrics)


def score_accessibility(issues: AccessibilityIssueSet, config: ScoringConfig | None = None) -> int:
    return AccessibilityScorer(config).score(issues)


def score_seo(seo: SEOValidation, config: ScoringConfig | None = None) -> int:
    return SEOScorer(config).score(seo)
