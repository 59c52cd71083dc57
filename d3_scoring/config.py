"""
Scoring configuration

Explicit threshold and weight tables handed to the scorers at construction
time. Built from Settings once per audit; the scorers themselves never read
global configuration.
"""

from dataclasses import dataclass, field
from typing import Any

from core.config import DEFAULT_THRESHOLDS


@dataclass(frozen=True)
class MetricThreshold:
    """Two-point Lighthouse-style band for one metric"""

    good: float
    needs_improvement: float

    def __post_init__(self):
        if self.needs_improvement <= self.good:
            raise ValueError("needs_improvement threshold must be greater than good threshold")

    def band(self, value: float) -> str:
        if value <= self.good:
            return "good"
        if value <= self.needs_improvement:
            return "needs-improvement"
        return "poor"


@dataclass(frozen=True)
class PerformanceWeights:
    fcp: float = 0.10
    lcp: float = 0.25
    tti: float = 0.10
    tbt: float = 0.30
    cls: float = 0.15
    speed_index: float = 0.10


@dataclass(frozen=True)
class AccessibilityDeductions:
    critical: int = 10
    high: int = 5
    medium: int = 2
    low: int = 1


@dataclass(frozen=True)
class SEOPoints:
    """Points per satisfied checklist item"""

    meta_description: int = 10
    title_length: int = 10
    structured_data: int = 15
    alt_text_high: int = 10
    alt_text_medium: int = 5
    semantic_html: int = 10
    canonical: int = 5
    open_graph: int = 10
    meta_description_range: tuple[int, int] = (50, 160)
    title_range: tuple[int, int] = (30, 60)
    alt_text_high_coverage: float = 0.8
    alt_text_medium_coverage: float = 0.5


@dataclass(frozen=True)
class CompositionWeights:
    performance: float = 0.30
    accessibility: float = 0.30
    design: float = 0.25
    seo: float = 0.15


def _default_thresholds() -> dict[str, MetricThreshold]:
    return thresholds_from_mapping(DEFAULT_THRESHOLDS)


def thresholds_from_mapping(table: dict[str, dict[str, Any]]) -> dict[str, MetricThreshold]:
    """Convert the settings threshold table into MetricThreshold objects"""
    return {
        name: MetricThreshold(good=float(band["good"]), needs_improvement=float(band["needs_improvement"]))
        for name, band in table.items()
    }


@dataclass(frozen=True)
class ScoringConfig:
    """Everything the scorers and the composer need"""

    thresholds: dict[str, MetricThreshold] = field(default_factory=_default_thresholds)
    performance_weights: PerformanceWeights = field(default_factory=PerformanceWeights)
    accessibility_deductions: AccessibilityDeductions = field(default_factory=AccessibilityDeductions)
    seo_points: SEOPoints = field(default_factory=SEOPoints)
    composition_weights: CompositionWeights = field(default_factory=CompositionWeights)
    no_timing_default_score: int = 50
    default_design_score: float = 70.0

    @classmethod
    def from_settings(cls, settings) -> "ScoringConfig":
        return cls(
            thresholds=thresholds_from_mapping(settings.metric_thresholds),
            default_design_score=settings.default_design_score,
        )
