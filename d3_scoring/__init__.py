"""
D3 Scoring - deterministic category scores and the overall score blend
"""

from .composer import CategoryScores, clamp_score, compose, compose_scores
from .config import CompositionWeights, MetricThreshold, ScoringConfig
from .scorers import (
    AccessibilityScorer,
    PerformanceScorer,
    SEOScorer,
    metric_subscore,
    score_accessibility,
    score_performance,
    score_seo,
)

__all__ = [
    "CategoryScores",
    "clamp_score",
    "compose",
    "compose_scores",
    "CompositionWeights",
    "MetricThreshold",
    "ScoringConfig",
    "AccessibilityScorer",
    "PerformanceScorer",
    "SEOScorer",
    "metric_subscore",
    "score_accessibility",
    "score_performance",
    "score_seo",
]
