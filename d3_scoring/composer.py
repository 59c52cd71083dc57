"""
Score composer

Single source of truth for the overall UX score. Called identically for
every LLM response shape; any overall figure the model produced is ignored.
"""

import math
from dataclasses import dataclass
from typing import Any

from d3_scoring.config import CompositionWeights


def clamp_score(value: Any) -> float:
    """Clamp to [0, 100]; missing, non-numeric and NaN values become 0"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return max(0.0, min(100.0, number))


@dataclass(frozen=True)
class CategoryScores:
    performance: float
    accessibility: float
    design: float
    seo: float

    def to_dict(self) -> dict[str, float]:
        return {
            "performance": self.performance,
            "accessibility": self.accessibility,
            "design": self.design,
            "seo": self.seo,
        }


def compose(
    performance: Any,
    accessibility: Any,
    design: Any,
    seo: Any,
    weights: CompositionWeights | None = None,
) -> float:
    """
    Blend category scores into the overall score

    Each input is clamped before weighting; the result is rounded to two
    decimals.
    """
    weights = weights or CompositionWeights()
    total = (
        clamp_score(performance) * weights.performance
        + clamp_score(accessibility) * weights.accessibility
        + clamp_score(design) * weights.design
        + clamp_score(seo) * weights.seo
    )
    return round(total, 2)


def compose_scores(scores: CategoryScores, weights: CompositionWeights | None = None) -> float:
    return compose(scores.performance, scores.accessibility, scores.design, scores.seo, weights)
