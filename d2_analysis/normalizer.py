"""
Metric normalizer

Rounds raw browser timings to a fixed granularity so that the same page
produces the same score on every run and host. Pure functions only.
"""

import math
from collections.abc import Mapping
from typing import Any

from d2_analysis.types import RawMetrics, ValidatedMetrics

DEFAULT_TIME_ROUNDING_MS = 10
DEFAULT_CLS_PRECISION = 3

TIME_FIELDS = ("fcp", "lcp", "tti", "tbt", "speed_index")

# Browser payloads use camelCase for speed index
_FIELD_ALIASES = {
    "fcp": ("fcp", "first_contentful_paint", "firstContentfulPaint"),
    "lcp": ("lcp", "largest_contentful_paint", "largestContentfulPaint"),
    "tti": ("tti", "time_to_interactive", "timeToInteractive"),
    "tbt": ("tbt", "total_blocking_time", "totalBlockingTime"),
    "cls": ("cls", "cumulative_layout_shift", "cumulativeLayoutShift"),
    "speed_index": ("speed_index", "speedIndex", "si"),
}


def _sanitize(value: Any) -> float:
    """Coerce to a finite, non-negative float; anything else becomes 0"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def round_time(value: Any, granularity: int = DEFAULT_TIME_ROUNDING_MS) -> float:
    """Round a millisecond value to the nearest multiple of granularity"""
    return float(_round_half_up(_sanitize(value) / granularity) * granularity)


def round_cls(value: Any, precision: int = DEFAULT_CLS_PRECISION) -> float:
    """Round a layout-shift ratio to a fixed number of decimals"""
    factor = 10**precision
    return _round_half_up(_sanitize(value) * factor) / factor


def raw_metrics_from_mapping(payload: Mapping[str, Any] | None) -> RawMetrics:
    """Build RawMetrics from a browser payload, tolerating missing keys"""
    payload = payload or {}
    values = {}
    for field_name, aliases in _FIELD_ALIASES.items():
        value = None
        for alias in aliases:
            if payload.get(alias) is not None:
                value = payload[alias]
                break
        values[field_name] = _sanitize(value)
    return RawMetrics(**values)


def normalize_metrics(
    raw: RawMetrics | ValidatedMetrics | Mapping[str, Any] | None,
    granularity: int = DEFAULT_TIME_ROUNDING_MS,
    cls_precision: int = DEFAULT_CLS_PRECISION,
) -> ValidatedMetrics:
    """
    Normalize raw metrics into ValidatedMetrics

    Time fields are rounded to ``granularity`` milliseconds and CLS to
    ``cls_precision`` decimals. Absent, negative or non-numeric values
    become 0. normalize_metrics(normalize_metrics(x)) == normalize_metrics(x).
    """
    if granularity <= 0:
        raise ValueError("granularity must be positive")

    if raw is None or isinstance(raw, Mapping):
        raw = raw_metrics_from_mapping(raw)

    return ValidatedMetrics(
        fcp=round_time(raw.fcp, granularity),
        lcp=round_time(raw.lcp, granularity),
        tti=round_time(raw.tti, granularity),
        tbt=round_time(raw.tbt, granularity),
        cls=round_cls(raw.cls, cls_precision),
        speed_index=round_time(raw.speed_index, granularity),
    )
