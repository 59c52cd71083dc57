"""
D2 Analysis - signal normalization and validation

Turns captured page data into validated metrics, accessibility issue sets
and the SEO checklist table.
"""

from .accessibility import analyze_accessibility_tree
from .normalizer import normalize_metrics
from .seo import validate_seo
from .types import (
    AccessibilityIssue,
    AccessibilityIssueSet,
    AccessibilityIssueType,
    RawMetrics,
    SEOValidation,
    Severity,
    ValidatedMetrics,
)

__all__ = [
    "analyze_accessibility_tree",
    "normalize_metrics",
    "validate_seo",
    "AccessibilityIssue",
    "AccessibilityIssueSet",
    "AccessibilityIssueType",
    "RawMetrics",
    "SEOValidation",
    "Severity",
    "ValidatedMetrics",
]
