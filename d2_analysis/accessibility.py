"""
Accessibility tree analyzer

Walks an accessibility snapshot (nodes of role/name/value/children) depth
first and classifies violations by severity.
"""

from collections.abc import Mapping
from typing import Any

from core.logging import get_logger
from d2_analysis.types import AccessibilityIssue, AccessibilityIssueSet, AccessibilityIssueType, Severity

logger = get_logger(__name__, domain="d2")

INPUT_ROLES = frozenset({"textbox", "combobox", "listbox", "button"})
ACTIONABLE_ROLES = frozenset({"button", "link", "checkbox", "radio"})
HEADING_ROLE = "heading"


def _has_text(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    # Sliders and spinbuttons report numeric values
    return True


def classify_node(node: Mapping[str, Any]) -> list[AccessibilityIssue]:
    """Return the violations raised by a single node, ignoring its children"""
    role = node.get("role")
    has_name = _has_text(node.get("name"))
    has_value = _has_text(node.get("value"))
    issues = []

    if role in INPUT_ROLES and not has_name and not has_value:
        issues.append(AccessibilityIssue(type=AccessibilityIssueType.MISSING_LABEL, severity=Severity.HIGH, role=role))

    if role in ACTIONABLE_ROLES and not has_name and not has_value:
        issues.append(
            AccessibilityIssue(type=AccessibilityIssueType.MISSING_ARIA_LABEL, severity=Severity.MEDIUM, role=role)
        )

    if role == HEADING_ROLE and not has_name:
        issues.append(AccessibilityIssue(type=AccessibilityIssueType.EMPTY_HEADING, severity=Severity.MEDIUM, role=role))

    return issues


def analyze_accessibility_tree(snapshot: Mapping[str, Any] | None) -> AccessibilityIssueSet:
    """
    Analyze an accessibility snapshot

    A missing snapshot (the browser could not produce one) yields an empty
    issue set so the audit can continue.
    """
    result = AccessibilityIssueSet()
    if not snapshot:
        logger.info("No accessibility snapshot available, reporting zero issues")
        return result

    # Explicit stack keeps deep trees clear of the recursion limit
    stack = [snapshot]
    while stack:
        node = stack.pop()
        if not isinstance(node, Mapping):
            continue
        for issue in classify_node(node):
            result.add(issue)
        children = node.get("children") or []
        stack.extend(reversed(children))

    logger.debug(
        f"Accessibility tree analyzed: {result.total} issues "
        f"(critical={result.critical}, high={result.high}, medium={result.medium}, low={result.low})"
    )
    return result
