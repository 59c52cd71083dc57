"""
SEO validation

Derives the SEO checklist inputs from the captured HTML and the DOM
signals collected in the browser. No network access.
"""

from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup

from core.logging import get_logger
from d2_analysis.types import SEOValidation

logger = get_logger(__name__, domain="d2")

SEMANTIC_TAGS = ("header", "nav", "main", "article", "section", "aside", "footer")


def _extract_title(soup: BeautifulSoup) -> str:
    title_tag = soup.find("title")
    return title_tag.get_text().strip() if title_tag else ""


def _extract_meta_description(soup: BeautifulSoup) -> str:
    meta = soup.find("meta", attrs={"name": "description"})
    if meta and meta.get("content"):
        return meta["content"].strip()
    return ""


def _has_structured_data(soup: BeautifulSoup) -> bool:
    if soup.find("script", attrs={"type": "application/ld+json"}):
        return True
    return soup.find(attrs={"itemscope": True}) is not None


def _has_canonical(soup: BeautifulSoup) -> bool:
    for link in soup.find_all("link", href=True):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if "canonical" in [value.lower() for value in rel]:
            return True
    return False


def _has_open_graph(soup: BeautifulSoup) -> bool:
    for meta in soup.find_all("meta"):
        prop = meta.get("property") or ""
        if prop.lower().startswith("og:"):
            return True
    return False


def alt_text_coverage(images: list[Mapping[str, Any]]) -> float:
    """Share of images carrying a non-empty alt attribute"""
    if not images:
        # Nothing to describe means nothing is missing
        return 1.0
    with_alt = sum(1 for image in images if image.get("hasAlt"))
    return with_alt / len(images)


def validate_seo(html: str | None, dom: Mapping[str, Any] | None = None) -> SEOValidation:
    """
    Build the SEO validation table

    Args:
        html: Rendered HTML prefix captured from the page
        dom: DOM signals from the browser; values here win over the HTML
            parse because they were read from the full document

    Returns:
        SEOValidation
    """
    dom = dom or {}
    soup = BeautifulSoup(html or "", "html.parser")

    title = dom.get("title")
    if title is None:
        title = _extract_title(soup)
    meta_description = dom.get("metaDescription")
    if meta_description is None:
        meta_description = _extract_meta_description(soup)
    meta_description = (meta_description or "").strip()

    images = dom.get("images")
    if images is None:
        images = [{"hasAlt": bool((img.get("alt") or "").strip())} for img in soup.find_all("img")]

    has_structured_data = dom.get("hasStructuredData")
    if has_structured_data is None:
        has_structured_data = _has_structured_data(soup)

    semantic_html = dom.get("hasSemanticHTML")
    if semantic_html is None:
        semantic_html = any(soup.find(tag) is not None for tag in SEMANTIC_TAGS)

    has_canonical = dom.get("hasCanonical")
    if has_canonical is None:
        has_canonical = _has_canonical(soup)

    has_open_graph = dom.get("hasOpenGraph")
    if has_open_graph is None:
        has_open_graph = _has_open_graph(soup)

    validation = SEOValidation(
        has_meta_description=bool(meta_description),
        meta_description_length=len(meta_description),
        title_length=len((title or "").strip()),
        has_structured_data=bool(has_structured_data),
        semantic_html=bool(semantic_html),
        alt_text_coverage=alt_text_coverage(images),
        has_canonical=bool(has_canonical),
        has_open_graph=bool(has_open_graph),
    )
    logger.debug(f"SEO validation: {validation.to_dict()}")
    return validation
