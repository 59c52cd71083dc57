"""
Shared fixtures for all tests

Tests always run with USE_STUBS=true and ENVIRONMENT=test so no test
reaches the language model.
"""
import os
import sys

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Must be set before core.config builds the module-level settings
os.environ["USE_STUBS"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("LOG_FORMAT", "text")

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from core.config import get_settings  # noqa: E402
from d2_analysis.types import RawMetrics  # noqa: E402
from d1_capture.types import PageSnapshot, Viewport  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings():
    """Each test sees settings built from the current environment"""
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def sample_dom():
    return {
        "title": "Acme Widgets - Handmade widgets for every home",
        "metaDescription": "Acme sells handmade widgets, shipped worldwide with a lifetime guarantee on every order.",
        "images": [
            {"src": "https://acme.test/hero.jpg", "alt": "Workshop", "hasAlt": True},
            {"src": "https://acme.test/logo.png", "alt": "", "hasAlt": False},
        ],
        "links": [{"href": "https://acme.test/shop", "text": "Shop", "hasText": True}],
        "headings": [{"tag": "h1", "text": "Acme Widgets"}],
        "buttons": [{"text": "Buy", "ariaLabel": ""}],
        "forms": [{"type": "input", "inputType": "email", "label": "", "hasLabel": False, "required": True}],
        "textStyles": [{"color": "rgb(0, 0, 0)", "fontSize": "16px"}],
        "hasCanonical": True,
        "hasOpenGraph": False,
        "hasStructuredData": False,
        "hasSemanticHTML": True,
    }


@pytest.fixture
def sample_snapshot(sample_dom):
    return PageSnapshot(
        url="https://acme.test",
        final_url="https://acme.test/",
        raw_metrics=RawMetrics(fcp=1203.4, lcp=2004.9, tti=3100.0, tbt=120.0, cls=0.0523, speed_index=1604.1),
        dom=sample_dom,
        html="<html><head><title>Acme Widgets</title></head><body><main>Hi</main></body></html>",
        accessibility_tree={
            "role": "WebArea",
            "name": "Acme Widgets",
            "children": [
                {"role": "heading", "name": "Acme Widgets"},
                {"role": "button", "name": ""},
                {"role": "textbox", "name": ""},
            ],
        },
        screenshot_base64="iVBORw0KGgo=",
        viewport=Viewport(),
        browser_version="120.0.0.0",
        http_status=200,
    )


@pytest.fixture
def mock_browser():
    browser = MagicMock()
    browser.close = AsyncMock()
    browser.version = "120.0.0.0"
    return browser
