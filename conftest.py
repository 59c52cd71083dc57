"""
Root conftest.py for pytest configuration

Registers markers and applies them from the test's location so that
`pytest -m unit` and `pytest -m slow` select the expected sets.
"""
import os

import pytest

MARKERS = {
    "unit": "fast, isolated tests under tests/unit",
    "slow": "tests that sleep or drive a real browser",
}


def pytest_configure(config):
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


def pytest_collection_modifyitems(config, items):
    in_ci = os.environ.get("CI", "false").lower() == "true"

    for item in items:
        if f"{os.sep}unit{os.sep}" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if in_ci and item.get_closest_marker("slow"):
            item.add_marker(pytest.mark.skip(reason="slow tests are skipped in CI"))
