"""
D1 Capture - headless browser page extraction
"""

from .extractor import PageExtractor, ax_tree_from_cdp
from .provisioner import BrowserProvisioner, BundledChromiumProvisioner, LocalChromiumProvisioner, get_provisioner
from .types import ExtractionConfig, NetworkConditions, PageSnapshot, Viewport

__all__ = [
    "PageExtractor",
    "ax_tree_from_cdp",
    "BrowserProvisioner",
    "LocalChromiumProvisioner",
    "BundledChromiumProvisioner",
    "get_provisioner",
    "ExtractionConfig",
    "NetworkConditions",
    "PageSnapshot",
    "Viewport",
]
