"""
Browser provisioning

One interface for starting Chromium, with the platform-specific details
(Playwright-managed download vs. a bundled binary at a fixed path) hidden
behind it. The implementation is chosen from configuration, never by
sniffing the runtime environment.
"""

import os
from abc import ABC, abstractmethod
from typing import Any

from playwright.async_api import Browser, Error as PlaywrightError, Playwright

from core.exceptions import BrowserLaunchError
from core.logging import get_logger
from core.metrics import metrics

logger = get_logger(__name__, domain="d1")


class BrowserProvisioner(ABC):
    """Starts a headless Chromium instance with a fixed argument set"""

    name = "base"

    def __init__(self, launch_args: list[str], headless: bool = True):
        self.launch_args = list(launch_args)
        self.headless = headless

    @abstractmethod
    def launch_options(self) -> dict[str, Any]:
        """Keyword arguments for chromium.launch"""

    async def launch(self, playwright: Playwright) -> Browser:
        options = self.launch_options()
        logger.info(f"Launching Chromium via {self.name} provisioner with {len(self.launch_args)} args")
        try:
            browser = await playwright.chromium.launch(**options)
        except PlaywrightError as e:
            metrics.track_browser_launch(self.name, status="failed")
            logger.error(f"Browser launch failed ({self.name}): {e}")
            raise BrowserLaunchError(
                "Failed to launch browser. No compatible Chromium binary was found.",
                provider=self.name,
                details=str(e),
            ) from e

        metrics.track_browser_launch(self.name)
        return browser


class LocalChromiumProvisioner(BrowserProvisioner):
    """Chromium installed by `playwright install chromium`"""

    name = "local"

    def launch_options(self) -> dict[str, Any]:
        return {"headless": self.headless, "args": self.launch_args}


class BundledChromiumProvisioner(BrowserProvisioner):
    """Chromium shipped with the deployment at a known path (serverless images)"""

    name = "bundled"

    def __init__(self, launch_args: list[str], executable_path: str, headless: bool = True):
        super().__init__(launch_args, headless)
        self.executable_path = executable_path

    def launch_options(self) -> dict[str, Any]:
        if not os.path.exists(self.executable_path):
            raise BrowserLaunchError(
                "Failed to launch browser. Bundled Chromium binary not found.",
                provider=self.name,
                details=f"No executable at {self.executable_path}",
            )
        return {
            "headless": self.headless,
            "args": self.launch_args,
            "executable_path": self.executable_path,
        }


def get_provisioner(settings) -> BrowserProvisioner:
    """Select the provisioner named by BROWSER_PROVIDER"""
    if settings.browser_provider == "bundled":
        return BundledChromiumProvisioner(
            settings.browser_launch_args,
            executable_path=settings.browser_executable_path,
            headless=settings.browser_headless,
        )
    return LocalChromiumProvisioner(settings.browser_launch_args, headless=settings.browser_headless)
