"""
D1 Capture Page Extractor

Loads a page in headless Chromium under a fixed protocol (viewport, CPU and
network throttling, warm-up, cache reset, settle period) and captures raw
timings, the accessibility tree, DOM signals, HTML and a screenshot.

The browser is owned by open_browser(): whatever happens during extraction
it is closed exactly once.
"""

import asyncio
import base64
from collections.abc import AsyncIterator, Callable
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, Dict, List, Optional, Tuple

from playwright.async_api import Browser, BrowserContext, CDPSession, Error as PlaywrightError, Page, async_playwright

from core.exceptions import BrowserLaunchError, PageUnreachableError
from core.logging import get_logger
from core.metrics import metrics
from d1_capture.provisioner import BrowserProvisioner
from d1_capture.scripts import COLLECT_METRICS_SCRIPT, EXTRACT_DOM_SCRIPT, OBSERVER_INIT_SCRIPT
from d1_capture.types import ExtractionConfig, PageSnapshot
from d2_analysis.normalizer import raw_metrics_from_mapping

logger = get_logger(__name__, domain="d1")


def ax_tree_from_cdp(nodes: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Convert a flat CDP Accessibility.getFullAXTree node list into the nested
    role/name/value/children shape the analyzer walks.

    Ignored nodes are skipped but their children are kept.
    """
    if not nodes:
        return None

    by_id = {node.get("nodeId"): node for node in nodes}

    def prop(node: Dict[str, Any], key: str) -> Any:
        entry = node.get(key)
        return entry.get("value") if isinstance(entry, dict) else None

    def build(node_id: Any) -> List[Dict[str, Any]]:
        root = by_id.get(node_id)
        if root is None:
            return []
        converted: List[Dict[str, Any]] = []
        stack = [(root, converted)]
        while stack:
            node, siblings = stack.pop()
            children: List[Dict[str, Any]] = []
            if node.get("ignored"):
                target = siblings
            else:
                entry = {"role": prop(node, "role"), "name": prop(node, "name") or ""}
                value = prop(node, "value")
                if value not in (None, ""):
                    entry["value"] = value
                entry["children"] = children
                siblings.append(entry)
                target = children
            for child_id in reversed(node.get("childIds") or []):
                child = by_id.get(child_id)
                if child is not None:
                    stack.append((child, target))
        return converted

    roots = build(nodes[0].get("nodeId"))
    if not roots:
        return None
    if len(roots) == 1:
        return roots[0]
    return {"role": "RootWebArea", "name": "", "children": roots}


class PageExtractor:
    """Drives one browser through the capture protocol"""

    def __init__(
        self,
        config: ExtractionConfig,
        provisioner: BrowserProvisioner,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        self.config = config
        self.provisioner = provisioner
        self.playwright_factory = playwright_factory

    @asynccontextmanager
    async def open_browser(self) -> AsyncIterator[Browser]:
        """Launch a browser and close it exactly once on the way out"""
        async with AsyncExitStack() as stack:
            try:
                playwright = await stack.enter_async_context(self.playwright_factory())
            except (PlaywrightError, OSError) as e:
                metrics.track_browser_launch(self.provisioner.name, status="failed")
                raise BrowserLaunchError(
                    "Failed to start the Playwright driver", provider=self.provisioner.name, details=str(e)
                ) from e

            browser = await self.provisioner.launch(playwright)
            try:
                yield browser
            finally:
                try:
                    await browser.close()
                    logger.debug("Browser closed")
                except PlaywrightError as e:
                    logger.warning(f"Error closing browser: {e}")

    async def extract(self, url: str) -> PageSnapshot:
        """Launch, extract and close in one call"""
        async with self.open_browser() as browser:
            return await self.extract_page(browser, url)

    async def extract_page(self, browser: Browser, url: str) -> PageSnapshot:
        viewport = self.config.viewport
        try:
            context = await browser.new_context(
                viewport={"width": viewport.width, "height": viewport.height},
                device_scale_factor=viewport.device_scale_factor,
            )
        except PlaywrightError as e:
            logger.error(f"Could not open a browser context for {url}: {e}")
            raise PageUnreachableError(url, reason=str(e)) from e

        try:
            page, cdp = await self._prepare_page(context, url)

            logger.info(f"Navigating to {url} (wait_until={self.config.wait_until})")
            try:
                response = await page.goto(
                    url,
                    wait_until=self.config.wait_until,
                    timeout=self.config.navigation_timeout_ms,
                )
            except PlaywrightError as e:
                logger.error(f"Navigation to {url} failed: {e}")
                raise PageUnreachableError(url, reason=str(e)) from e

            await asyncio.sleep(self.config.stabilization_period_ms / 1000)

            metric_payload = await self._collect_metrics(page)
            accessibility_tree = await self._snapshot_accessibility(page, cdp)
            dom = await page.evaluate(
                EXTRACT_DOM_SCRIPT,
                {
                    "htmlLimit": self.config.html_capture_limit,
                    "styleSampleSize": self.config.text_style_sample_size,
                },
            )
            screenshot = await page.screenshot(type="png", full_page=False)

            html = dom.pop("html", "") if isinstance(dom, dict) else ""
            return PageSnapshot(
                url=url,
                final_url=page.url,
                raw_metrics=raw_metrics_from_mapping(metric_payload),
                dom=dom if isinstance(dom, dict) else {},
                html=html,
                accessibility_tree=accessibility_tree,
                screenshot_base64=base64.b64encode(screenshot).decode("ascii"),
                viewport=viewport,
                browser_version=browser.version,
                http_status=response.status if response is not None else None,
                metric_details={
                    key: metric_payload.get(key) for key in ("longTaskCount", "navigation") if key in metric_payload
                },
            )
        finally:
            try:
                await context.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser context: {e}")

    async def _prepare_page(self, context: BrowserContext, url: str) -> Tuple[Page, Optional[CDPSession]]:
        """Open the page and apply throttling, warm-up, cache reset and observers"""
        try:
            page = await context.new_page()
            cdp = await self._open_cdp_session(context, page)

            if self.config.throttling_enabled and cdp is not None:
                await self._apply_throttling(cdp)

            if self.config.warmup_enabled:
                await self._warm_up(page, url)

            if cdp is not None:
                await self._clear_state(cdp)

            await page.add_init_script(OBSERVER_INIT_SCRIPT)
        except PlaywrightError as e:
            logger.error(f"Page setup for {url} failed: {e}")
            raise PageUnreachableError(url, reason=str(e)) from e
        return page, cdp

    async def _open_cdp_session(self, context: BrowserContext, page: Page) -> Optional[CDPSession]:
        try:
            return await context.new_cdp_session(page)
        except PlaywrightError as e:
            logger.warning(f"CDP session unavailable, skipping throttling and cache reset: {e}")
            return None

    async def _apply_throttling(self, cdp: CDPSession) -> None:
        try:
            await cdp.send("Emulation.setCPUThrottlingRate", {"rate": self.config.cpu_slowdown_multiplier})
            await cdp.send("Network.enable")
            await cdp.send("Network.emulateNetworkConditions", self.config.network.to_cdp())
            logger.debug(
                f"Throttling applied: cpu={self.config.cpu_slowdown_multiplier}x "
                f"rtt={self.config.network.rtt_ms}ms throughput={self.config.network.throughput_kbps}kbps"
            )
        except PlaywrightError as e:
            logger.warning(f"Could not apply throttling: {e}")

    async def _warm_up(self, page: Page, url: str) -> None:
        try:
            await page.goto(url, wait_until=self.config.warmup_wait_until, timeout=self.config.warmup_timeout_ms)
        except PlaywrightError as e:
            # Measured navigation decides reachability
            logger.debug(f"Warm-up navigation failed, continuing: {e}")
        await asyncio.sleep(self.config.warmup_cooldown_ms / 1000)

    async def _clear_state(self, cdp: CDPSession) -> None:
        try:
            if self.config.clear_storage_cache:
                await cdp.send("Network.clearBrowserCache")
            if self.config.clear_browser_cookies:
                await cdp.send("Network.clearBrowserCookies")
        except PlaywrightError as e:
            logger.warning(f"Could not clear browser state: {e}")

    async def _collect_metrics(self, page: Page) -> Dict[str, Any]:
        try:
            payload = await page.evaluate(COLLECT_METRICS_SCRIPT)
        except PlaywrightError as e:
            logger.warning(f"Metric collection failed, using zeros: {e}")
            return {}
        return payload if isinstance(payload, dict) else {}

    async def _snapshot_accessibility(self, page: Page, cdp: Optional[CDPSession]) -> Optional[Dict[str, Any]]:
        accessibility = getattr(page, "accessibility", None)
        if accessibility is not None:
            try:
                return await accessibility.snapshot()
            except PlaywrightError as e:
                logger.warning(f"Accessibility snapshot failed: {e}")

        if cdp is not None:
            try:
                result = await cdp.send("Accessibility.getFullAXTree")
                return ax_tree_from_cdp(result.get("nodes", []))
            except PlaywrightError as e:
                logger.warning(f"CDP accessibility tree unavailable: {e}")

        return None
