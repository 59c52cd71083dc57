"""
D1 Capture Types
"""

from dataclasses import dataclass, field
from typing import Any

from d2_analysis.types import RawMetrics


@dataclass(frozen=True)
class Viewport:
    width: int = 1280
    height: int = 800
    device_scale_factor: float = 1.0

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class NetworkConditions:
    """Simulated network, expressed as CDP emulation parameters"""

    rtt_ms: int = 150
    throughput_kbps: int = 1638
    upload_ratio: float = 0.6

    @property
    def download_bytes_per_sec(self) -> float:
        return self.throughput_kbps * 1024 / 8

    @property
    def upload_bytes_per_sec(self) -> int:
        return round(self.download_bytes_per_sec * self.upload_ratio)

    def to_cdp(self) -> dict[str, Any]:
        return {
            "offline": False,
            "latency": self.rtt_ms,
            "downloadThroughput": self.download_bytes_per_sec,
            "uploadThroughput": self.upload_bytes_per_sec,
        }


@dataclass(frozen=True)
class ExtractionConfig:
    """Fixed capture protocol, built from Settings"""

    viewport: Viewport = field(default_factory=Viewport)
    throttling_enabled: bool = True
    cpu_slowdown_multiplier: float = 4.0
    network: NetworkConditions = field(default_factory=NetworkConditions)
    wait_until: str = "networkidle"
    navigation_timeout_ms: int = 30000
    stabilization_period_ms: int = 3000
    warmup_enabled: bool = True
    warmup_wait_until: str = "domcontentloaded"
    warmup_timeout_ms: int = 10000
    warmup_cooldown_ms: int = 1000
    clear_storage_cache: bool = True
    clear_browser_cookies: bool = True
    html_capture_limit: int = 50000
    text_style_sample_size: int = 20

    @classmethod
    def from_settings(cls, settings) -> "ExtractionConfig":
        return cls(
            viewport=Viewport(
                width=settings.viewport_width,
                height=settings.viewport_height,
                device_scale_factor=settings.device_scale_factor,
            ),
            throttling_enabled=settings.throttling_enabled,
            cpu_slowdown_multiplier=settings.cpu_slowdown_multiplier,
            network=NetworkConditions(
                rtt_ms=settings.network_rtt_ms,
                throughput_kbps=settings.network_throughput_kbps,
                upload_ratio=settings.network_upload_ratio,
            ),
            wait_until=settings.page_wait_until,
            navigation_timeout_ms=settings.page_load_timeout_ms,
            stabilization_period_ms=settings.stabilization_period_ms,
            warmup_enabled=settings.warmup_enabled,
            warmup_wait_until=settings.warmup_wait_until,
            warmup_timeout_ms=settings.warmup_timeout_ms,
            warmup_cooldown_ms=settings.warmup_cooldown_ms,
            clear_storage_cache=settings.clear_storage_cache,
            clear_browser_cookies=settings.clear_browser_cookies,
            html_capture_limit=settings.html_capture_limit,
            text_style_sample_size=settings.text_style_sample_size,
        )


@dataclass
class PageSnapshot:
    """Everything captured from one page load"""

    url: str
    final_url: str
    raw_metrics: RawMetrics
    dom: dict[str, Any] = field(default_factory=dict)
    html: str = ""
    accessibility_tree: dict[str, Any] | None = None
    screenshot_base64: str = ""
    viewport: Viewport = field(default_factory=Viewport)
    browser_version: str = ""
    http_status: int | None = None
    metric_details: dict[str, Any] = field(default_factory=dict)

    @property
    def screenshot_data_uri(self) -> str:
        return f"data:image/png;base64,{self.screenshot_base64}" if self.screenshot_base64 else ""
