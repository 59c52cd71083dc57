"""
Core metrics collection for UXAudit using Prometheus
"""
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, Info, generate_latest

from core.config import settings
from core.logging import get_logger

# Create a global registry for the application
REGISTRY = CollectorRegistry()

app_info = Info("uxaudit_app", "UXAudit application information", registry=REGISTRY)

request_count = Counter(
    "uxaudit_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

request_duration = Histogram(
    "uxaudit_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
    registry=REGISTRY,
)

audits_total = Counter(
    "uxaudit_audits_total",
    "Total audits by terminal status",
    ["status", "error_code"],
    registry=REGISTRY,
)

audit_duration = Histogram(
    "uxaudit_audit_duration_seconds",
    "End-to-end audit duration",
    ["status"],
    buckets=(1.0, 5.0, 10.0, 20.0, 30.0, 45.0, 60.0, 90.0),
    registry=REGISTRY,
)

browser_launches = Counter(
    "uxaudit_browser_launches_total",
    "Browser launches by provisioner and outcome",
    ["provider", "status"],
    registry=REGISTRY,
)

llm_requests = Counter(
    "uxaudit_llm_requests_total",
    "LLM completion requests by model and outcome",
    ["model", "status"],
    registry=REGISTRY,
)

overall_score = Histogram(
    "uxaudit_overall_score",
    "Distribution of composed overall UX scores",
    buckets=(10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
    registry=REGISTRY,
)


class MetricsCollector:
    """Helper class for collecting metrics"""

    def __init__(self):
        self.logger = get_logger("metrics")
        app_info.info({"version": settings.app_version, "environment": settings.environment})

    def track_request(self, method: str, endpoint: str, status: int, duration: float):
        """Track HTTP request metrics"""
        request_count.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def track_audit(self, status: str, duration: float, error_code: str = "", score: float | None = None):
        """Track a finished audit"""
        audits_total.labels(status=status, error_code=error_code).inc()
        audit_duration.labels(status=status).observe(duration)
        if score is not None:
            overall_score.observe(score)

    def track_browser_launch(self, provider: str, status: str = "success"):
        browser_launches.labels(provider=provider, status=status).inc()

    def track_llm_request(self, model: str, status: str = "success"):
        llm_requests.labels(model=model, status=status).inc()


def get_metrics_response() -> tuple[bytes, str]:
    """Render the registry in Prometheus exposition format"""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


metrics = MetricsCollector()
