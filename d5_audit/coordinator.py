"""
Audit Coordinator

Runs one audit as a linear state machine:

    IDLE -> VALIDATING_URL -> LAUNCHING_BROWSER -> EXTRACTING_PAGE
         -> SCORING_SIGNALS -> INVOKING_LLM -> COMPOSING_RESULT -> DONE

Any step may fail into ERROR with a typed UXAuditError. The browser is
closed when extraction ends, before the LLM is called, and on every error
path.
"""

import platform
import re
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import urlparse

from core.config import Settings, get_settings
from core.exceptions import AssessmentError, LLMConfigurationError, UXAuditError, ValidationError
from core.logging import get_logger
from core.metrics import metrics
from d1_capture.extractor import PageExtractor
from d1_capture.provisioner import get_provisioner
from d1_capture.types import ExtractionConfig, PageSnapshot
from d2_analysis.accessibility import analyze_accessibility_tree
from d2_analysis.normalizer import normalize_metrics
from d2_analysis.seo import validate_seo
from d3_scoring.composer import CategoryScores, compose_scores
from d3_scoring.config import ScoringConfig
from d3_scoring.scorers import AccessibilityScorer, PerformanceScorer, SEOScorer
from d4_synthesis.config import SynthesisConfig
from d4_synthesis.prompts import PromptContext
from d4_synthesis.synthesizer import FindingSynthesizer
from d4_synthesis.types import Finding, SynthesisResult

from .schemas import AuditFinding, AuditResult, AuditSummary, CategoryScoresResponse, RealMetrics, SystemFingerprint
from .types import TERMINAL_STATES, AuditState

logger = get_logger(__name__, domain="d5")

API_KEY_PREFIX = "sk-ant-"
SCHEME_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*)://")
SEVERITY_KEYS = ("critical", "high", "medium", "low")
CATEGORY_KEYS = ("accessibility", "usability", "design", "performance", "seo")


def normalize_url(raw: Optional[str]) -> str:
    """
    Validate a user-supplied URL, assuming https:// when no scheme is given

    Raises:
        ValidationError: URL missing or not an absolute http(s) URL
    """
    if raw is None or not str(raw).strip():
        raise ValidationError("URL is required", field="url")

    candidate = str(raw).strip()
    explicit = SCHEME_PATTERN.match(candidate)
    if explicit is None:
        candidate = f"https://{candidate}"
    elif explicit.group(1).lower() not in ("http", "https"):
        raise ValidationError("Invalid URL", field="url")

    try:
        parsed = urlparse(candidate)
        port = parsed.port
    except ValueError:
        raise ValidationError("Invalid URL", field="url") from None

    if parsed.scheme not in ("http", "https") or not parsed.hostname or port == 0:
        raise ValidationError("Invalid URL", field="url")
    if any(ch.isspace() for ch in parsed.netloc):
        raise ValidationError("Invalid URL", field="url")
    return candidate


def check_llm_credentials(settings: Settings) -> None:
    """Fail fast on a missing or malformed provider key; stub mode needs none"""
    if settings.use_stubs:
        return
    key = settings.anthropic_api_key.get_secret_value() if settings.anthropic_api_key else ""
    if not key:
        raise LLMConfigurationError("API key is missing")
    if not key.startswith(API_KEY_PREFIX):
        raise LLMConfigurationError("API key format appears invalid")


def summarize(findings: List[Finding], overall_score: float) -> AuditSummary:
    severities = Counter(f.severity for f in findings)
    categories = Counter(f.category for f in findings)
    return AuditSummary(
        totalIssues=len(findings),
        overallScore=overall_score,
        **{key: severities.get(key, 0) for key in SEVERITY_KEYS},
        **{key: categories.get(key, 0) for key in CATEGORY_KEYS},
    )


@dataclass
class AuditRun:
    """State of a single audit; one per request, never shared"""

    url: str
    state: AuditState = AuditState.IDLE
    history: List[AuditState] = field(default_factory=lambda: [AuditState.IDLE])
    error: Optional[UXAuditError] = None
    started_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


class AuditCoordinator:
    """Wires capture, analysis, scoring and synthesis into one audit"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        extractor: Optional[PageExtractor] = None,
        synthesizer: Optional[FindingSynthesizer] = None,
        scoring_config: Optional[ScoringConfig] = None,
    ):
        self.settings = settings or get_settings()
        self.extraction_config = ExtractionConfig.from_settings(self.settings)
        self.extractor = extractor or PageExtractor(self.extraction_config, get_provisioner(self.settings))
        self.synthesis_config = SynthesisConfig.from_settings(self.settings)
        self._synthesizer = synthesizer
        self.scoring_config = scoring_config or ScoringConfig.from_settings(self.settings)

    @property
    def synthesizer(self) -> FindingSynthesizer:
        # Created lazily, after the credential check has run
        if self._synthesizer is None:
            self._synthesizer = FindingSynthesizer(self.synthesis_config)
        return self._synthesizer

    def _transition(self, run: AuditRun, state: AuditState) -> None:
        if run.state in TERMINAL_STATES:
            raise AssessmentError(f"Audit already finished in state {run.state.value}", url=run.url)
        logger.with_context(url=run.url, state=state).info(f"Audit state {run.state.value} -> {state.value}")
        run.state = state
        run.history.append(state)

    async def run_audit(self, raw_url: Optional[str], run: Optional[AuditRun] = None) -> AuditResult:
        """
        Audit one page end to end

        Args:
            raw_url: URL as supplied by the caller
            run: Optional run object to observe state transitions

        Returns:
            AuditResult ready to serialize

        Raises:
            UXAuditError: typed failure of whichever step broke
        """
        run = run or AuditRun(url=str(raw_url or ""))
        try:
            result = await self._execute(run, raw_url)
        except UXAuditError as e:
            self._fail(run, e)
            raise
        except Exception as e:
            error = AssessmentError(str(e), step=run.state.value, url=run.url)
            self._fail(run, error)
            raise error from e

        metrics.track_audit("success", run.elapsed, score=result.summary.overall_score)
        logger.with_context(url=run.url, state=run.state).info(
            f"Audit completed in {run.elapsed:.2f}s, overall score {result.summary.overall_score}"
        )
        return result

    def _fail(self, run: AuditRun, error: UXAuditError) -> None:
        failed_in = run.state
        run.error = error
        if run.state not in TERMINAL_STATES:
            self._transition(run, AuditState.ERROR)
        metrics.track_audit("error", run.elapsed, error_code=error.error_code)
        logger.with_context(url=run.url, state=failed_in, error_code=error.error_code).error(
            f"Audit failed during {failed_in.value}: {error.message}"
        )

    async def _execute(self, run: AuditRun, raw_url: Optional[str]) -> AuditResult:
        self._transition(run, AuditState.VALIDATING_URL)
        check_llm_credentials(self.settings)
        url = normalize_url(raw_url)
        run.url = url

        self._transition(run, AuditState.LAUNCHING_BROWSER)
        async with self.extractor.open_browser() as browser:
            self._transition(run, AuditState.EXTRACTING_PAGE)
            snapshot = await self.extractor.extract_page(browser, url)

        self._transition(run, AuditState.SCORING_SIGNALS)
        context, scores = self._score_signals(url, snapshot)

        self._transition(run, AuditState.INVOKING_LLM)
        synthesis = await self.synthesizer.synthesize(context)

        self._transition(run, AuditState.COMPOSING_RESULT)
        result = self._compose_result(url, snapshot, context, scores, synthesis)

        self._transition(run, AuditState.DONE)
        return result

    def _score_signals(self, url: str, snapshot: PageSnapshot) -> tuple[PromptContext, dict]:
        validated = normalize_metrics(
            snapshot.raw_metrics,
            granularity=self.settings.time_rounding_ms,
            cls_precision=self.settings.cls_precision,
        )
        issues = analyze_accessibility_tree(snapshot.accessibility_tree)
        seo = validate_seo(snapshot.html, snapshot.dom)

        scores = {
            "performance": PerformanceScorer(self.scoring_config).score(validated),
            "accessibility": AccessibilityScorer(self.scoring_config).score(issues),
            "seo": SEOScorer(self.scoring_config).score(seo),
        }

        if self.settings.enable_metric_logging and self.settings.log_raw_metrics:
            logger.with_context(url=url, state=AuditState.SCORING_SIGNALS).info(
                "Measured metrics",
                extra={
                    "raw_metrics": asdict(snapshot.raw_metrics),
                    "validated_metrics": validated.to_dict(),
                    "accessibility_issues": issues.to_dict(),
                    "seo": seo.to_dict(),
                    "scores": scores,
                },
            )

        context = PromptContext(
            url=url,
            metrics=validated,
            seo=seo,
            scores=scores,
            thresholds=self.scoring_config.thresholds,
            dom=snapshot.dom,
            html=snapshot.html,
        )
        return context, scores

    def _compose_result(
        self,
        url: str,
        snapshot: PageSnapshot,
        context: PromptContext,
        scores: dict,
        synthesis: SynthesisResult,
    ) -> AuditResult:
        category_scores = CategoryScores(
            performance=scores["performance"],
            accessibility=scores["accessibility"],
            design=synthesis.design_score,
            seo=scores["seo"],
        )
        overall = compose_scores(category_scores, self.scoring_config.composition_weights)
        timestamp = datetime.now(timezone.utc).isoformat()

        fingerprint = SystemFingerprint(
            environment=self.settings.environment,
            model=synthesis.model,
            modelVersion=synthesis.model_version or synthesis.model,
            runtime=f"{platform.python_implementation()} {platform.system().lower()}",
            pythonVersion=platform.python_version(),
            viewport=str(snapshot.viewport),
            temperature=self.synthesis_config.temperature,
            timestamp=timestamp,
        )
        if self.settings.enable_metric_logging and self.settings.log_system_fingerprint:
            logger.with_context(url=url, state=AuditState.COMPOSING_RESULT).info(
                "System fingerprint", extra={"fingerprint": fingerprint.model_dump()}
            )

        return AuditResult(
            url=url,
            timestamp=timestamp,
            findings=[AuditFinding.model_validate(f.to_dict()) for f in synthesis.findings],
            summary=summarize(synthesis.findings, overall),
            screenshot=snapshot.screenshot_data_uri or None,
            realMetrics=RealMetrics.model_validate(context.metrics.to_dict()),
            systemFingerprint=fingerprint,
            scores=CategoryScoresResponse(**category_scores.to_dict()),
        )
