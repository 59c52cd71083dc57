"""
Unit tests for the audit coordinator state machine
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr

from core.exceptions import (
    AssessmentError,
    LLMAuthenticationError,
    LLMConfigurationError,
    PageUnreachableError,
    ValidationError,
)
from d2_analysis.types import RawMetrics
from d3_scoring.composer import compose
from d4_synthesis.types import Finding, ResponseFormat, SynthesisResult
from d5_audit.coordinator import AuditCoordinator, AuditRun, check_llm_credentials, normalize_url, summarize
from d5_audit.types import AuditState


class FakeExtractor:
    """Stands in for PageExtractor; counts browser closes"""

    def __init__(self, snapshot=None, error=None):
        self.snapshot = snapshot
        self.error = error
        self.browser = MagicMock(name="browser")
        self.opened = 0
        self.closed = 0
        self.urls = []

    @asynccontextmanager
    async def open_browser(self):
        self.opened += 1
        try:
            yield self.browser
        finally:
            self.closed += 1

    async def extract_page(self, browser, url):
        assert browser is self.browser
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.snapshot


@pytest.fixture
def seo_zero_snapshot(sample_snapshot):
    """Three images without alt, no meta description, canonical or structured data"""
    dom = {
        "title": "Home",
        "metaDescription": "",
        "images": [{"src": f"/img{i}.png", "alt": "", "hasAlt": False} for i in range(3)],
        "links": [],
        "headings": [],
        "buttons": [],
        "forms": [],
        "textStyles": [],
        "hasCanonical": False,
        "hasOpenGraph": False,
        "hasStructuredData": False,
        "hasSemanticHTML": False,
    }
    tree = {
        "role": "WebArea",
        "name": "Home",
        "children": [{"role": "img", "name": ""} for _ in range(3)],
    }
    html = "<html><head><title>Home</title></head><body>" + '<img src="/x.png">' * 3 + "</body></html>"
    return replace(sample_snapshot, dom=dom, accessibility_tree=tree, html=html)


class TestNormalizeUrl:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("example.com", "https://example.com"),
            ("  example.com/path?q=1 ", "https://example.com/path?q=1"),
            ("http://example.com", "http://example.com"),
            ("https://example.com:8443/", "https://example.com:8443/"),
            ("httpbin.org", "https://httpbin.org"),
            ("httpstatuses.com/200", "https://httpstatuses.com/200"),
            ("HTTP://Example.com", "HTTP://Example.com"),
            ("example.com/redirect?to=https://other.test", "https://example.com/redirect?to=https://other.test"),
        ],
    )
    def test_valid(self, raw, expected):
        assert normalize_url(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            normalize_url(raw)

        assert exc_info.value.message == "URL is required"
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize(
        "raw", ["not a url", "https://", "http://exa mple.com", "https://example.com:99999", "ftp://example.com"]
    )
    def test_invalid(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            normalize_url(raw)

        assert exc_info.value.message == "Invalid URL"


class TestCheckLlmCredentials:
    def test_stub_mode_needs_no_key(self):
        check_llm_credentials(MagicMock(use_stubs=True, anthropic_api_key=None))

    def test_missing_key(self):
        with pytest.raises(LLMConfigurationError) as exc_info:
            check_llm_credentials(MagicMock(use_stubs=False, anthropic_api_key=None))

        assert exc_info.value.details == "API key is missing"
        assert exc_info.value.status_code == 500

    def test_malformed_key(self):
        with pytest.raises(LLMConfigurationError) as exc_info:
            check_llm_credentials(MagicMock(use_stubs=False, anthropic_api_key=SecretStr("sk-proj-123")))

        assert exc_info.value.details == "API key format appears invalid"
        assert exc_info.value.troubleshooting

    def test_valid_key(self):
        check_llm_credentials(MagicMock(use_stubs=False, anthropic_api_key=SecretStr("sk-ant-api03-abc")))


class TestSummarize:
    def test_counts(self):
        findings = [
            Finding(category="accessibility", severity="high", issue="a", description="a"),
            Finding(category="accessibility", severity="low", issue="b", description="b"),
            Finding(category="seo", severity="high", issue="c", description="c"),
        ]

        summary = summarize(findings, 81.5)

        assert summary.model_dump(by_alias=True) == {
            "totalIssues": 3,
            "critical": 0,
            "high": 2,
            "medium": 0,
            "low": 1,
            "accessibility": 2,
            "usability": 0,
            "design": 0,
            "performance": 0,
            "seo": 1,
            "overallScore": 81.5,
        }


class TestAuditCoordinator:
    @pytest.mark.asyncio
    async def test_successful_audit(self, fresh_settings, sample_snapshot):
        extractor = FakeExtractor(sample_snapshot)
        coordinator = AuditCoordinator(fresh_settings, extractor=extractor)
        run = AuditRun(url="acme.test")

        result = await coordinator.run_audit("acme.test", run=run)

        assert result.url == "https://acme.test"
        assert extractor.urls == ["https://acme.test"]
        assert run.history == [
            AuditState.IDLE,
            AuditState.VALIDATING_URL,
            AuditState.LAUNCHING_BROWSER,
            AuditState.EXTRACTING_PAGE,
            AuditState.SCORING_SIGNALS,
            AuditState.INVOKING_LLM,
            AuditState.COMPOSING_RESULT,
            AuditState.DONE,
        ]
        assert (extractor.opened, extractor.closed) == (1, 1)

        # Stub model answers in the scores shape with design 72
        assert result.scores.design == 72.0
        assert result.scores.accessibility == 100 - 5 - 2 - 5
        assert result.summary.overall_score == compose(
            result.scores.performance, result.scores.accessibility, 72, result.scores.seo
        )
        assert result.summary.total_issues == len(result.findings) == 3
        assert result.screenshot == "data:image/png;base64,iVBORw0KGgo="
        assert result.real_metrics.fcp == 1200.0
        assert result.real_metrics.cls == 0.052
        assert result.system_fingerprint.viewport == "1280x800"
        assert result.system_fingerprint.temperature == 0.0
        assert result.system_fingerprint.model == fresh_settings.model_candidates[0]
        assert result.system_fingerprint.environment == "test"

    @pytest.mark.asyncio
    async def test_seo_zero_page(self, fresh_settings, seo_zero_snapshot):
        coordinator = AuditCoordinator(fresh_settings, extractor=FakeExtractor(seo_zero_snapshot))

        result = await coordinator.run_audit("https://home.test")

        assert result.scores.seo == 0
        # img nodes are not covered by the tree rules, so nothing is deducted
        assert result.scores.accessibility == 100
        assert result.summary.overall_score == compose(result.scores.performance, 100, 72, 0)

    @pytest.mark.asyncio
    async def test_model_scores_never_override_server_scores(self, fresh_settings, sample_snapshot):
        synthesizer = MagicMock()
        synthesizer.synthesize = AsyncMock(
            return_value=SynthesisResult(
                findings=[],
                design_score=64.0,
                model="model-a",
                response_format=ResponseFormat.SCORES,
            )
        )
        coordinator = AuditCoordinator(fresh_settings, extractor=FakeExtractor(sample_snapshot), synthesizer=synthesizer)

        result = await coordinator.run_audit("https://acme.test")

        context = synthesizer.synthesize.await_args.args[0]
        assert context.scores == {
            "performance": result.scores.performance,
            "accessibility": result.scores.accessibility,
            "seo": result.scores.seo,
        }
        assert result.scores.design == 64.0
        assert result.summary.total_issues == 0
        assert result.system_fingerprint.model_version == "model-a"

    @pytest.mark.asyncio
    async def test_invalid_url_never_launches_browser(self, fresh_settings):
        extractor = FakeExtractor()
        coordinator = AuditCoordinator(fresh_settings, extractor=extractor)
        run = AuditRun(url="")

        with pytest.raises(ValidationError):
            await coordinator.run_audit(None, run=run)

        assert run.state == AuditState.ERROR
        assert run.history == [AuditState.IDLE, AuditState.VALIDATING_URL, AuditState.ERROR]
        assert extractor.opened == 0

    @pytest.mark.asyncio
    async def test_unreachable_page_closes_browser(self, fresh_settings):
        extractor = FakeExtractor(error=PageUnreachableError("https://down.test", reason="net::ERR_NAME_NOT_RESOLVED"))
        coordinator = AuditCoordinator(fresh_settings, extractor=extractor)
        run = AuditRun(url="down.test")

        with pytest.raises(PageUnreachableError):
            await coordinator.run_audit("down.test", run=run)

        assert (extractor.opened, extractor.closed) == (1, 1)
        assert run.history[-2:] == [AuditState.EXTRACTING_PAGE, AuditState.ERROR]
        assert isinstance(run.error, PageUnreachableError)

    @pytest.mark.asyncio
    async def test_browser_released_before_llm(self, fresh_settings, sample_snapshot):
        extractor = FakeExtractor(sample_snapshot)
        synthesizer = MagicMock()

        async def synthesize(context):
            assert extractor.closed == 1
            raise LLMAuthenticationError("anthropic")

        synthesizer.synthesize = synthesize
        coordinator = AuditCoordinator(fresh_settings, extractor=extractor, synthesizer=synthesizer)
        run = AuditRun(url="acme.test")

        with pytest.raises(LLMAuthenticationError):
            await coordinator.run_audit("acme.test", run=run)

        assert extractor.closed == 1
        assert run.history[-2:] == [AuditState.INVOKING_LLM, AuditState.ERROR]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self, fresh_settings):
        extractor = FakeExtractor(error=RuntimeError("renderer crashed"))
        coordinator = AuditCoordinator(fresh_settings, extractor=extractor)

        with pytest.raises(AssessmentError) as exc_info:
            await coordinator.run_audit("acme.test")

        assert exc_info.value.message == "renderer crashed"
        assert exc_info.value.step == AuditState.EXTRACTING_PAGE.value
        assert exc_info.value.status_code == 500
        assert extractor.closed == 1

    @pytest.mark.asyncio
    async def test_zero_metrics_score_fifty(self, fresh_settings, sample_snapshot):
        snapshot = replace(sample_snapshot, raw_metrics=RawMetrics())
        coordinator = AuditCoordinator(fresh_settings, extractor=FakeExtractor(snapshot))

        result = await coordinator.run_audit("acme.test")

        assert result.scores.performance == 50

    @pytest.mark.asyncio
    async def test_logs_carry_url_and_state(self, fresh_settings, caplog):
        extractor = FakeExtractor(error=PageUnreachableError("https://down.test", reason="net::ERR_NAME_NOT_RESOLVED"))
        coordinator = AuditCoordinator(fresh_settings, extractor=extractor)

        with caplog.at_level(logging.INFO, logger="d5_audit.coordinator"):
            with pytest.raises(PageUnreachableError):
                await coordinator.run_audit("down.test")

        records = [r for r in caplog.records if r.name == "d5_audit.coordinator"]
        assert records
        assert all(r.url == "https://down.test" for r in records[1:])
        assert [r.state for r in records if r.levelno == logging.INFO][-1] == "error"
        failure = records[-1]
        assert failure.levelno == logging.ERROR
        assert failure.state == "extracting_page"
        assert failure.error_code == "PAGE_UNREACHABLE"

    def test_finished_run_rejects_transitions(self, fresh_settings):
        coordinator = AuditCoordinator(fresh_settings, extractor=FakeExtractor())
        run = AuditRun(url="x", state=AuditState.DONE)

        with pytest.raises(AssessmentError):
            coordinator._transition(run, AuditState.SCORING_SIGNALS)
