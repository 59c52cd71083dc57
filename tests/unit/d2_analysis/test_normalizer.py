"""
Unit tests for the metric normalizer
"""
import math

import pytest

from d2_analysis.normalizer import normalize_metrics, raw_metrics_from_mapping, round_cls, round_time
from d2_analysis.types import RawMetrics, ValidatedMetrics


class TestRounding:
    def test_round_time_to_granularity(self):
        assert round_time(1234.4) == 1230.0
        assert round_time(1235.0) == 1240.0
        assert round_time(1239.9) == 1240.0

    def test_round_time_custom_granularity(self):
        assert round_time(1234, granularity=100) == 1200.0
        assert round_time(1250, granularity=100) == 1300.0

    def test_round_cls_precision(self):
        assert round_cls(0.12345) == 0.123
        assert round_cls(0.1236) == 0.124
        assert round_cls(0.12345, precision=2) == 0.12

    @pytest.mark.parametrize("value", [None, -5, float("nan"), float("inf"), "fast", {}])
    def test_invalid_values_become_zero(self, value):
        assert round_time(value) == 0.0
        assert round_cls(value) == 0.0


class TestNormalizeMetrics:
    def test_normalizes_every_field(self):
        raw = RawMetrics(fcp=1203.4, lcp=2004.9, tti=3100.2, tbt=126.0, cls=0.05234, speed_index=1604.1)

        result = normalize_metrics(raw)

        assert result == ValidatedMetrics(fcp=1200.0, lcp=2000.0, tti=3100.0, tbt=130.0, cls=0.052, speed_index=1600.0)

    def test_accepts_browser_payload(self):
        result = normalize_metrics({"fcp": 812, "lcp": 1499, "cls": 0.1, "speedIndex": 1155})

        assert result.fcp == 810.0
        assert result.lcp == 1500.0
        assert result.speed_index == 1160.0
        assert result.tti == 0.0
        assert result.tbt == 0.0

    def test_none_gives_all_zero(self):
        assert normalize_metrics(None) == ValidatedMetrics()

    def test_negative_and_absent_treated_as_zero(self):
        result = normalize_metrics({"fcp": -100, "lcp": None, "tbt": float("nan")})

        assert result == ValidatedMetrics()

    @pytest.mark.parametrize(
        "payload",
        [
            {"fcp": 1203.4, "lcp": 2004.9, "tti": 3100.2, "tbt": 126.0, "cls": 0.05234, "speedIndex": 1604.1},
            {"fcp": -1, "lcp": 5, "cls": -0.2},
            {},
            {"fcp": 4.999, "lcp": 5.0, "tti": 15.0, "tbt": 25.0, "cls": 0.0005, "speedIndex": 99999.5},
        ],
    )
    def test_idempotent(self, payload):
        once = normalize_metrics(payload)
        twice = normalize_metrics(once)

        assert twice == once

    def test_idempotent_with_custom_granularity(self):
        once = normalize_metrics({"fcp": 1234.5, "cls": 0.12345}, granularity=50, cls_precision=2)

        assert normalize_metrics(once, granularity=50, cls_precision=2) == once

    def test_rejects_non_positive_granularity(self):
        with pytest.raises(ValueError):
            normalize_metrics({}, granularity=0)

    def test_results_are_finite(self):
        result = normalize_metrics({"fcp": float("inf"), "cls": float("-inf")})

        assert all(math.isfinite(v) for v in result.to_dict().values())


class TestRawMetricsFromMapping:
    def test_aliases(self):
        raw = raw_metrics_from_mapping({"firstContentfulPaint": 900, "si": 1200, "totalBlockingTime": 40})

        assert raw.fcp == 900.0
        assert raw.speed_index == 1200.0
        assert raw.tbt == 40.0

    def test_to_dict_uses_camel_case_speed_index(self):
        assert "speedIndex" in ValidatedMetrics().to_dict()
