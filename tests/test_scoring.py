"""Tests for scoring module."""

import pytest

from ethosradar.core.models import RiskLevel, Sentiment
from ethosradar.core.scoring import (
    DEFAULT_WEIGHTS,
    classify_risk,
    compute_r4r_score,
    get_weights,
    load_weights,
    map_sentiment,
    positive_percentage,
    reciprocal_percentage,
    set_weights,
)


class TestSentimentMapping:
    """Upstream score/sentiment values map onto Sentiment."""

    def test_numeric_scores(self):
        assert map_sentiment(1) is Sentiment.POSITIVE
        assert map_sentiment(0.5) is Sentiment.POSITIVE
        assert map_sentiment(-1) is Sentiment.NEGATIVE
        assert map_sentiment(0) is Sentiment.NEUTRAL

    def test_string_labels(self):
        assert map_sentiment("positive") is Sentiment.POSITIVE
        assert map_sentiment("POSITIVE") is Sentiment.POSITIVE
        assert map_sentiment("1") is Sentiment.POSITIVE
        assert map_sentiment("true") is Sentiment.POSITIVE
        assert map_sentiment("negative") is Sentiment.NEGATIVE
        assert map_sentiment("-1") is Sentiment.NEGATIVE
        assert map_sentiment("false") is Sentiment.NEGATIVE

    def test_unknown_is_neutral(self):
        assert map_sentiment("neutral") is Sentiment.NEUTRAL
        assert map_sentiment(None) is Sentiment.NEUTRAL
        assert map_sentiment("meh") is Sentiment.NEUTRAL


class TestReciprocalPercentage:

    def test_uses_larger_direction(self):
        assert reciprocal_percentage(8, 10, 10) == 80.0
        assert reciprocal_percentage(2, 4, 8) == 25.0

    def test_no_reviews(self):
        assert reciprocal_percentage(0, 0, 0) == 0.0

    def test_capped_at_100(self):
        assert reciprocal_percentage(5, 2, 2) == 100.0


class TestR4RScore:

    def test_bounds(self):
        for pct in (0, 10, 50, 99.9, 100, 150):
            for reciprocal in (0, 1, 5):
                for quick in range(reciprocal + 1):
                    score = compute_r4r_score(pct, quick, reciprocal)
                    assert 0.0 <= score <= 100.0

    def test_no_reciprocity_scores_zero(self):
        assert compute_r4r_score(0.0, 0, 0) == 0.0

    def test_monotonic_in_quick_count(self):
        scores = [compute_r4r_score(80.0, quick, 8) for quick in range(9)]
        assert scores == sorted(scores)
        assert scores[-1] > scores[0]

    def test_monotonic_in_reciprocal_percentage(self):
        scores = [compute_r4r_score(pct, 2, 4) for pct in range(0, 101, 10)]
        assert scores == sorted(scores)

    def test_default_weighting(self):
        # 0.7 * 80 + 0.3 * (5/8 * 100)
        assert compute_r4r_score(80.0, 5, 8) == pytest.approx(74.75)
        assert compute_r4r_score(100.0, 4, 4) == 100.0


class TestRiskLevels:

    def test_thresholds(self):
        assert classify_risk(0) is RiskLevel.LOW
        assert classify_risk(24.99) is RiskLevel.LOW
        assert classify_risk(25) is RiskLevel.MODERATE
        assert classify_risk(50) is RiskLevel.HIGH
        assert classify_risk(74.99) is RiskLevel.HIGH
        assert classify_risk(75) is RiskLevel.CRITICAL
        assert classify_risk(100) is RiskLevel.CRITICAL


class TestWeights:

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_weights(str(tmp_path / "missing.yaml")) == DEFAULT_WEIGHTS

    def test_load_overrides(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("reciprocity_weight: 0.5\nquick_weight: 0.5\n", encoding="utf-8")
        weights = load_weights(str(path))
        assert weights["reciprocity_weight"] == 0.5
        assert weights["quick_weight"] == 0.5
        assert weights["critical_threshold"] == DEFAULT_WEIGHTS["critical_threshold"]

    def test_negative_weights_rejected(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("quick_weight: -1\n", encoding="utf-8")
        assert load_weights(str(path)) == DEFAULT_WEIGHTS

    def test_unordered_thresholds_rejected(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("high_threshold: 90\n", encoding="utf-8")
        assert load_weights(str(path)) == DEFAULT_WEIGHTS

    def test_set_weights_changes_scoring(self):
        set_weights({"reciprocity_weight": 1.0, "quick_weight": 0.0})
        assert get_weights()["reciprocity_weight"] == 1.0
        assert compute_r4r_score(60.0, 3, 3) == 60.0
        set_weights(None)
        assert get_weights() == DEFAULT_WEIGHTS


def test_positive_percentage():
    assert positive_percentage([]) == 0
    assert positive_percentage([Sentiment.POSITIVE, Sentiment.NEGATIVE, Sentiment.POSITIVE]) == 67
