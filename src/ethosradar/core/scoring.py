"""Scoring for review-for-review (R4R) detection."""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from .constants import R4RConstants
from .models import RiskLevel, Sentiment

logger = logging.getLogger(__name__)

# --- Scoring policy (overridable from YAML) ---
DEFAULT_WEIGHTS: Dict[str, float] = {
    "reciprocity_weight": R4RConstants.RECIPROCITY_WEIGHT,
    "quick_weight": R4RConstants.QUICK_WEIGHT,
    "critical_threshold": R4RConstants.CRITICAL_THRESHOLD,
    "high_threshold": R4RConstants.HIGH_THRESHOLD,
    "moderate_threshold": R4RConstants.MODERATE_THRESHOLD,
}

_WEIGHTS: Dict[str, float] = dict(DEFAULT_WEIGHTS)


def _validate_weights(raw: Any) -> Dict[str, float]:
    if not isinstance(raw, dict):
        raise ValueError("weights file must contain a mapping")
    weights = dict(DEFAULT_WEIGHTS)
    for key, value in raw.items():
        if key not in DEFAULT_WEIGHTS:
            logger.warning(f"Ignoring unknown scoring weight: {key}")
            continue
        weights[key] = float(value)
    # Negative weights would break monotonicity in reciprocity and timing
    if weights["reciprocity_weight"] < 0 or weights["quick_weight"] < 0:
        raise ValueError("score weights must be non-negative")
    if not (weights["critical_threshold"] >= weights["high_threshold"] >= weights["moderate_threshold"] >= 0):
        raise ValueError("risk thresholds must be ordered critical >= high >= moderate >= 0")
    return weights


def load_weights(path: Optional[str] = None) -> Dict[str, float]:
    """Load scoring weights from YAML, falling back to the defaults."""
    if not path:
        return dict(DEFAULT_WEIGHTS)
    try:
        if not os.path.exists(path):
            logger.warning(f"Scoring weights file {path} not found. Using defaults.")
            return dict(DEFAULT_WEIGHTS)
        with open(path, "r", encoding="utf-8") as f:
            return _validate_weights(yaml.safe_load(f) or {})
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load scoring weights from {path}: {e}. Using defaults.")
        return dict(DEFAULT_WEIGHTS)


def set_weights(weights: Optional[Dict[str, float]]) -> None:
    global _WEIGHTS
    _WEIGHTS = _validate_weights(weights) if weights else dict(DEFAULT_WEIGHTS)


def get_weights() -> Dict[str, float]:
    return dict(_WEIGHTS)


def _clamp(x: float, lo: float = R4RConstants.MIN_SCORE, hi: float = R4RConstants.MAX_SCORE) -> float:
    """Clamp value to range [lo, hi]."""
    return max(lo, min(hi, float(x)))


def map_sentiment(value: Any) -> Sentiment:
    """Map an upstream score or sentiment label to a Sentiment."""
    if isinstance(value, bool):
        return Sentiment.POSITIVE if value else Sentiment.NEGATIVE
    if isinstance(value, (int, float)):
        if value > 0:
            return Sentiment.POSITIVE
        if value < 0:
            return Sentiment.NEGATIVE
        return Sentiment.NEUTRAL

    label = str(value).strip().lower()
    if label in ("positive", "1", "true"):
        return Sentiment.POSITIVE
    if label in ("negative", "-1", "false"):
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def reciprocal_percentage(reciprocal: int, given: int, received: int) -> float:
    """Share of the larger review direction that was reciprocated, in [0, 100]."""
    denominator = max(given, received, 1)
    return round(_clamp(reciprocal / denominator * 100.0), 2)


def compute_r4r_score(reciprocal_pct: float, quick_count: int, reciprocal_count: int,
                      weights: Optional[Dict[str, float]] = None) -> float:
    """Composite R4R score in [0, 100].

    score = reciprocity_weight * reciprocal% + quick_weight * quick%

    where quick% is the share of reciprocal pairs that were returned within
    the quick window. Both weights are non-negative, so the score never
    decreases when either input grows.
    """
    w = weights or _WEIGHTS
    quick_pct = 0.0
    if reciprocal_count > 0:
        quick_pct = _clamp(quick_count / reciprocal_count * 100.0)
    score = (w["reciprocity_weight"] * _clamp(reciprocal_pct)
             + w["quick_weight"] * quick_pct)
    return round(_clamp(score), 2)


def classify_risk(score: float, weights: Optional[Dict[str, float]] = None) -> RiskLevel:
    """Map an R4R score to its risk tier."""
    w = weights or _WEIGHTS
    if score >= w["critical_threshold"]:
        return RiskLevel.CRITICAL
    if score >= w["high_threshold"]:
        return RiskLevel.HIGH
    if score >= w["moderate_threshold"]:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def positive_percentage(sentiments) -> int:
    """Rounded percent of positive sentiments, 0 when empty."""
    sentiments = list(sentiments)
    if not sentiments:
        return 0
    positives = sum(1 for s in sentiments if s is Sentiment.POSITIVE)
    return int(round(positives / len(sentiments) * 100))
