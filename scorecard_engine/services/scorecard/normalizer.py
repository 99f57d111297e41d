"""
Metric normalizer.

Pure functions turning raw operational counters into the eight
percentage-scale sub-metrics, plus the validation applied to legacy
1-5 ratings. Nothing here raises on bad numeric input: a missing or zero
denominator yields 0 and every result is clamped to its scale.
"""
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Mapping, Optional

from scorecard_engine.services.scorecard.constants import (
    LEGACY_MAX_SCORE,
    LEGACY_MIN_SCORE,
    PERCENT_MAX,
    PERCENT_MIN,
    RAW_METRIC_RATIOS,
)

NormalizedMetrics = Dict[str, float]


def _as_number(value: Any) -> Optional[float]:
    """Coerce a counter to a finite float, or None when it is unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def safe_ratio(numerator: Any, denominator: Any) -> float:
    """
    ``numerator / denominator * 100`` clamped to [0, 100].

    A missing, zero or negative denominator yields 0.
    """
    den = _as_number(denominator)
    if den is None or den <= 0:
        return 0.0
    num = _as_number(numerator) or 0.0
    return clamp(num / den * 100, PERCENT_MIN, PERCENT_MAX)


def normalize(raw: Mapping[str, Any]) -> NormalizedMetrics:
    """
    Convert raw counters into the eight percentage sub-metrics.

    Args:
        raw: Mapping of counter name to value; absent counters count as missing

    Returns:
        Dict of sub-metric name to a float in [0, 100]
    """
    return {
        metric: safe_ratio(raw.get(numerator), raw.get(denominator))
        for metric, (numerator, denominator) in RAW_METRIC_RATIOS.items()
    }


def validate_legacy(score: Any) -> int:
    """
    Clamp a legacy rating to the nearest integer in [1, 5].

    Absent, boolean and non-numeric values default to the minimum rating.
    Numeric strings are accepted.
    """
    if score is None or isinstance(score, bool):
        return LEGACY_MIN_SCORE
    try:
        value = Decimal(str(score).strip())
    except (InvalidOperation, ValueError):
        return LEGACY_MIN_SCORE
    if not value.is_finite():
        return LEGACY_MIN_SCORE

    # Clamp before quantize; quantize fails past the context precision
    bounded = min(max(value, Decimal(LEGACY_MIN_SCORE)), Decimal(LEGACY_MAX_SCORE))
    return int(bounded.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def metric_to_percentage(score: float) -> float:
    """Map a 1-5 rating onto the 0-100 scale (1 -> 0, 5 -> 100)."""
    span = LEGACY_MAX_SCORE - LEGACY_MIN_SCORE
    return clamp((score - LEGACY_MIN_SCORE) / span * 100, PERCENT_MIN, PERCENT_MAX)


def percentage_to_metric(percentage: float) -> float:
    """Map a 0-100 value back onto the 1-5 rating scale."""
    span = LEGACY_MAX_SCORE - LEGACY_MIN_SCORE
    value = clamp(percentage, PERCENT_MIN, PERCENT_MAX) / 100 * span + LEGACY_MIN_SCORE
    return clamp(value, LEGACY_MIN_SCORE, LEGACY_MAX_SCORE)
