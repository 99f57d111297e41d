"""
Score calculator.

Applies a weight vector to a set of sub-metrics and produces the persisted
``total_score`` and ``percentage``. Both metric schemes share the same
weighted-sum shape and only differ in the per-metric maximum:

    legacy: total = sum(score_i * w_i), max = 5 * sum(w_i)
    raw:    total = sum(value_i * w_i), max = 100 * sum(w_i)

Inputs reach the calculator as a ``ScoringInput`` (scheme, metrics,
weights) resolved from the request's tagged union by ``resolve_input``,
so nothing downstream branches on where a scorecard came from.
"""
import math
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Mapping, Optional, Union

from scorecard_engine.core.exceptions import ComputationError
from scorecard_engine.models.enums import MetricScheme
from scorecard_engine.schemas.scorecard import LegacyScorecardInput, RawScorecardInput
from scorecard_engine.services.scorecard.constants import (
    LEGACY_DEFAULT_WEIGHTS,
    LEGACY_MAX_SCORE,
    LEGACY_METRIC_FIELDS,
    PERCENT_MAX,
    PERCENT_MIN,
    RAW_DEFAULT_WEIGHTS,
    RAW_METRIC_FIELDS,
    WEIGHT_SUFFIX,
)
from scorecard_engine.services.scorecard.normalizer import clamp, normalize, validate_legacy

_TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class ScoreResult:
    total_score: float
    percentage: float


@dataclass(frozen=True)
class ScoringInput:
    """Scheme-independent shape every scorecard write is reduced to."""
    scheme: MetricScheme
    metrics: Dict[str, float]
    weights: Dict[str, float]
    raw_counters: Dict[str, Any] = field(default_factory=dict)


def round_half_up(value: float, places: Decimal = _TWO_PLACES) -> float:
    """Round to two decimals, halves away from zero (2.345 -> 2.35)."""
    number = Decimal(str(value))
    with localcontext() as ctx:
        # Room for every integer digit plus the requested decimals
        ctx.prec = max(ctx.prec, number.adjusted() - places.as_tuple().exponent + 2)
        return float(number.quantize(places, rounding=ROUND_HALF_UP))


def metric_fields(scheme: MetricScheme):
    return LEGACY_METRIC_FIELDS if scheme == MetricScheme.LEGACY else RAW_METRIC_FIELDS


def default_weights(scheme: MetricScheme) -> Mapping[str, float]:
    return LEGACY_DEFAULT_WEIGHTS if scheme == MetricScheme.LEGACY else RAW_DEFAULT_WEIGHTS


def _coerce_weight(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(weight):
        return None
    return max(weight, 0.0)


def resolve_weights(
    weights: Optional[Mapping[str, Any]],
    scheme: MetricScheme,
) -> Dict[str, float]:
    """
    Overlay caller weights on the scheme's default table.

    Keys may be given either as the metric name (``quality_score``) or with
    the column suffix (``quality_score_weight``); the suffixed form wins when
    both are present. Unknown keys are ignored, unusable values fall back to
    the default, and negative weights count as zero.
    """
    resolved = dict(default_weights(scheme))
    if not weights:
        return resolved

    for metric in resolved:
        for key in (metric, f"{metric}{WEIGHT_SUFFIX}"):
            if key in weights:
                weight = _coerce_weight(weights[key])
                if weight is not None:
                    resolved[metric] = weight
    return resolved


def _metric_value(scheme: MetricScheme, value: Any) -> float:
    if scheme == MetricScheme.LEGACY:
        return float(validate_legacy(value))
    if value is None or isinstance(value, bool):
        return PERCENT_MIN
    number = float(value)
    return clamp(number, PERCENT_MIN, PERCENT_MAX) if math.isfinite(number) else PERCENT_MIN


def score(
    metrics: Mapping[str, Any],
    weights: Optional[Mapping[str, Any]],
    scheme: MetricScheme,
) -> ScoreResult:
    """
    Compute the weighted total and the percentage of the maximum.

    Args:
        metrics: Sub-metric values for the scheme (missing ones count as the scale minimum)
        weights: Optional caller weights, merged over the defaults per field
        scheme: Metric scheme the values belong to

    Returns:
        ScoreResult rounded to two decimals

    Raises:
        ComputationError: If the arithmetic overflows to a non-finite value
    """
    resolved = resolve_weights(weights, scheme)
    scale_max = LEGACY_MAX_SCORE if scheme == MetricScheme.LEGACY else PERCENT_MAX

    # Fixed iteration order keeps the float sum independent of input ordering
    total = 0.0
    weight_sum = 0.0
    for metric in metric_fields(scheme):
        weight = resolved[metric]
        total += _metric_value(scheme, metrics.get(metric)) * weight
        weight_sum += weight

    max_possible = scale_max * weight_sum
    if not (math.isfinite(total) and math.isfinite(max_possible)):
        raise ComputationError(
            "Score is not a finite number",
            details={"scheme": scheme.value},
        )

    percentage = 0.0 if max_possible == 0 else total / max_possible * 100
    return ScoreResult(
        total_score=round_half_up(total),
        percentage=round_half_up(clamp(percentage, PERCENT_MIN, PERCENT_MAX)),
    )


def resolve_input(
    payload: Union[RawScorecardInput, LegacyScorecardInput],
    weights: Optional[Mapping[str, Any]] = None,
) -> ScoringInput:
    """Reduce either input variant to metrics + weights for its scheme."""
    if isinstance(payload, LegacyScorecardInput):
        scheme = MetricScheme.LEGACY
        metrics = {
            metric: float(validate_legacy(getattr(payload, metric)))
            for metric in LEGACY_METRIC_FIELDS
        }
        counters: Dict[str, Any] = {}
    else:
        scheme = MetricScheme.RAW
        counters = payload.model_dump(exclude={"kind"})
        metrics = normalize(counters)

    return ScoringInput(
        scheme=scheme,
        metrics=metrics,
        weights=resolve_weights(weights, scheme),
        raw_counters=counters,
    )
