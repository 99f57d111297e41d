"""
Trend and aggregate analysis over stored scorecards.
"""
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from scorecard_engine.services.scorecard.calculator import round_half_up
from scorecard_engine.services.scorecard.constants import LEGACY_METRIC_FIELDS, RAW_METRIC_FIELDS
from scorecard_engine.services.scorecard.normalizer import percentage_to_metric

SCORE_FIELDS: Tuple[str, ...] = ("total_score", "percentage")
ANALYZED_FIELDS: Tuple[str, ...] = LEGACY_METRIC_FIELDS + RAW_METRIC_FIELDS + SCORE_FIELDS


def previous_period(month: int, year: int) -> Tuple[int, int]:
    """Return the (month, year) immediately before the given period."""
    if month == 1:
        return 12, year - 1
    return month - 1, year


def _value(record: Any, field: str) -> Optional[float]:
    if isinstance(record, dict):
        value = record.get(field)
    else:
        value = getattr(record, field, None)
    return None if value is None else float(value)


def trend(current: Any, previous: Optional[Any]) -> Optional[Dict[str, float]]:
    """
    Signed change from ``previous`` to ``current`` per field.

    Returns None when there is no previous record. Sub-metrics that are not
    populated on both records (for instance when the scheme changed between
    the two months) are left out; total_score and percentage are always
    present.
    """
    if previous is None:
        return None

    deltas: Dict[str, float] = {}
    for field in ANALYZED_FIELDS:
        now = _value(current, field)
        before = _value(previous, field)
        if now is None or before is None:
            if field in SCORE_FIELDS:
                deltas[field] = round_half_up((now or 0.0) - (before or 0.0))
            continue
        deltas[field] = round_half_up(now - before)
    return deltas


def yearly_average(records: Sequence[Any]) -> Dict[str, float]:
    """
    Arithmetic mean per field across one agent's records for a year.

    Each field is averaged over the records that carry it, so legacy and raw
    records in the same year do not dilute each other. Fields no record
    carries are omitted; an empty input yields an empty result.
    """
    averages: Dict[str, float] = {}
    for field in ANALYZED_FIELDS:
        values = [v for v in (_value(record, field) for record in records) if v is not None]
        if values:
            averages[field] = round_half_up(sum(values) / len(values))
    return averages


def performance_window(records: Iterable[Any]) -> Dict[str, Any]:
    """
    Summarize a newest-first window of records.

    ``overall_score`` is the newest percentage and ``improvement`` the change
    from the oldest record in the window to the newest one.
    """
    window = list(records)
    if not window:
        return {
            "overall_score": 0.0,
            "average_score": 0.0,
            "improvement": 0.0,
            "period_count": 0,
            "historical_scores": [],
        }

    scores = [_value(record, "percentage") or 0.0 for record in window]
    return {
        "overall_score": round_half_up(scores[0]),
        "average_score": round_half_up(sum(scores) / len(scores)),
        "improvement": round_half_up(scores[0] - scores[-1]) if len(scores) > 1 else 0.0,
        "period_count": len(window),
        "historical_scores": [
            {
                "year": int(_value(record, "year")),
                "month": int(_value(record, "month")),
                "score": score,
                "rating": round_half_up(percentage_to_metric(score)),
            }
            for record, score in zip(window, scores)
        ],
    }
