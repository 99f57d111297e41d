"""
Scorecard field tables, default weights and the metric catalogue.
"""
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

LEGACY_METRIC_FIELDS: Tuple[str, ...] = (
    "service",
    "productivity",
    "quality",
    "assiduity",
    "performance",
    "adherence",
    "lateness",
    "break_exceeds",
)

RAW_METRIC_FIELDS: Tuple[str, ...] = (
    "schedule_adherence",
    "attendance_rate",
    "punctuality_score",
    "break_compliance",
    "task_completion_rate",
    "productivity_index",
    "quality_score",
    "efficiency_rate",
)

RAW_COUNTER_FIELDS: Tuple[str, ...] = (
    "scheduled_hours",
    "actual_hours",
    "scheduled_days",
    "days_present",
    "total_shifts",
    "on_time_arrivals",
    "total_breaks",
    "breaks_within_limit",
    "tasks_assigned",
    "tasks_completed",
    "expected_output",
    "actual_output",
    "total_tasks",
    "error_free_tasks",
    "standard_time",
    "actual_time_spent",
)

# sub-metric -> (numerator counter, denominator counter)
RAW_METRIC_RATIOS: Mapping[str, Tuple[str, str]] = MappingProxyType({
    "schedule_adherence": ("actual_hours", "scheduled_hours"),
    "attendance_rate": ("days_present", "scheduled_days"),
    "punctuality_score": ("on_time_arrivals", "total_shifts"),
    "break_compliance": ("breaks_within_limit", "total_breaks"),
    "task_completion_rate": ("tasks_completed", "tasks_assigned"),
    "productivity_index": ("actual_output", "expected_output"),
    "quality_score": ("error_free_tasks", "total_tasks"),
    "efficiency_rate": ("standard_time", "actual_time_spent"),
})

# Read-only so that a caller override can never leak into the shared table
LEGACY_DEFAULT_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {field: 1.0 for field in LEGACY_METRIC_FIELDS}
)

RAW_DEFAULT_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "schedule_adherence": 1.0,
    "attendance_rate": 0.5,
    "punctuality_score": 0.5,
    "break_compliance": 0.5,
    "task_completion_rate": 1.5,
    "productivity_index": 1.5,
    "quality_score": 1.5,
    "efficiency_rate": 1.0,
})

LEGACY_MIN_SCORE = 1
LEGACY_MAX_SCORE = 5
PERCENT_MIN = 0.0
PERCENT_MAX = 100.0

WEIGHT_SUFFIX = "_weight"

# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

METRIC_LABELS: Dict[str, str] = {
    "schedule_adherence": "Schedule Adherence",
    "attendance_rate": "Attendance Rate",
    "punctuality_score": "Punctuality Score",
    "break_compliance": "Break Compliance",
    "task_completion_rate": "Task Completion Rate",
    "productivity_index": "Productivity Index",
    "quality_score": "Quality Score",
    "efficiency_rate": "Efficiency Rate",
}

METRIC_DESCRIPTIONS: Dict[str, str] = {
    "schedule_adherence": "Percentage of scheduled time actually worked",
    "attendance_rate": "Percentage of scheduled days attended",
    "punctuality_score": "Percentage of on-time arrivals",
    "break_compliance": "Percentage of breaks taken within allowed time",
    "task_completion_rate": "Percentage of assigned tasks completed",
    "productivity_index": "Ratio of actual output to expected output",
    "quality_score": "Percentage of tasks completed without errors",
    "efficiency_rate": "Ratio of standard time to time actually spent",
}

METRIC_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "Time & Attendance": (
        "schedule_adherence",
        "attendance_rate",
        "punctuality_score",
        "break_compliance",
    ),
    "Performance & Productivity": (
        "task_completion_rate",
        "productivity_index",
        "quality_score",
        "efficiency_rate",
    ),
}


def impact_level(weight: float) -> str:
    """Bucket a default weight into the impact level shown to coaches."""
    if weight >= 1.5:
        return "High"
    if weight >= 1.0:
        return "Medium"
    return "Low"
