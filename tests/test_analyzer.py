"""Tests for trends, yearly aggregates and the performance window."""

import pytest

from scorecard_engine.services.scorecard.analyzer import (
    performance_window,
    previous_period,
    trend,
    yearly_average,
)


@pytest.mark.parametrize(
    "month, year, expected",
    [(3, 2025, (2, 2025)), (1, 2025, (12, 2024)), (12, 2024, (11, 2024))],
)
def test_previous_period(month, year, expected):
    assert previous_period(month, year) == expected


def test_trend_is_absent_without_previous_record():
    assert trend({"percentage": 70.0, "total_score": 560.0}, None) is None


def test_trend_subtracts_previous_from_current():
    current = {"quality_score": 82.5, "attendance_rate": 90.0, "total_score": 600.0, "percentage": 75.0}
    previous = {"quality_score": 80.0, "attendance_rate": 95.0, "total_score": 560.0, "percentage": 70.0}

    deltas = trend(current, previous)

    assert deltas == {
        "quality_score": 2.5,
        "attendance_rate": -5.0,
        "total_score": 40.0,
        "percentage": 5.0,
    }


def test_trend_across_a_scheme_change_keeps_only_scores():
    current = {"service": 4, "total_score": 32.0, "percentage": 80.0}
    previous = {"quality_score": 60.0, "total_score": 480.0, "percentage": 60.0}

    assert trend(current, previous) == {"total_score": -448.0, "percentage": 20.0}


def test_trend_of_identical_records_is_zero_filled():
    record = {"service": 3, "total_score": 24.0, "percentage": 60.0}

    assert trend(record, dict(record)) == {"service": 0.0, "total_score": 0.0, "percentage": 0.0}


def test_yearly_average_of_percentages():
    records = [{"percentage": 60.0}, {"percentage": 70.0}, {"percentage": 80.0}]

    assert yearly_average(records)["percentage"] == 70.0


def test_yearly_average_ignores_fields_a_record_does_not_carry():
    records = [
        {"service": 4, "total_score": 32.0, "percentage": 80.0},
        {"quality_score": 50.0, "total_score": 400.0, "percentage": 50.0},
        {"service": 3, "total_score": 24.0, "percentage": 60.0},
    ]

    averages = yearly_average(records)

    assert averages["service"] == 3.5
    assert averages["quality_score"] == 50.0
    assert averages["percentage"] == 63.33
    assert "attendance_rate" not in averages


def test_yearly_average_of_nothing_is_empty():
    assert yearly_average([]) == {}


def test_performance_window_newest_first():
    window = [
        {"year": 2025, "month": 3, "percentage": 80.0},
        {"year": 2025, "month": 2, "percentage": 70.0},
        {"year": 2025, "month": 1, "percentage": 50.0},
    ]

    summary = performance_window(window)

    assert summary["overall_score"] == 80.0
    assert summary["average_score"] == 66.67
    assert summary["improvement"] == 30.0
    assert summary["period_count"] == 3
    assert summary["historical_scores"][0] == {"year": 2025, "month": 3, "score": 80.0, "rating": 4.2}


def test_performance_window_single_record_has_no_improvement():
    summary = performance_window([{"year": 2025, "month": 1, "percentage": 55.0}])

    assert summary["improvement"] == 0.0
    assert summary["overall_score"] == 55.0


def test_performance_window_empty():
    assert performance_window([])["period_count"] == 0
