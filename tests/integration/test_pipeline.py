#!/usr/bin/env python3
"""
End-to-end tests of the assessment pipeline.

RawInput snapshots go through normalization, estimation, derivation and
persistence records, then into a series for trend analysis and charting.
"""

import json
import os
import tempfile

import pytest

from core import (
    analyze_series,
    assessment_from_record,
    assessment_to_record,
    build_assessment,
    build_series_from_history,
    load_history_json,
)
from shared_models import FatMethod, TrendDirection
from trend_plot import PLOT_FILENAME, create_trend_plot, save_trend_plot
from trends import AssessmentSeries

EXAMPLE_HISTORY = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    "example_history.json",
)


def test_example_history_is_valid():
    history = load_history_json(EXAMPLE_HISTORY, quiet=True)
    series = build_series_from_history(history)

    assert len(series) == 3
    assert series.current.id == "student-42-003"
    assert series.current.fat_method is FatMethod.SKINFOLDS
    assert series.initial.fat_method is FatMethod.BIOIMPEDANCE


def test_method_switch_between_assessments():
    """Each assessment keeps its own body-fat source of truth."""
    history = load_history_json(EXAMPLE_HISTORY, quiet=True)
    series = build_series_from_history(history)

    assert series.initial.body_fat_percent == 22.5
    # skinfold sum 100 mm, male, 34 years
    density = 1.112 - 0.00043499 * 100 + 0.00000055 * 100**2 - 0.0002882 * 34
    assert series.current.body_fat_percent == pytest.approx((4.95 / density - 4.5) * 100)
    assert series.current.estimated_fields == ()


def test_full_analysis():
    history = load_history_json(EXAMPLE_HISTORY, quiet=True)
    results = analyze_series(build_series_from_history(history))

    report = results["trends"]
    assert report.since_previous["weight"].delta == pytest.approx(-1.3)
    assert report.since_previous["weight"].direction is TrendDirection.IMPROVEMENT
    assert report.since_initial["waist"].direction is TrendDirection.IMPROVEMENT
    # not measured on the skinfold visit
    assert report.since_previous["visceral_fat"].direction is TrendDirection.UNKNOWN

    assert results["symmetry"].measured_pair_count == 3
    assert 0 <= results["symmetry"].value <= 100
    assert results["energy"]["bmr"] > 0
    assert results["classifications"]["bmi"] == "Overweight"
    assert len(results["frame"]) == 3


def test_persisted_records_survive_reload(sample_raw_input):
    assessment = build_assessment(
        sample_raw_input, "student-1", "a-1", "2024-01-10T09:00:00Z"
    )

    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "records.json")
        with open(path, "w") as f:
            json.dump([assessment_to_record(assessment)], f)
        with open(path) as f:
            restored = [assessment_from_record(r) for r in json.load(f)]

    assert restored == [assessment]


def test_series_built_from_separate_assessments(sample_raw_input):
    later = dict(sample_raw_input, weight="82.0", bodyFatManual="21.0")
    series = AssessmentSeries(
        [
            build_assessment(later, "student-1", "b", "2024-02-10T09:00:00Z"),
            build_assessment(sample_raw_input, "student-1", "a", "2024-01-10T09:00:00Z"),
        ]
    )

    results = analyze_series(series, ["weight", "body_fat_percent"])

    assert results["trends"].since_previous["body_fat_percent"].delta == pytest.approx(-1.5)
    assert results["trends"].since_previous["body_fat_percent"].direction is (
        TrendDirection.IMPROVEMENT
    )


def test_empty_series_cannot_be_analyzed():
    with pytest.raises(ValueError):
        analyze_series(AssessmentSeries())


def test_trend_plot_is_saved():
    history = load_history_json(EXAMPLE_HISTORY, quiet=True)
    results = analyze_series(build_series_from_history(history))

    with tempfile.TemporaryDirectory() as tmpdir:
        path = save_trend_plot(results["frame"], ["weight", "bmi", "waist"], tmpdir)

        assert path == os.path.join(tmpdir, PLOT_FILENAME)
        assert os.path.getsize(path) > 0


def test_trend_plot_without_data():
    frame = analyze_series(
        AssessmentSeries([build_assessment({}, "student-1", "a", "2024-01-01")]),
        ["waist"],
    )["frame"]

    fig = create_trend_plot(frame, ["waist"])

    assert fig is not None
