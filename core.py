"""
Core BodyCompTracker Analysis Logic

This module wires the calculators into the assessment pipeline and holds
the data-processing functions used by the analysis script.

Sections:
- Assessment pipeline (RawInput -> Assessment)
- Record conversion for the persistence layer
- History loading and orchestration
- Comparison table
"""

import json
import logging
import os
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from jsonschema import ValidationError, validate
from tabulate import tabulate

from body_fat import estimate_body_fat
from classification import classify_assessment
from derived_metrics import advisory_defaults, calculate_derived_metrics
from normalizer import normalize_raw_input
from shared_models import (
    DEFAULT_TREND_METRICS,
    Assessment,
    BilateralGirths,
    FatMethod,
    Gender,
    Girths,
    MeasurementInput,
    Skinfolds,
    TmbMethod,
)
from symmetry import score_symmetry
from trend_plot import save_trend_plot
from trends import AssessmentSeries, analyze_trends, get_metric, trend_frame

logger = logging.getLogger(__name__)

# JSON Schema for subject history files
ISO_TIMESTAMP_PATTERN = (
    "^\\d{4}-\\d{2}-\\d{2}"
    "([T ]\\d{2}:\\d{2}(:\\d{2}(\\.\\d{3}|\\.\\d{6})?)?(Z|[+-]\\d{2}:\\d{2})?)?$"
)

HISTORY_SCHEMA = {
    "type": "object",
    "required": ["subject_id", "assessments"],
    "properties": {
        "subject_id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "assessments": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["timestamp", "inputs"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "timestamp": {"type": "string", "pattern": ISO_TIMESTAMP_PATTERN},
                    "inputs": {
                        "type": "object",
                        "additionalProperties": {"type": ["string", "number", "null"]},
                    },
                },
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
}

# Column layout of the comparison table: (metric, header, decimals)
TABLE_COLUMNS = (
    ("weight", "Weight", 1),
    ("bmi", "BMI", 2),
    ("body_fat_percent", "BF%", 1),
    ("muscle_mass_percent", "Muscle%", 1),
    ("visceral_fat", "Visceral", 1),
    ("metabolic_age", "Met. Age", 0),
    ("waist", "Waist", 1),
    ("abdomen", "Abdomen", 1),
)


# ---------------------------------------------------------------------------
# ASSESSMENT PIPELINE
# ---------------------------------------------------------------------------


def build_assessment(
    raw: Union[Mapping[str, Any], MeasurementInput],
    subject_id: str,
    assessment_id: Optional[str] = None,
    timestamp: Optional[str] = None,
    apply_advisory_defaults: bool = True,
) -> Assessment:
    """
    Builds one immutable Assessment from a RawInput snapshot.

    Args:
        raw: RawInput mapping as typed on the form, or an already normalized
            MeasurementInput.
        subject_id (str): Subject the assessment belongs to.
        assessment_id (str): Record id; a UUID4 is generated when omitted.
        timestamp (str): ISO-8601 timestamp; now (UTC) when omitted.
        apply_advisory_defaults (bool): Fill blank bioimpedance fields with
            the advisory heuristics and tag them in ``estimated_fields``.

    Returns:
        Assessment: Identical inputs give identical records apart from the
        generated id and timestamp.
    """
    measurements = raw if isinstance(raw, MeasurementInput) else normalize_raw_input(raw)

    body_fat = estimate_body_fat(
        measurements.fat_method,
        measurements.skinfolds,
        measurements.gender,
        measurements.age,
        measurements.body_fat_manual,
    )

    derived = calculate_derived_metrics(measurements, body_fat.percent)

    defaults = {}
    if apply_advisory_defaults:
        defaults = advisory_defaults(measurements, derived)

    def measured_or_default(value, field_name):
        return value if value is not None else defaults.get(field_name)

    return Assessment(
        id=assessment_id or str(uuid.uuid4()),
        subject_id=subject_id,
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
        fat_method=measurements.fat_method,
        tmb_method=measurements.tmb_method,
        age=measurements.age,
        height=measurements.height,
        weight=measurements.weight,
        bmi=derived.bmi,
        gender=measurements.gender,
        body_fat_percent=body_fat.percent,
        muscle_mass_percent=measured_or_default(
            measurements.muscle_mass, "muscle_mass_percent"
        ),
        visceral_fat=measured_or_default(measurements.visceral_fat, "visceral_fat"),
        metabolic_age=measured_or_default(measurements.metabolic_age, "metabolic_age"),
        girths=measurements.girths,
        bilateral_girths=measurements.bilateral_girths,
        skinfolds=measurements.skinfolds,
        estimated_fields=tuple(sorted(defaults)),
    )


def calculate_energy(assessment: Assessment) -> Dict[str, Optional[float]]:
    """BMR and maintenance calories of a stored assessment, with its own formula."""
    measurements = MeasurementInput(
        age=assessment.age,
        height=assessment.height,
        weight=assessment.weight,
        gender=assessment.gender,
        fat_method=assessment.fat_method,
        tmb_method=assessment.tmb_method,
    )
    derived = calculate_derived_metrics(measurements, assessment.body_fat_percent)
    return {"bmr": derived.bmr, "maintenance_calories": derived.maintenance_calories}


# ---------------------------------------------------------------------------
# RECORD CONVERSION
# ---------------------------------------------------------------------------


def assessment_to_record(assessment: Assessment) -> Dict[str, Any]:
    """
    JSON-ready dict for the persistence layer.

    Enums are stored by value and unknown numbers as None (JSON null).
    """
    record = asdict(assessment)
    record["fat_method"] = assessment.fat_method.value
    record["tmb_method"] = assessment.tmb_method.value
    record["gender"] = assessment.gender.value if assessment.gender else None
    record["estimated_fields"] = list(assessment.estimated_fields)
    return record


def assessment_from_record(record: Mapping[str, Any]) -> Assessment:
    """
    Rebuilds an Assessment from a stored record.

    Raises:
        KeyError: If id, subject_id, timestamp or fat_method is missing.
        ValueError: If an enum value is not recognized.
    """
    gender = record.get("gender")
    return Assessment(
        id=record["id"],
        subject_id=record["subject_id"],
        timestamp=record["timestamp"],
        fat_method=FatMethod(record["fat_method"]),
        tmb_method=TmbMethod(record.get("tmb_method") or TmbMethod.MIFFLIN_ST_JEOR.value),
        age=record.get("age"),
        height=record.get("height"),
        weight=record.get("weight"),
        bmi=record.get("bmi"),
        gender=Gender(gender) if gender else None,
        body_fat_percent=record.get("body_fat_percent"),
        muscle_mass_percent=record.get("muscle_mass_percent"),
        visceral_fat=record.get("visceral_fat"),
        metabolic_age=record.get("metabolic_age"),
        girths=Girths(**(record.get("girths") or {})),
        bilateral_girths=BilateralGirths(**(record.get("bilateral_girths") or {})),
        skinfolds=Skinfolds(**(record.get("skinfolds") or {})),
        estimated_fields=tuple(record.get("estimated_fields") or ()),
    )


# ---------------------------------------------------------------------------
# HISTORY LOADING AND ORCHESTRATION
# ---------------------------------------------------------------------------


def load_history_json(history_path, quiet=False):
    """
    Loads and validates a subject history JSON file.

    Args:
        history_path (str): Path to the JSON history file.
        quiet (bool): If True, suppress print statements

    Returns:
        dict: History with subject_id and a list of raw assessment snapshots.

    Raises:
        FileNotFoundError: If the history file doesn't exist.
        json.JSONDecodeError: If the JSON is malformed.
        ValidationError: If the JSON doesn't match the required schema.
    """
    if not quiet:
        print(f"Loading assessment history from {history_path}...")

    if not os.path.exists(history_path):
        raise FileNotFoundError(f"History file not found: {history_path}")

    with open(history_path, "r") as f:
        history = json.load(f)

    validate(history, HISTORY_SCHEMA)

    if not quiet:
        print(f"Successfully loaded {len(history['assessments'])} assessments")
    return history


def build_series_from_history(history: Mapping[str, Any]) -> AssessmentSeries:
    """
    Runs the pipeline on every snapshot of a validated history.

    Snapshots without an id get a stable one derived from the subject id and
    their position in the file.
    """
    subject_id = history["subject_id"]
    assessments = []
    for index, entry in enumerate(history["assessments"]):
        assessments.append(
            build_assessment(
                entry["inputs"],
                subject_id,
                assessment_id=entry.get("id") or f"{subject_id}-{index + 1:03d}",
                timestamp=entry["timestamp"],
            )
        )
    return AssessmentSeries(assessments)


def _format_value(value, decimals):
    if value is None:
        return "N/A"
    return f"{value:.{decimals}f}"


def _format_change(value, decimals):
    if value is None:
        return "N/A"
    return f"{value:+.{decimals}f}"


def create_comparison_table(
    series: AssessmentSeries, columns: Sequence = TABLE_COLUMNS
) -> str:
    """
    Creates a comparison table, oldest assessment first, with change rows.

    Args:
        series (AssessmentSeries): The subject's assessments.
        columns: (metric, header, decimals) triples.

    Returns:
        str: Pipe-formatted table with 'Last change' and 'Total change' rows
        when there is more than one assessment.
    """
    if len(series) == 0:
        return "No assessment data available for comparison"

    headers = ["Date"] + [header for _, header, _ in columns]
    table_data = []
    for assessment in series.oldest_first():
        row = [assessment.timestamp[:10]]
        for metric, _, decimals in columns:
            row.append(_format_value(get_metric(assessment, metric), decimals))
        table_data.append(row)

    report = analyze_trends(series, [metric for metric, _, _ in columns])
    if report.previous is not None:
        for label, diffs in (
            ("Last change", report.since_previous),
            ("Total change", report.since_initial),
        ):
            row = [label]
            for metric, _, decimals in columns:
                row.append(_format_change(diffs[metric].display_delta, max(decimals, 1)))
            table_data.append(row)

    # Cells are pre-formatted; keep tabulate from reparsing them as numbers
    return tabulate(table_data, headers=headers, tablefmt="pipe", disable_numparse=True)


def analyze_series(
    series: AssessmentSeries, metrics: Sequence[str] = DEFAULT_TREND_METRICS
) -> Dict[str, Any]:
    """
    Full analysis pass over a series.

    Returns:
        dict: 'trends' (TrendReport), 'classifications' and 'energy' of the
        current assessment, 'symmetry' (SymmetryScore) and 'frame' (the
        oldest-first pandas DataFrame).
    """
    report = analyze_trends(series, metrics)
    if report is None:
        raise ValueError("Cannot analyze an empty assessment series")

    current = report.current
    return {
        "trends": report,
        "classifications": classify_assessment(current),
        "energy": calculate_energy(current),
        "symmetry": score_symmetry(current.bilateral_girths),
        "frame": trend_frame(series, metrics),
    }


def _print_summary(results: Dict[str, Any]) -> None:
    report = results["trends"]
    current = report.current

    print("\n--- Current Assessment ---")
    print(f"  - Date: {current.timestamp}")
    print(f"  - Body fat method: {current.fat_method.value}")
    for metric, label in results["classifications"].items():
        print(f"  - {metric}: {label}")
    if current.estimated_fields:
        print(f"  - Estimated (not measured): {', '.join(current.estimated_fields)}")

    energy = results["energy"]
    print(f"  - BMR ({current.tmb_method.value}): {_format_value(energy['bmr'], 0)} kcal")
    print(
        f"  - Maintenance calories: "
        f"{_format_value(energy['maintenance_calories'], 0)} kcal"
    )

    symmetry = results["symmetry"]
    score = "N/A" if symmetry.value is None else str(symmetry.value)
    print(f"  - Symmetry score: {score} ({symmetry.measured_pair_count}/3 pairs)")

    if report.previous is not None:
        print("\n--- Since Previous Assessment ---")
        for metric, metric_diff in report.since_previous.items():
            print(
                f"  - {metric}: {_format_change(metric_diff.display_delta, 1)} "
                f"({metric_diff.direction.value})"
            )


def run_analysis(
    history_path="example_history.json",
    metrics: Optional[List[str]] = None,
    plot_dir: Optional[str] = None,
    return_results=False,
):
    """
    Main analysis function that orchestrates the whole BodyCompTracker workflow.

    Args:
        history_path (str): Path to JSON history file
        metrics (list): Metrics to compare (default: DEFAULT_TREND_METRICS)
        plot_dir (str): Directory to save the trend chart in (CLI only)
        return_results (bool): If True, returns analysis results instead of printing

    Returns:
        int or dict: Exit code (0 for success, 1 for error) if return_results=False,
                     or the analyze_series() dict if return_results=True
    """
    metrics = list(metrics or DEFAULT_TREND_METRICS)

    try:
        history = load_history_json(history_path, quiet=return_results)
        series = build_series_from_history(history)
        results = analyze_series(series, metrics)

        if return_results:
            return results

        print(f"Subject: {history.get('name', history['subject_id'])}")
        _print_summary(results)

        print("\n--- Changes So Far ---")
        print(create_comparison_table(series))

        if plot_dir:
            path = save_trend_plot(results["frame"], metrics, plot_dir)
            print(f"\nTrend chart saved to {path}")

        return 0

    except (
        FileNotFoundError,
        json.JSONDecodeError,
        ValidationError,
        KeyError,
        ValueError,
    ) as e:
        if return_results:
            raise e
        print(f"Error: {e}")
        print(f"\nPlease check your history file: {history_path}")
        return 1
