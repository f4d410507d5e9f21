"""
Trend & Diff Engine for BodyCompTracker

This module compares assessments of one subject over time:
- An immutable, totally ordered AssessmentSeries (newest first for display,
  oldest first for charts)
- Per-metric deltas that propagate unknowns instead of substituting 0
- Noise folding (|delta| < 0.1 displays as 0)
- Direction of progress from an explicit per-metric polarity table
- A pandas frame of change-since-last / change-since-first columns
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from classification import classify_trend
from shared_models import (
    DEFAULT_TREND_METRICS,
    DIFF_NOISE_THRESHOLD,
    METRIC_POLARITY,
    Assessment,
    MetricDiff,
    Polarity,
    TrendReport,
)

logger = logging.getLogger(__name__)


def _group_accessor(group: str, attr: str) -> Callable[[Assessment], Optional[float]]:
    return lambda assessment: getattr(getattr(assessment, group), attr)


def _field_accessor(attr: str) -> Callable[[Assessment], Optional[float]]:
    return lambda assessment: getattr(assessment, attr)


METRIC_ACCESSORS: Dict[str, Callable[[Assessment], Optional[float]]] = {
    **{
        name: _field_accessor(name)
        for name in (
            "age",
            "height",
            "weight",
            "bmi",
            "body_fat_percent",
            "muscle_mass_percent",
            "visceral_fat",
            "metabolic_age",
        )
    },
    **{
        name: _group_accessor("girths", name)
        for name in ("chest", "waist", "abdomen", "hips")
    },
    **{
        name: _group_accessor("bilateral_girths", name)
        for name in (
            "arm_right",
            "arm_left",
            "thigh_right",
            "thigh_left",
            "calf_right",
            "calf_left",
        )
    },
    **{
        f"skinfold_{name}": _group_accessor("skinfolds", name)
        for name in (
            "chest",
            "axillary",
            "triceps",
            "subscapular",
            "abdominal",
            "suprailiac",
            "thigh",
        )
    },
}


def get_metric(assessment: Assessment, metric: str) -> Optional[float]:
    """
    Reads a metric from an assessment by name.

    Raises:
        KeyError: If the metric name is not known.
    """
    if metric not in METRIC_ACCESSORS:
        raise KeyError(f"Unknown metric: {metric}")
    return METRIC_ACCESSORS[metric](assessment)


def parse_timestamp(timestamp: str) -> datetime:
    """
    Parses an ISO-8601 timestamp; naive values are taken as UTC.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    text = timestamp.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class AssessmentSeries:
    """
    Immutable, time-ordered assessments of one subject.

    Ordering is chronological with ties kept in insertion order; the
    newest-first view is the exact reverse of that. Neither view mutates the
    other, and ``append`` returns a new series.
    """

    def __init__(self, assessments: Iterable[Assessment] = ()):
        items = list(assessments)
        subjects = {a.subject_id for a in items}
        if len(subjects) > 1:
            raise ValueError(
                f"An assessment series holds one subject, got: {sorted(subjects)}"
            )
        keyed = [(parse_timestamp(a.timestamp), i, a) for i, a in enumerate(items)]
        keyed.sort(key=lambda entry: (entry[0], entry[1]))
        self._chronological: Tuple[Assessment, ...] = tuple(a for _, _, a in keyed)

    def __len__(self):
        return len(self._chronological)

    def __iter__(self):
        return iter(self.newest_first())

    def __getitem__(self, index):
        return self.newest_first()[index]

    @property
    def subject_id(self) -> Optional[str]:
        if not self._chronological:
            return None
        return self._chronological[0].subject_id

    def newest_first(self) -> Tuple[Assessment, ...]:
        return self._chronological[::-1]

    def oldest_first(self) -> Tuple[Assessment, ...]:
        return self._chronological

    @property
    def current(self) -> Optional[Assessment]:
        return self._chronological[-1] if self._chronological else None

    @property
    def previous(self) -> Optional[Assessment]:
        return self._chronological[-2] if len(self._chronological) > 1 else None

    @property
    def initial(self) -> Optional[Assessment]:
        return self._chronological[0] if self._chronological else None

    def append(self, assessment: Assessment) -> "AssessmentSeries":
        """New series with the assessment added after every existing one."""
        return AssessmentSeries(self._chronological + (assessment,))


def diff(current: Optional[float], comparison: Optional[float]) -> Optional[float]:
    """current - comparison, or None when either side is unknown."""
    if current is None or comparison is None:
        return None
    return current - comparison


def normalize_delta(delta: Optional[float]) -> Optional[float]:
    """Folds floating noise below DIFF_NOISE_THRESHOLD to exactly 0."""
    if delta is None:
        return None
    if abs(delta) < DIFF_NOISE_THRESHOLD:
        return 0.0
    return delta


def compare_metric(
    current: Assessment,
    comparison: Assessment,
    metric: str,
    polarity_table: Mapping[str, Polarity] = METRIC_POLARITY,
) -> MetricDiff:
    current_value = get_metric(current, metric)
    comparison_value = get_metric(comparison, metric)
    delta = diff(current_value, comparison_value)
    display_delta = normalize_delta(delta)
    return MetricDiff(
        metric=metric,
        current=current_value,
        comparison=comparison_value,
        delta=delta,
        display_delta=display_delta,
        direction=classify_trend(metric, display_delta, polarity_table),
    )


def compare_assessments(
    current: Assessment,
    comparison: Assessment,
    metrics: Sequence[str] = DEFAULT_TREND_METRICS,
    polarity_table: Mapping[str, Polarity] = METRIC_POLARITY,
) -> Dict[str, MetricDiff]:
    """
    Per-metric differences between two assessments.

    Args:
        current (Assessment): The newer record.
        comparison (Assessment): The record to compare against.
        metrics (Sequence[str]): Metric names (see METRIC_ACCESSORS).
        polarity_table (Mapping): Direction of progress per metric. Callers
            with a different framing (e.g. symmetry work) pass their own.

    Returns:
        dict: metric -> MetricDiff, in the order requested.
    """
    return {
        metric: compare_metric(current, comparison, metric, polarity_table)
        for metric in metrics
    }


def analyze_trends(
    series: AssessmentSeries,
    metrics: Sequence[str] = DEFAULT_TREND_METRICS,
    polarity_table: Mapping[str, Polarity] = METRIC_POLARITY,
) -> Optional[TrendReport]:
    """
    Compares the newest assessment with the previous and the first one.

    Returns:
        TrendReport or None: None for an empty series. With a single
        assessment there is no previous comparison and every change since
        the initial record is zero.
    """
    if len(series) == 0:
        return None

    current = series.current
    previous = series.previous
    initial = series.initial

    since_previous = {}
    if previous is not None:
        since_previous = compare_assessments(current, previous, metrics, polarity_table)
    since_initial = compare_assessments(current, initial, metrics, polarity_table)

    logger.debug(f"Trend pass over {len(series)} assessments for {series.subject_id}")
    return TrendReport(
        current=current,
        previous=previous,
        initial=initial,
        since_previous=since_previous,
        since_initial=since_initial,
    )


def trend_frame(
    series: AssessmentSeries, metrics: Sequence[str] = DEFAULT_TREND_METRICS
) -> pd.DataFrame:
    """
    Oldest-first DataFrame for charting.

    Columns: 'timestamp' (datetime), one column per metric, and for each
    metric '<metric>_change_last' (vs the previous row) and
    '<metric>_change_first' (vs the first row). Unknown values are NaN in
    this frame; changes follow the same noise folding as display deltas.
    """
    rows = []
    for assessment in series.oldest_first():
        row = {
            "assessment_id": assessment.id,
            "timestamp": parse_timestamp(assessment.timestamp),
        }
        for metric in metrics:
            value = get_metric(assessment, metric)
            row[metric] = np.nan if value is None else value
        rows.append(row)

    columns = ["assessment_id", "timestamp", *metrics]
    frame = pd.DataFrame(rows, columns=columns)
    for metric in metrics:
        values = frame[metric].astype(float)
        change_last = values.diff()
        change_first = values - values.iloc[0] if len(values) else values
        frame[f"{metric}_change_last"] = _fold_noise(change_last)
        frame[f"{metric}_change_first"] = _fold_noise(change_first)
    return frame


def _fold_noise(changes: pd.Series) -> pd.Series:
    return pd.Series(
        np.where(changes.abs() < DIFF_NOISE_THRESHOLD, 0.0, changes),
        index=changes.index,
    )
