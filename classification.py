"""
Classification of metric values into ordinal health-status bands.

Pure lookups: the same value always maps to the same label, and an unknown
value maps to NOT_AVAILABLE rather than to a default band.
"""

from typing import Dict, Mapping, Optional

from shared_models import METRIC_POLARITY, Assessment, Polarity, TrendDirection

NOT_AVAILABLE = "Not available"

# Bands in ascending order: (exclusive upper bound, label)
BMI_BANDS = (
    (18.5, "Underweight"),
    (25.0, "Normal"),
    (30.0, "Overweight"),
    (float("inf"), "Obese"),
)

BODY_FAT_BANDS = (
    (10.0, "Athlete"),
    (20.0, "Good"),
    (25.0, "Average"),
    (float("inf"), "High"),
)

# Inclusive upper bounds
VISCERAL_FAT_BANDS = (
    (9.0, "Healthy"),
    (14.0, "Elevated"),
    (float("inf"), "High risk"),
)

BAND_LABELS = {
    "bmi": tuple(label for _, label in BMI_BANDS),
    "body_fat_percent": tuple(label for _, label in BODY_FAT_BANDS),
    "visceral_fat": tuple(label for _, label in VISCERAL_FAT_BANDS),
    "metabolic_age": ("Excellent", "Normal", "Attention"),
}


def bmi_category(bmi: Optional[float]) -> str:
    if bmi is None:
        return NOT_AVAILABLE
    for upper, label in BMI_BANDS:
        if bmi < upper:
            return label
    return BMI_BANDS[-1][1]


def body_fat_category(body_fat_percent: Optional[float]) -> str:
    if body_fat_percent is None:
        return NOT_AVAILABLE
    for upper, label in BODY_FAT_BANDS:
        if body_fat_percent < upper:
            return label
    return BODY_FAT_BANDS[-1][1]


def visceral_fat_category(visceral_fat: Optional[float]) -> str:
    if visceral_fat is None:
        return NOT_AVAILABLE
    for upper, label in VISCERAL_FAT_BANDS:
        if visceral_fat <= upper:
            return label
    return VISCERAL_FAT_BANDS[-1][1]


def metabolic_age_category(
    metabolic_age: Optional[float], chronological_age: Optional[float]
) -> str:
    """Compares metabolic age against chronological age."""
    if metabolic_age is None or chronological_age is None:
        return NOT_AVAILABLE
    if metabolic_age < chronological_age:
        return "Excellent"
    if metabolic_age == chronological_age:
        return "Normal"
    return "Attention"


def classify(metric: str, value: Optional[float], context: Optional[float] = None) -> str:
    """
    Maps a metric value to its health-status label.

    Args:
        metric (str): 'bmi', 'body_fat_percent', 'visceral_fat' or 'metabolic_age'.
        value (float): The value to classify; None yields NOT_AVAILABLE.
        context (float): Chronological age, required for 'metabolic_age'.

    Returns:
        str: The band label.

    Raises:
        ValueError: If the metric has no band table.
    """
    if metric == "bmi":
        return bmi_category(value)
    if metric == "body_fat_percent":
        return body_fat_category(value)
    if metric == "visceral_fat":
        return visceral_fat_category(value)
    if metric == "metabolic_age":
        return metabolic_age_category(value, context)
    raise ValueError(f"No classification bands for metric: {metric}")


def band_rank(metric: str, label: str) -> Optional[int]:
    """Ordinal position of a label within its metric's bands (0 = lowest)."""
    labels = BAND_LABELS.get(metric, ())
    if label not in labels:
        return None
    return labels.index(label)


def classify_trend(
    metric: str,
    display_delta: Optional[float],
    polarity_table: Mapping[str, Polarity] = METRIC_POLARITY,
) -> TrendDirection:
    """
    Interprets a display delta with the metric's direction of progress.

    Metrics missing from the table are treated as neutral.
    """
    if display_delta is None:
        return TrendDirection.UNKNOWN
    if display_delta == 0:
        return TrendDirection.STABLE

    polarity = polarity_table.get(metric, Polarity.NEUTRAL)
    if polarity is Polarity.NEUTRAL:
        return TrendDirection.CHANGED
    increased = display_delta > 0
    if increased == (polarity is Polarity.HIGHER_IS_BETTER):
        return TrendDirection.IMPROVEMENT
    return TrendDirection.REGRESSION


def classify_assessment(assessment: Assessment) -> Dict[str, str]:
    """Status labels for the classified metrics of one assessment."""
    return {
        "bmi": classify("bmi", assessment.bmi),
        "body_fat_percent": classify("body_fat_percent", assessment.body_fat_percent),
        "visceral_fat": classify("visceral_fat", assessment.visceral_fat),
        "metabolic_age": classify(
            "metabolic_age", assessment.metabolic_age, context=assessment.age
        ),
    }
