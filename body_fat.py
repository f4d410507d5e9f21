"""
Body-fat estimation.

Two sources of truth, selected by the assessment's fat method:

- Skinfolds: Jackson-Pollock 7-site density regression converted to
  percentage with the Siri equation.
- Bioimpedance / Tape: the percentage reported by the device or tape
  protocol, taken as entered.

The methods never mix. Any unmet precondition yields None rather than a
clamped or default number.
"""

import logging
import math
from typing import Optional

from shared_models import Assessment, BodyFatEstimate, FatMethod, Gender, Skinfolds

logger = logging.getLogger(__name__)

# Jackson-Pollock 7-site coefficients: (intercept, sum, sum^2, age)
JP7_COEFFICIENTS = {
    Gender.MALE: (1.112, 0.00043499, 0.00000055, 0.0002882),
    Gender.FEMALE: (1.0970, 0.00046971, 0.00000056, 0.00012828),
}

# Siri (1961) two-compartment constants
SIRI_A = 4.95
SIRI_B = 4.50


def sum_skinfolds(skinfolds: Skinfolds) -> Optional[float]:
    """Sum of the seven sites in mm, or None if any site is unknown."""
    values = skinfolds.values()
    if any(v is None for v in values):
        return None
    return float(sum(values))


def calculate_body_density(
    skinfolds: Skinfolds, gender: Optional[Gender], age: Optional[float]
) -> Optional[float]:
    """
    Calculates body density with the Jackson-Pollock 7-site regression.

    Args:
        skinfolds (Skinfolds): The seven caliper readings in mm.
        gender (Gender): Selects the male or female regression.
        age (float): Age in years.

    Returns:
        float or None: Density in g/cm^3. None when a site, the gender or the
        age is unknown, when the sum of sites is <= 0, or when age <= 0.
    """
    total = sum_skinfolds(skinfolds)
    if total is None or gender is None or age is None:
        return None
    if total <= 0 or age <= 0:
        logger.debug(f"Skinfold preconditions unmet (sum={total}, age={age})")
        return None

    intercept, linear, quadratic, age_coef = JP7_COEFFICIENTS[gender]
    return intercept - linear * total + quadratic * total**2 - age_coef * age


def siri_body_fat(density: Optional[float]) -> Optional[float]:
    """
    Converts body density to body-fat percentage with the Siri equation.

    Returns None for unknown or non-positive density, and for a negative or
    NaN percentage; degenerate densities are not clamped.
    """
    if density is None or density <= 0:
        return None
    percent = (SIRI_A / density - SIRI_B) * 100
    if math.isnan(percent) or percent < 0:
        logger.debug(f"Degenerate body density {density}; body fat unknown")
        return None
    return percent


def estimate_body_fat(
    method: FatMethod,
    skinfolds: Skinfolds,
    gender: Optional[Gender],
    age: Optional[float],
    manual_percent: Optional[float],
) -> BodyFatEstimate:
    """
    Estimates body-fat percentage with the selected method.

    Args:
        method (FatMethod): Source of truth for the percentage.
        skinfolds (Skinfolds): Caliper readings, used by SKINFOLDS only.
        gender (Gender): Used by SKINFOLDS only.
        age (float): Used by SKINFOLDS only.
        manual_percent (float): Used by BIOIMPEDANCE and TAPE only.

    Returns:
        BodyFatEstimate: percent (and density for skinfolds), each possibly None.
    """
    if method is FatMethod.SKINFOLDS:
        density = calculate_body_density(skinfolds, gender, age)
        return BodyFatEstimate(
            method=method, percent=siri_body_fat(density), density=density
        )
    return BodyFatEstimate(method=method, percent=manual_percent)


def resolve_body_fat(assessment: Assessment) -> Optional[float]:
    """
    Body-fat percentage of a stored assessment, from its own method.

    Skinfold assessments are recomputed from the stored readings so a
    re-display never shows a value from another method.
    """
    if assessment.fat_method is FatMethod.SKINFOLDS:
        return estimate_body_fat(
            assessment.fat_method,
            assessment.skinfolds,
            assessment.gender,
            assessment.age,
            None,
        ).percent
    return assessment.body_fat_percent
