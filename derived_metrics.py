"""
Derived metrics calculated from one measurement snapshot.

BMI, basal metabolic rate and maintenance calories, plus the advisory
defaults offered for bioimpedance assessments. The advisory values are
placeholders for fields a scale did not report; they are only ever used to
fill blanks, and callers record them as estimated.
"""

import logging
from typing import Dict, Optional

from shared_models import (
    DerivedMetrics,
    FatMethod,
    Gender,
    MeasurementInput,
    TmbMethod,
)

logger = logging.getLogger(__name__)

# BMR fallbacks when the snapshot lacks height or age
DEFAULT_BMR_HEIGHT_CM = 170.0
DEFAULT_BMR_AGE_YEARS = 30.0

# Fixed "lightly active" factor; no other activity level is modeled
MAINTENANCE_ACTIVITY_FACTOR = 1.375

# Advisory placeholders for bioimpedance assessments
DEFAULT_METABOLIC_AGE = 25.0
METABOLIC_AGE_OFFSET_YEARS = 4.0
METABOLIC_AGE_MIN_AGE = 5.0
DEFAULT_VISCERAL_FAT = 7.0

# Revised Harris-Benedict (Roza & Shizgal, 1984): (constant, weight, height, age)
HARRIS_BENEDICT_COEFFICIENTS = {
    Gender.MALE: (88.362, 13.397, 4.799, 5.677),
    Gender.FEMALE: (447.593, 9.247, 3.098, 4.330),
}

# ten Haaf & Weijs (2014), weight-based: (weight, height in m, age, male, constant)
TEN_HAAF_COEFFICIENTS = (11.936, 587.728, 8.129, 191.027, 29.279)


def calculate_bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    """
    Calculate Body Mass Index (BMI).

    Returns:
        BMI as an unrounded float (kg/m^2), or None unless both weight and
        height are known and positive.
    """
    if weight_kg is None or height_cm is None:
        return None
    if weight_kg <= 0 or height_cm <= 0:
        return None
    height_m = height_cm / 100.0
    return weight_kg / (height_m**2)


def suggest_lean_mass_percent(body_fat_percent: Optional[float]) -> Optional[float]:
    if body_fat_percent is None:
        return None
    return 100.0 - body_fat_percent


def suggest_metabolic_age(age: Optional[float]) -> float:
    """Advisory metabolic age: four years under chronological age past 5."""
    if age is None:
        return DEFAULT_METABOLIC_AGE
    if age > METABOLIC_AGE_MIN_AGE:
        return age - METABOLIC_AGE_OFFSET_YEARS
    return age


def suggest_visceral_fat() -> float:
    """Advisory visceral-fat index. A placeholder, not a measurement."""
    return DEFAULT_VISCERAL_FAT


def calculate_bmr(
    weight_kg: Optional[float],
    height_cm: Optional[float] = None,
    age_years: Optional[float] = None,
    gender: Optional[Gender] = None,
    method: TmbMethod = TmbMethod.MIFFLIN_ST_JEOR,
    body_fat_percent: Optional[float] = None,
) -> Optional[float]:
    """
    Basal metabolic rate in kcal/day.

    Mifflin-St Jeor always applies the +5 offset and does not branch on
    gender. Height falls back to 170 cm and age to 30 years when unknown or
    not positive; weight is required by every formula.

    Harris-Benedict and ten Haaf need the gender. Cunningham works from lean
    body mass and needs the body-fat percentage.
    """
    if weight_kg is None or weight_kg <= 0:
        return None

    height = height_cm if height_cm is not None and height_cm > 0 else DEFAULT_BMR_HEIGHT_CM
    age = age_years if age_years is not None and age_years > 0 else DEFAULT_BMR_AGE_YEARS

    if method is TmbMethod.HARRIS_BENEDICT:
        if gender is None:
            return None
        constant, w_coef, h_coef, a_coef = HARRIS_BENEDICT_COEFFICIENTS[gender]
        return constant + w_coef * weight_kg + h_coef * height - a_coef * age

    if method is TmbMethod.TEN_HAAF:
        if gender is None:
            return None
        w_coef, h_coef, a_coef, male_coef, constant = TEN_HAAF_COEFFICIENTS
        male = 1 if gender is Gender.MALE else 0
        return (
            w_coef * weight_kg
            + h_coef * height / 100.0
            - a_coef * age
            + male_coef * male
            + constant
        )

    if method is TmbMethod.CUNNINGHAM:
        if body_fat_percent is None:
            return None
        lean_mass_kg = weight_kg * (1 - body_fat_percent / 100.0)
        return 500 + 22 * lean_mass_kg

    return 10 * weight_kg + 6.25 * height - 5 * age + 5


def calculate_maintenance_calories(bmr: Optional[float]) -> Optional[float]:
    if bmr is None:
        return None
    return bmr * MAINTENANCE_ACTIVITY_FACTOR


def calculate_derived_metrics(
    measurements: MeasurementInput, body_fat_percent: Optional[float]
) -> DerivedMetrics:
    """
    Bundles every derived metric for one normalized snapshot.

    The advisory suggestions are only set for bioimpedance snapshots and do
    not look at what the user entered; ``advisory_defaults`` decides which of
    them fill a blank.
    """
    bmr = calculate_bmr(
        measurements.weight,
        measurements.height,
        measurements.age,
        gender=measurements.gender,
        method=measurements.tmb_method,
        body_fat_percent=body_fat_percent,
    )
    is_bioimpedance = measurements.fat_method is FatMethod.BIOIMPEDANCE
    return DerivedMetrics(
        bmi=calculate_bmi(measurements.weight, measurements.height),
        bmr=bmr,
        maintenance_calories=calculate_maintenance_calories(bmr),
        lean_mass_percent_suggestion=(
            suggest_lean_mass_percent(body_fat_percent) if is_bioimpedance else None
        ),
        suggested_metabolic_age=(
            suggest_metabolic_age(measurements.age) if is_bioimpedance else None
        ),
        suggested_visceral_fat=suggest_visceral_fat() if is_bioimpedance else None,
    )


def advisory_defaults(
    measurements: MeasurementInput, derived: DerivedMetrics
) -> Dict[str, float]:
    """
    Values to fill blanks of a bioimpedance assessment.

    Only fields the user left blank are returned; a user-entered value is
    never overwritten. Other methods carry no suggestions in ``derived`` and
    so get no advisory defaults.

    Args:
        measurements (MeasurementInput): The normalized snapshot.
        derived (DerivedMetrics): Output of calculate_derived_metrics for it.

    Returns:
        dict: Assessment field name -> advisory value.
    """
    candidates = (
        ("muscle_mass_percent", measurements.muscle_mass, derived.lean_mass_percent_suggestion),
        ("metabolic_age", measurements.metabolic_age, derived.suggested_metabolic_age),
        ("visceral_fat", measurements.visceral_fat, derived.suggested_visceral_fat),
    )
    defaults = {
        name: suggestion
        for name, entered, suggestion in candidates
        if entered is None and suggestion is not None
    }

    if defaults:
        logger.debug(f"Advisory defaults applied: {sorted(defaults)}")
    return defaults
