"""
Input normalization for BodyCompTracker.

Everything a user types passes through this module before it reaches a
formula. Blank or unparsable values become ``None`` ("unknown"); nothing here
raises, and nothing is ever coerced to 0.
"""

import logging
import math
from typing import Any, Mapping, Optional

from shared_models import (
    BilateralGirths,
    FatMethod,
    Gender,
    Girths,
    MeasurementInput,
    Skinfolds,
    TmbMethod,
)

logger = logging.getLogger(__name__)

# RawInput keys for each measurement group, mapped to dataclass field names
SKINFOLD_FIELDS = {
    "sf_chest": "chest",
    "sf_axillary": "axillary",
    "sf_triceps": "triceps",
    "sf_subscapular": "subscapular",
    "sf_abdominal": "abdominal",
    "sf_suprailiac": "suprailiac",
    "sf_thigh": "thigh",
}

GIRTH_FIELDS = {
    "chest": "chest",
    "waist": "waist",
    "abdomen": "abdomen",
    "hips": "hips",
}

BILATERAL_GIRTH_FIELDS = {
    "armRight": "arm_right",
    "armLeft": "arm_left",
    "thighRight": "thigh_right",
    "thighLeft": "thigh_left",
    "calfRight": "calf_right",
    "calfLeft": "calf_left",
}

SCALAR_FIELDS = {
    "age": "age",
    "height": "height",
    "weight": "weight",
    "bodyFatManual": "body_fat_manual",
    "muscleMass": "muscle_mass",
    "visceralFat": "visceral_fat",
    "metabolicAge": "metabolic_age",
}

# Accepted spellings, compared lower-cased. Portuguese labels are accepted
# as entered on the coach forms.
GENDER_ALIASES = {
    "m": Gender.MALE,
    "male": Gender.MALE,
    "f": Gender.FEMALE,
    "female": Gender.FEMALE,
}

FAT_METHOD_ALIASES = {
    "bioimpedance": FatMethod.BIOIMPEDANCE,
    "bioimpedância": FatMethod.BIOIMPEDANCE,
    "skinfolds": FatMethod.SKINFOLDS,
    "dobras": FatMethod.SKINFOLDS,
    "tape": FatMethod.TAPE,
    "medidas": FatMethod.TAPE,
}

TMB_METHOD_ALIASES = {
    "mifflin-st jeor": TmbMethod.MIFFLIN_ST_JEOR,
    "mifflin": TmbMethod.MIFFLIN_ST_JEOR,
    "harris-benedict": TmbMethod.HARRIS_BENEDICT,
    "harris benedict": TmbMethod.HARRIS_BENEDICT,
    "ten haaf": TmbMethod.TEN_HAAF,
    "teen haaf": TmbMethod.TEN_HAAF,
    "cunningham": TmbMethod.CUNNINGHAM,
}


def parse_optional_number(raw: Any) -> Optional[float]:
    """
    Converts a free-form input into an optional number.

    Args:
        raw: What the user typed. Strings are trimmed; numbers pass through.

    Returns:
        float or None: None for blank, non-numeric, NaN or infinite input.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        number = raw
    else:
        number = str(raw).strip()
        if not number:
            return None

    try:
        value = float(number)
    except (OverflowError, ValueError):
        # ints beyond the float range raise OverflowError
        return None

    if not math.isfinite(value):
        return None
    return value


def _parse_choice(raw: Any, enum_cls, aliases, default, label):
    if raw is None:
        return default
    if isinstance(raw, enum_cls):
        return raw
    text = str(raw).strip().lower()
    if not text:
        return default
    if text in aliases:
        return aliases[text]
    logger.warning(f"Unrecognized {label} {raw!r}; using {default}")
    return default


def parse_gender(raw: Any) -> Optional[Gender]:
    """Returns the gender, or None when blank or unrecognized."""
    return _parse_choice(raw, Gender, GENDER_ALIASES, None, "gender")


def parse_fat_method(raw: Any) -> FatMethod:
    """Returns the body-fat method, defaulting to Bioimpedance."""
    return _parse_choice(
        raw, FatMethod, FAT_METHOD_ALIASES, FatMethod.BIOIMPEDANCE, "fat calculation method"
    )


def parse_tmb_method(raw: Any) -> TmbMethod:
    """Returns the BMR formula, defaulting to Mifflin-St Jeor."""
    return _parse_choice(
        raw, TmbMethod, TMB_METHOD_ALIASES, TmbMethod.MIFFLIN_ST_JEOR, "BMR formula"
    )


def _parse_group(raw: Mapping[str, Any], fields) -> dict:
    return {attr: parse_optional_number(raw.get(key)) for key, attr in fields.items()}


def normalize_raw_input(raw: Mapping[str, Any]) -> MeasurementInput:
    """
    Normalizes one RawInput mapping into a MeasurementInput.

    Unknown keys are ignored and missing keys are treated as blank.

    Args:
        raw (Mapping): Field name -> free-form value, as typed on the form.

    Returns:
        MeasurementInput: Every numeric field optional, enums resolved.
    """
    scalars = _parse_group(raw, SCALAR_FIELDS)
    return MeasurementInput(
        gender=parse_gender(raw.get("gender")),
        fat_method=parse_fat_method(raw.get("fatCalculationMethod")),
        tmb_method=parse_tmb_method(raw.get("tmbMethod")),
        skinfolds=Skinfolds(**_parse_group(raw, SKINFOLD_FIELDS)),
        girths=Girths(**_parse_group(raw, GIRTH_FIELDS)),
        bilateral_girths=BilateralGirths(**_parse_group(raw, BILATERAL_GIRTH_FIELDS)),
        **scalars,
    )
