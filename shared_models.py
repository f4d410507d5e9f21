"""
Shared Data Models for BodyCompTracker

This module contains all shared dataclasses, enums and lookup tables used
throughout the body-composition analytics library: the normalizer, the
estimators, the symmetry scorer, the trend engine and the classifier.

Unified data models provide:
- A single optional-number convention (``None`` means "unknown")
- Immutable assessment records, so history never changes under a trend pass
- One polarity table shared by the diff engine and the classifier
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

# ============================================================================
# ENUMS
# ============================================================================


class Gender(Enum):
    """Subject gender as used by the regression formulas"""

    MALE = "male"
    FEMALE = "female"


class FatMethod(Enum):
    """Source of truth for body-fat percentage"""

    BIOIMPEDANCE = "Bioimpedance"
    SKINFOLDS = "Skinfolds"
    TAPE = "Tape"


class TmbMethod(Enum):
    """Basal metabolic rate formula"""

    MIFFLIN_ST_JEOR = "Mifflin-St Jeor"
    HARRIS_BENEDICT = "Harris-Benedict"
    TEN_HAAF = "Ten Haaf"  # athletes
    CUNNINGHAM = "Cunningham"


class Polarity(Enum):
    """Which direction of change counts as progress for a metric"""

    LOWER_IS_BETTER = "lower_is_better"
    HIGHER_IS_BETTER = "higher_is_better"
    NEUTRAL = "neutral"


class TrendDirection(Enum):
    """Interpretation of a display delta under a metric's polarity"""

    IMPROVEMENT = "improvement"
    REGRESSION = "regression"
    STABLE = "stable"
    CHANGED = "changed"  # moved, but the metric has no preferred direction
    UNKNOWN = "unknown"


# ============================================================================
# MEASUREMENT GROUPS
# ============================================================================


@dataclass(frozen=True)
class Skinfolds:
    """Jackson-Pollock 7-site caliper readings in millimeters"""

    chest: Optional[float] = None
    axillary: Optional[float] = None
    triceps: Optional[float] = None
    subscapular: Optional[float] = None
    abdominal: Optional[float] = None
    suprailiac: Optional[float] = None
    thigh: Optional[float] = None

    def values(self) -> Tuple[Optional[float], ...]:
        return (
            self.chest,
            self.axillary,
            self.triceps,
            self.subscapular,
            self.abdominal,
            self.suprailiac,
            self.thigh,
        )


@dataclass(frozen=True)
class Girths:
    """Central circumferences in centimeters"""

    chest: Optional[float] = None
    waist: Optional[float] = None
    abdomen: Optional[float] = None
    hips: Optional[float] = None


@dataclass(frozen=True)
class BilateralGirths:
    """Limb circumferences measured on both sides, in centimeters"""

    arm_right: Optional[float] = None
    arm_left: Optional[float] = None
    thigh_right: Optional[float] = None
    thigh_left: Optional[float] = None
    calf_right: Optional[float] = None
    calf_left: Optional[float] = None

    def pairs(self) -> Dict[str, Tuple[Optional[float], Optional[float]]]:
        """(right, left) readings keyed by limb"""
        return {
            "arm": (self.arm_right, self.arm_left),
            "thigh": (self.thigh_right, self.thigh_left),
            "calf": (self.calf_right, self.calf_left),
        }


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================


@dataclass(frozen=True)
class MeasurementInput:
    """One normalized RawInput snapshot; every number is optional"""

    age: Optional[float] = None
    height: Optional[float] = None  # cm
    weight: Optional[float] = None  # kg
    body_fat_manual: Optional[float] = None  # %
    muscle_mass: Optional[float] = None  # %
    visceral_fat: Optional[float] = None
    metabolic_age: Optional[float] = None
    gender: Optional[Gender] = None
    fat_method: FatMethod = FatMethod.BIOIMPEDANCE
    tmb_method: TmbMethod = TmbMethod.MIFFLIN_ST_JEOR
    skinfolds: Skinfolds = field(default_factory=Skinfolds)
    girths: Girths = field(default_factory=Girths)
    bilateral_girths: BilateralGirths = field(default_factory=BilateralGirths)


@dataclass(frozen=True)
class BodyFatEstimate:
    """Result of the body-fat estimator"""

    method: FatMethod
    percent: Optional[float] = None
    density: Optional[float] = None  # g/cm^3, skinfold method only


@dataclass(frozen=True)
class DerivedMetrics:
    """Calculated metrics for one measurement snapshot"""

    bmi: Optional[float] = None
    bmr: Optional[float] = None  # kcal/day
    maintenance_calories: Optional[float] = None  # kcal/day
    lean_mass_percent_suggestion: Optional[float] = None
    suggested_metabolic_age: Optional[float] = None
    suggested_visceral_fat: Optional[float] = None


@dataclass(frozen=True)
class Assessment:
    """
    Persisted evaluation record.

    Built once by ``core.build_assessment`` and never mutated afterwards;
    edits create a new record. Numbers that could not be computed are None.
    ``estimated_fields`` names the fields filled from advisory heuristics
    rather than measured.
    """

    id: str
    subject_id: str
    timestamp: str  # ISO-8601
    fat_method: FatMethod
    tmb_method: TmbMethod
    age: Optional[float] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    bmi: Optional[float] = None
    gender: Optional[Gender] = None
    body_fat_percent: Optional[float] = None
    muscle_mass_percent: Optional[float] = None
    visceral_fat: Optional[float] = None
    metabolic_age: Optional[float] = None
    girths: Girths = field(default_factory=Girths)
    bilateral_girths: BilateralGirths = field(default_factory=BilateralGirths)
    skinfolds: Skinfolds = field(default_factory=Skinfolds)
    estimated_fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SymmetryScore:
    """Bilateral symmetry score; value is None when no pair was measured"""

    value: Optional[int]
    measured_pair_count: int
    pair_differences: Dict[str, float] = field(default_factory=dict)  # limb -> %


@dataclass(frozen=True)
class MetricDiff:
    """Change of one metric between two assessments"""

    metric: str
    current: Optional[float]
    comparison: Optional[float]
    delta: Optional[float]  # raw difference
    display_delta: Optional[float]  # noise below the threshold folded to 0
    direction: TrendDirection


@dataclass(frozen=True)
class TrendReport:
    """Comparison of the newest assessment against the previous and first ones"""

    current: Assessment
    previous: Optional[Assessment]
    initial: Assessment
    since_previous: Dict[str, MetricDiff] = field(default_factory=dict)
    since_initial: Dict[str, MetricDiff] = field(default_factory=dict)


# ============================================================================
# CONSTANTS AND CONFIGURATIONS
# ============================================================================

# Deltas smaller than this are floating noise and display as zero
DIFF_NOISE_THRESHOLD = 0.1

# Direction of progress per metric. Girths of the limbs are framed as
# strength gains; central girths that track fat loss go the other way.
METRIC_POLARITY = {
    "weight": Polarity.LOWER_IS_BETTER,
    "bmi": Polarity.LOWER_IS_BETTER,
    "body_fat_percent": Polarity.LOWER_IS_BETTER,
    "visceral_fat": Polarity.LOWER_IS_BETTER,
    "metabolic_age": Polarity.LOWER_IS_BETTER,
    "muscle_mass_percent": Polarity.HIGHER_IS_BETTER,
    "waist": Polarity.LOWER_IS_BETTER,
    "abdomen": Polarity.LOWER_IS_BETTER,
    "chest": Polarity.NEUTRAL,
    "hips": Polarity.NEUTRAL,
    "arm_right": Polarity.HIGHER_IS_BETTER,
    "arm_left": Polarity.HIGHER_IS_BETTER,
    "thigh_right": Polarity.HIGHER_IS_BETTER,
    "thigh_left": Polarity.HIGHER_IS_BETTER,
    "calf_right": Polarity.HIGHER_IS_BETTER,
    "calf_left": Polarity.HIGHER_IS_BETTER,
    "skinfold_chest": Polarity.LOWER_IS_BETTER,
    "skinfold_axillary": Polarity.LOWER_IS_BETTER,
    "skinfold_triceps": Polarity.LOWER_IS_BETTER,
    "skinfold_subscapular": Polarity.LOWER_IS_BETTER,
    "skinfold_abdominal": Polarity.LOWER_IS_BETTER,
    "skinfold_suprailiac": Polarity.LOWER_IS_BETTER,
    "skinfold_thigh": Polarity.LOWER_IS_BETTER,
}

# Metrics shown by default in trend reports and comparison tables
DEFAULT_TREND_METRICS = (
    "weight",
    "bmi",
    "body_fat_percent",
    "muscle_mass_percent",
    "visceral_fat",
    "metabolic_age",
    "waist",
    "abdomen",
)
