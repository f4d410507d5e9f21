"""Shared fixtures for the BodyCompTracker test suite."""

import pytest

from shared_models import (
    Assessment,
    BilateralGirths,
    FatMethod,
    Skinfolds,
    TmbMethod,
)


def make_assessment(
    timestamp="2024-01-01T09:00:00Z",
    assessment_id="a-1",
    subject_id="student-1",
    **fields,
):
    """Assessment with sensible defaults; keyword fields override them."""
    fields.setdefault("fat_method", FatMethod.BIOIMPEDANCE)
    fields.setdefault("tmb_method", TmbMethod.MIFFLIN_ST_JEOR)
    return Assessment(
        id=assessment_id, subject_id=subject_id, timestamp=timestamp, **fields
    )


@pytest.fixture
def assessment_factory():
    return make_assessment


@pytest.fixture
def sample_raw_input():
    """A bioimpedance snapshot as typed on the coach form"""
    return {
        "age": "34",
        "height": "178",
        "weight": "84.2",
        "gender": "male",
        "fatCalculationMethod": "Bioimpedance",
        "bodyFatManual": "22.5",
        "muscleMass": "",
        "visceralFat": "  ",
        "metabolicAge": None,
        "waist": "92",
        "abdomen": "95.5",
        "armRight": "36",
        "armLeft": "34",
    }


@pytest.fixture
def skinfold_raw_input():
    """A skinfold snapshot (sum 90 mm)"""
    return {
        "age": "25",
        "height": "180",
        "weight": "80",
        "gender": "male",
        "fatCalculationMethod": "Skinfolds",
        "bodyFatManual": "30",
        "sf_chest": "10",
        "sf_axillary": "8",
        "sf_triceps": "12",
        "sf_subscapular": "15",
        "sf_abdominal": "18",
        "sf_suprailiac": "14",
        "sf_thigh": "13",
    }


@pytest.fixture
def full_bilateral_girths():
    return BilateralGirths(
        arm_right=36.0,
        arm_left=34.0,
        thigh_right=60.0,
        thigh_left=60.0,
        calf_right=40.0,
        calf_left=38.0,
    )


@pytest.fixture
def male_skinfolds():
    return Skinfolds(
        chest=10, axillary=8, triceps=12, subscapular=15, abdominal=18, suprailiac=14, thigh=13
    )


